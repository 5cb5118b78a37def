"""
Management command to create the site administrator account.

Usage:
    python manage.py create_site_admin --password <password>

The account's email is ADMIN_EMAIL; the guard only admits that address.
"""
import os

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

User = get_user_model()


class Command(BaseCommand):
    help = 'Creates or updates the site administrator account (ADMIN_EMAIL)'

    def add_arguments(self, parser):
        parser.add_argument('--password', help='Password (default: ADMIN_PASSWORD env var)')
        parser.add_argument('--username', default='admin')

    def handle(self, *args, **options):
        email = getattr(settings, 'ADMIN_EMAIL', '')
        if not email:
            raise CommandError('ADMIN_EMAIL is not configured.')

        password = options['password'] or os.getenv('ADMIN_PASSWORD')
        if not password:
            raise CommandError('Provide --password or set ADMIN_PASSWORD.')

        username = options['username']

        with transaction.atomic():
            user = User.objects.filter(email=email).first()
            if user is not None:
                self.stdout.write(
                    self.style.WARNING(f'User with email {email} already exists.')
                )
                user.is_active = True
                user.is_staff = True
                user.set_password(password)
                user.save()
                self.stdout.write(self.style.SUCCESS(f'Updated existing user: {user.username}'))
            else:
                user = User.objects.create_user(
                    username=username,
                    email=email,
                    password=password,
                    is_staff=True,
                )
                self.stdout.write(self.style.SUCCESS(f'Created new user: {username}'))

        self.stdout.write('\n' + '=' * 60)
        self.stdout.write(f'Username:  {user.username}')
        self.stdout.write(f'Email:     {user.email}')
        self.stdout.write(f'Is Active: {user.is_active}')
        self.stdout.write('=' * 60)
        self.stdout.write('Sign in with POST /api/auth/login/ {"email", "password"}')
