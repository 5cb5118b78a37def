import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ContactMessage',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(help_text='Name of the person contacting us', max_length=100)),
                ('email', models.EmailField(help_text='Email address for follow-up', max_length=255, validators=[django.core.validators.EmailValidator()])),
                ('subject', models.CharField(blank=True, default='', help_text='Subject line entered by the sender', max_length=200)),
                ('category', models.CharField(blank=True, db_index=True, default='', help_text='Category of the inquiry', max_length=50)),
                ('message', models.TextField(help_text='The actual message content')),
                ('status', models.CharField(choices=[('New', 'New'), ('Replied', 'Replied'), ('Ignored', 'Ignored')], db_index=True, default='New', help_text='Current status of the message', max_length=20)),
                ('ip_address', models.GenericIPAddressField(blank=True, help_text='IP address of the submitter (for spam prevention)', null=True)),
                ('user_agent', models.TextField(blank=True, default='', help_text='Browser user agent (for spam prevention)')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, help_text='When the message was submitted')),
                ('replied_at', models.DateTimeField(blank=True, help_text='When the latest reply was sent', null=True)),
            ],
            options={
                'verbose_name': 'Contact Message',
                'verbose_name_plural': 'Contact Messages',
                'db_table': 'contact_messages',
                'ordering': ['-timestamp'],
                'indexes': [
                    models.Index(fields=['status', 'timestamp'], name='contact_status_ts_idx'),
                    models.Index(fields=['category', 'status'], name='contact_category_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ContactMessageReply',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('subject', models.CharField(blank=True, default='', help_text='Subject line of the reply email', max_length=255)),
                ('reply_message', models.TextField(help_text='The reply message content')),
                ('email_sent_at', models.DateTimeField(blank=True, help_text='When the email was accepted by the relay', null=True)),
                ('timestamp', models.DateTimeField(default=django.utils.timezone.now, help_text='When the reply was created')),
                ('message', models.ForeignKey(help_text='The contact message being replied to', on_delete=django.db.models.deletion.CASCADE, related_name='replies', to='contact.contactmessage')),
                ('sent_by', models.ForeignKey(blank=True, help_text='Administrator who sent the reply', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='contact_replies', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Contact Message Reply',
                'verbose_name_plural': 'Contact Message Replies',
                'db_table': 'contact_message_replies',
                'ordering': ['timestamp'],
                'indexes': [
                    models.Index(fields=['message', 'timestamp'], name='contact_reply_msg_ts_idx'),
                ],
            },
        ),
    ]
