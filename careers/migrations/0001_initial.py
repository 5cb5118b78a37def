import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='JobListing',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('location', models.CharField(max_length=200)),
                ('department', models.CharField(db_index=True, max_length=100)),
                ('description', models.TextField()),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, help_text='When the listing was published')),
            ],
            options={
                'verbose_name': 'Job Listing',
                'verbose_name_plural': 'Job Listings',
                'db_table': 'job_listings',
                'ordering': ['-timestamp'],
            },
        ),
        migrations.CreateModel(
            name='JobApplicant',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('first_name', models.CharField(max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('email', models.EmailField(blank=True, default='', max_length=255)),
                ('age', models.PositiveIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(16), django.core.validators.MaxValueValidator(100)])),
                ('degree', models.CharField(blank=True, default='', max_length=200)),
                ('experience', models.PositiveIntegerField(blank=True, help_text='Years of experience', null=True)),
                ('job_title_applied', models.CharField(blank=True, default='', max_length=200)),
                ('department_applied', models.CharField(blank=True, db_index=True, default='', max_length=100)),
                ('resume', models.FileField(blank=True, default='', upload_to='resumes/')),
                ('resume_link', models.URLField(blank=True, default='', max_length=500)),
                ('available_start', models.DateField(blank=True, null=True)),
                ('available_end', models.DateField(blank=True, null=True)),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('Accepted', 'Accepted'), ('Rejected', 'Rejected')], db_index=True, default='Pending', max_length=20)),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, help_text='When the application was submitted')),
                ('job', models.ForeignKey(blank=True, help_text='Listing applied for, if it still exists', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='applicants', to='careers.joblisting')),
            ],
            options={
                'verbose_name': 'Job Applicant',
                'verbose_name_plural': 'Job Applicants',
                'db_table': 'job_applicants',
                'ordering': ['-timestamp'],
                'indexes': [models.Index(fields=['status', 'timestamp'], name='applicant_status_ts_idx')],
            },
        ),
    ]
