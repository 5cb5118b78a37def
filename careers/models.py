"""
Careers Models

Job listings and job applicants.
"""
import uuid
from django.db import models
from django.core.validators import MaxValueValidator, MinValueValidator
from django.utils import timezone


class JobListing(models.Model):
    """
    An open position shown on the careers page.

    Created and deleted by the administrator; never edited.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    title = models.CharField(max_length=200)
    location = models.CharField(max_length=200)
    department = models.CharField(max_length=100, db_index=True)
    description = models.TextField()

    timestamp = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="When the listing was published"
    )

    class Meta:
        db_table = 'job_listings'
        ordering = ['-timestamp']
        verbose_name = 'Job Listing'
        verbose_name_plural = 'Job Listings'

    def __str__(self):
        return f"{self.title} ({self.department})"


class JobApplicant(models.Model):
    """
    Application submitted from the careers page.

    Status workflow: Pending -> Accepted | Rejected. Both decisions are final.
    """

    class Status(models.TextChoices):
        PENDING = 'Pending', 'Pending'
        ACCEPTED = 'Accepted', 'Accepted'
        REJECTED = 'Rejected', 'Rejected'

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    # Applicant
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=255, blank=True, default='')
    age = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(16), MaxValueValidator(100)]
    )
    degree = models.CharField(max_length=200, blank=True, default='')
    experience = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Years of experience"
    )

    # Position
    job = models.ForeignKey(
        JobListing,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='applicants',
        help_text="Listing applied for, if it still exists"
    )
    job_title_applied = models.CharField(max_length=200, blank=True, default='')
    department_applied = models.CharField(max_length=100, blank=True, default='', db_index=True)

    # Resume
    resume = models.FileField(upload_to='resumes/', blank=True, default='')
    resume_link = models.URLField(max_length=500, blank=True, default='')

    # Availability
    available_start = models.DateField(null=True, blank=True)
    available_end = models.DateField(null=True, blank=True)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )

    timestamp = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="When the application was submitted"
    )

    class Meta:
        db_table = 'job_applicants'
        ordering = ['-timestamp']
        verbose_name = 'Job Applicant'
        verbose_name_plural = 'Job Applicants'
        indexes = [
            models.Index(fields=['status', 'timestamp'], name='applicant_status_ts_idx'),
        ]

    def __str__(self):
        return f"{self.full_name} - {self.job_title_applied or 'N/A'} ({self.status})"

    @property
    def full_name(self):
        return f"{self.first_name or ''} {self.last_name or ''}".strip()
