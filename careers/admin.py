"""
Careers Django Admin Configuration

Applicant status is read-only here; decisions go through the admin actions,
which run ApplicantWorkflow and send the decision emails.
"""
from django.contrib import admin, messages

from core.exceptions import PersistenceFailure, StatusTransitionError
from .models import JobApplicant, JobListing
from .services import ApplicantWorkflow


@admin.register(JobListing)
class JobListingAdmin(admin.ModelAdmin):

    list_display = ['title', 'department', 'location', 'timestamp']
    list_filter = ['department', 'timestamp']
    search_fields = ['title', 'location', 'department', 'description']
    readonly_fields = ['id', 'timestamp']


@admin.register(JobApplicant)
class JobApplicantAdmin(admin.ModelAdmin):
    """Admin interface for job applicants."""

    list_display = [
        'full_name', 'email', 'job_title_applied', 'department_applied',
        'status', 'timestamp'
    ]

    list_filter = ['status', 'department_applied', 'timestamp']

    search_fields = ['first_name', 'last_name', 'email', 'job_title_applied']

    readonly_fields = ['id', 'status', 'timestamp']

    actions = ['accept_applicants', 'reject_applicants']

    fieldsets = (
        ('Applicant', {
            'fields': ('first_name', 'last_name', 'email', 'age', 'degree', 'experience')
        }),
        ('Position', {
            'fields': ('job', 'job_title_applied', 'department_applied', 'status')
        }),
        ('Resume & Availability', {
            'fields': ('resume', 'resume_link', 'available_start', 'available_end')
        }),
        ('Metadata', {
            'fields': ('id', 'timestamp'),
            'classes': ('collapse',)
        }),
    )

    def _decide(self, request, queryset, decision):
        workflow = ApplicantWorkflow()
        count = 0
        for applicant in queryset.filter(status=JobApplicant.Status.PENDING):
            try:
                outcome = getattr(workflow, decision)(applicant.pk)
            except (PersistenceFailure, StatusTransitionError) as exc:
                self.message_user(request, f'{applicant.full_name}: {exc}', messages.ERROR)
                continue
            count += 1
            if outcome.notification_failed:
                self.message_user(
                    request,
                    f'{applicant.full_name}: email not sent ({outcome.notification_error.text})',
                    messages.WARNING
                )
        return count

    def accept_applicants(self, request, queryset):
        count = self._decide(request, queryset, 'accept')
        self.message_user(request, f'{count} applicant(s) accepted.')
    accept_applicants.short_description = 'Accept selected pending applicants'

    def reject_applicants(self, request, queryset):
        count = self._decide(request, queryset, 'reject')
        self.message_user(request, f'{count} applicant(s) rejected.')
    reject_applicants.short_description = 'Reject selected pending applicants'
