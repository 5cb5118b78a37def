"""
Careers Serializers
"""
from django.utils.html import strip_tags
from rest_framework import serializers

from .models import JobApplicant, JobListing


class JobListingSerializer(serializers.ModelSerializer):

    class Meta:
        model = JobListing
        fields = ['id', 'title', 'location', 'department', 'description', 'timestamp']
        read_only_fields = ['id', 'timestamp']


class JobListingCreateSerializer(serializers.Serializer):
    """All four fields are required."""

    title = serializers.CharField(max_length=200)
    location = serializers.CharField(max_length=200)
    department = serializers.CharField(max_length=100)
    description = serializers.CharField()


class JobApplicationSubmitSerializer(serializers.Serializer):
    """
    Public job application.

    `job` is the id of the listing applied for; its department is copied
    onto the application.
    """

    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    email = serializers.EmailField(max_length=255)
    age = serializers.IntegerField(min_value=16, max_value=100, required=False, allow_null=True)
    degree = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    experience = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    job = serializers.UUIDField(required=False, allow_null=True)
    job_title_applied = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    resume = serializers.FileField(required=False, allow_null=True)
    resume_link = serializers.URLField(max_length=500, required=False, allow_blank=True, default='')
    available_start = serializers.DateField(required=False, allow_null=True)
    available_end = serializers.DateField(required=False, allow_null=True)

    def validate_first_name(self, value):
        return strip_tags(value).strip()

    def validate_last_name(self, value):
        return strip_tags(value).strip()

    def validate_email(self, value):
        return value.lower()

    def validate(self, attrs):
        start = attrs.get('available_start')
        end = attrs.get('available_end')
        if start and end and end < start:
            raise serializers.ValidationError(
                {'available_end': 'End of availability must not be before its start.'}
            )
        return attrs


class JobApplicantListSerializer(serializers.ModelSerializer):
    """Row of the applicants page, with its available actions."""

    full_name = serializers.ReadOnlyField()

    actions = serializers.SerializerMethodField()

    class Meta:
        model = JobApplicant
        fields = [
            'id', 'first_name', 'last_name', 'full_name', 'email',
            'job_title_applied', 'department_applied', 'status',
            'timestamp', 'actions'
        ]
        read_only_fields = fields

    def get_actions(self, obj):
        workflow = self.context.get('workflow')
        return workflow.actions_for(obj) if workflow else []


class JobApplicantDetailSerializer(JobApplicantListSerializer):

    resume_url = serializers.SerializerMethodField()

    class Meta(JobApplicantListSerializer.Meta):
        fields = JobApplicantListSerializer.Meta.fields + [
            'age', 'degree', 'experience', 'job', 'resume_url', 'resume_link',
            'available_start', 'available_end'
        ]
        read_only_fields = fields

    def get_resume_url(self, obj):
        if not obj.resume:
            return None
        request = self.context.get('request')
        url = obj.resume.url
        return request.build_absolute_uri(url) if request else url


class ApplicantActionSerializer(serializers.Serializer):
    """A (record id, action) pair sent back from a list row."""

    id = serializers.UUIDField()
    action = serializers.CharField(max_length=32)
