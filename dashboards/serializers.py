"""
Dashboard Serializers
"""
from rest_framework import serializers

from careers.models import JobApplicant
from contact.models import ContactMessage


class LatestApplicationSerializer(serializers.ModelSerializer):

    full_name = serializers.ReadOnlyField()

    class Meta:
        model = JobApplicant
        fields = ['id', 'full_name', 'email', 'job_title_applied', 'status', 'timestamp']
        read_only_fields = fields


class LatestContactSerializer(serializers.ModelSerializer):

    class Meta:
        model = ContactMessage
        fields = ['id', 'name', 'email', 'subject', 'category', 'status', 'timestamp']
        read_only_fields = fields


class ChartSerializer(serializers.Serializer):
    labels = serializers.ListField(child=serializers.CharField())
    data = serializers.ListField(child=serializers.IntegerField())


class DashboardOverviewSerializer(serializers.Serializer):
    total_applicants = serializers.IntegerField()
    pending_applicants = serializers.IntegerField()
    accepted_applicants = serializers.IntegerField()
    total_contacts = serializers.IntegerField()
    applications_per_day = ChartSerializer()
    applications_per_week = ChartSerializer()
    latest_applications = LatestApplicationSerializer(many=True)
    latest_contacts = LatestContactSerializer(many=True)
