"""
Careers Admin URL Configuration

Job listing manager and applicants pages.
"""
from django.urls import path
from .views import (
    ApplicantActionDispatchView,
    ApplicantDecisionView,
    ApplicantDetailView,
    ApplicantListView,
    JobListingAdminDetailView,
    JobListingAdminView,
)

app_name = 'careers_admin'

urlpatterns = [
    path('jobs/', JobListingAdminView.as_view(), name='job-list'),
    path('jobs/<uuid:id>/', JobListingAdminDetailView.as_view(), name='job-detail'),
    path('applicants/', ApplicantListView.as_view(), name='applicant-list'),
    path('applicants/actions/', ApplicantActionDispatchView.as_view(), name='applicant-actions'),
    path('applicants/<uuid:id>/', ApplicantDetailView.as_view(), name='applicant-detail'),
    path('applicants/<uuid:id>/accept/', ApplicantDecisionView.as_view(decision='accept'), name='applicant-accept'),
    path('applicants/<uuid:id>/reject/', ApplicantDecisionView.as_view(decision='reject'), name='applicant-reject'),
]
