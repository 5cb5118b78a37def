"""
Careers URL Configuration (public)
"""
from django.urls import path
from .views import JobApplicationSubmitView, PublicJobListView

app_name = 'careers'

urlpatterns = [
    path('jobs/', PublicJobListView.as_view(), name='jobs'),
    path('apply/', JobApplicationSubmitView.as_view(), name='apply'),
]
