"""
Dashboard URL Configuration
"""

from django.urls import path
from .views import AdminDashboardView

app_name = 'dashboards'

urlpatterns = [
    path('dashboard/', AdminDashboardView.as_view(), name='admin-dashboard'),
]
