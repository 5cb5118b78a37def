"""
Contact Management URL Configuration
"""
from django.urls import path
from .views import ContactFormSubmitView

app_name = 'contact'

# Public URLs (no auth required)
public_urlpatterns = [
    path('submit', ContactFormSubmitView.as_view(), name='submit'),
]

urlpatterns = public_urlpatterns
