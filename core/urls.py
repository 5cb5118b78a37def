"""
URL configuration for core project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, include
from django.views.generic import RedirectView

urlpatterns = [
    path('', RedirectView.as_view(url='/admin/', permanent=False)),
    path('admin/', admin.site.urls),
    path('api/auth/', include('accounts.urls')),
    path('api/contact/', include('contact.urls')),  # Public contact form
    path('api/careers/', include('careers.urls')),  # Public job board and applications
    path('api/admin/', include('accounts.admin_urls')),  # Page guard
    path('api/admin/', include('dashboards.urls')),  # Dashboard overview
    path('api/admin/', include('contact.admin_urls')),  # Contact list page
    path('api/admin/', include('careers.admin_urls')),  # Job listings and applicants
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
