"""
Contact Management Admin URL Configuration

Admin URLs for the contact list page.
"""
from django.urls import path
from .views import (
    ContactMessageListView,
    ContactMessageDetailView,
    ContactMessageReplyView,
    ContactMessageStatusView,
    ContactActionDispatchView,
)

app_name = 'contact_admin'

urlpatterns = [
    path('contacts/', ContactMessageListView.as_view(), name='message-list'),
    path('contacts/actions/', ContactActionDispatchView.as_view(), name='message-actions'),
    path('contacts/<uuid:id>/', ContactMessageDetailView.as_view(), name='message-detail'),
    path('contacts/<uuid:id>/reply/', ContactMessageReplyView.as_view(), name='message-reply'),
    path('contacts/<uuid:id>/status/', ContactMessageStatusView.as_view(), name='message-status'),
]
