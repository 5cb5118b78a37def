"""
Admin page guard URL.
"""
from django.urls import path

from .views import GuardCheckView

app_name = 'accounts_admin'

urlpatterns = [
    path('guard/<slug:page>/', GuardCheckView.as_view(), name='guard-check'),
]
