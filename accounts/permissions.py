"""
Admin Page Permissions

DRF permission that runs the Session Guard for the page a view belongs to.
"""
from rest_framework import permissions

from core.exceptions import AuthorizationDenied
from .guard import SessionContext, SessionGuard, public_entry_url


class IsSiteAdministrator(permissions.BasePermission):
    """
    Grants access only to the site administrator.

    Views declare the page they serve with `guard_page`. A denial raises
    AuthorizationDenied carrying the redirect target instead of rendering
    any part of the page.
    """

    message = 'Access Denied: You must be logged in as an administrator.'

    def has_permission(self, request, view):
        page = getattr(view, 'guard_page', None)
        if page is None:
            raise AuthorizationDenied(self.message, redirect_to=public_entry_url(), reason='no-page')

        guard = SessionGuard(SessionContext(request.session))
        decision = guard.check(page, request.user)
        if not decision:
            raise AuthorizationDenied(
                self.message,
                redirect_to=decision.redirect_to,
                reason=decision.reason,
                status_code=decision.status_code,
            )
        return True
