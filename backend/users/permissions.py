# users/permissions.py
from rest_framework import permissions

from .identity import Identity
from .models import UserProfile


def get_request_identity(request):
    """Identity of the caller, from the gate when present, else from ``request.user``."""
    if isinstance(request.auth, Identity):
        return request.auth
    if request.user and request.user.is_authenticated:
        return Identity.from_user(request.user)
    return None


class HasRole(permissions.BasePermission):
    """
    Base permission: the caller must be authenticated and hold one of
    ``allowed_roles``.
    """
    allowed_roles = ()

    def has_permission(self, request, view):
        identity = get_request_identity(request)
        return identity is not None and identity.has_role(*self.allowed_roles)


class IsAdminRole(HasRole):
    """
    Permission class to check if user has Admin role
    """
    allowed_roles = (UserProfile.Role.ADMIN,)


class IsAdminOrStaffRole(HasRole):
    allowed_roles = (UserProfile.Role.ADMIN, UserProfile.Role.STAFF)


class IsAdminOrOwnerRole(HasRole):
    """Financial report access: admins and villa owners."""
    allowed_roles = (UserProfile.Role.ADMIN, UserProfile.Role.OWNER)
