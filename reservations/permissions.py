from rest_framework.permissions import BasePermission

from .models import StaffProfile

Role = StaffProfile.Role

STAFF_ROLES = (Role.SUPERADMIN, Role.SUPERVISOR, Role.RECEPTIONIST)


def staff_role(user):
    if not user or not user.is_authenticated:
        return None
    profile = getattr(user, 'staff_profile', None)
    if profile is not None:
        return profile.role
    if user.is_superuser:
        return Role.SUPERADMIN
    return None


def require_roles(*roles):
    """Permission class admitting authenticated staff with one of ``roles``."""

    class HasRole(BasePermission):
        message = 'Forbidden: insufficient privileges'

        def has_permission(self, request, view):
            return staff_role(request.user) in roles

    HasRole.__name__ = f"HasRole[{','.join(roles)}]"
    return HasRole
