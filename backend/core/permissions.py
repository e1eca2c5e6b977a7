from rest_framework.permissions import BasePermission, SAFE_METHODS


def has_admin_role(user):
    return bool(user and user.is_authenticated and getattr(user, 'is_admin', False))


class IsAdminRole(BasePermission):
    """Allows access only to authenticated users with the ADMIN role"""
    message = 'Admin role required.'

    def has_permission(self, request, view):
        return has_admin_role(request.user)


class IsAdminRoleOrReadOnly(BasePermission):
    """Read-only requests are open, writes need the ADMIN role"""
    message = 'Admin role required.'

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return has_admin_role(request.user)
