from rest_framework import permissions
from utils.constants import Role


class RoleBasedPermissions:
    """
    Reusable permission checks shared by the permission classes below.
    """

    @staticmethod
    def has_role(request, allowed_roles):
        """
        Generic role-based permission check.

        Args:
            request: HTTP request object
            allowed_roles (list): List of allowed role names

        Returns:
            bool: True if user has one of the allowed roles
        """
        if not request.user or not request.user.is_authenticated:
            return False

        return getattr(request.user, "role", None) in allowed_roles


class IsAdminUser(permissions.BasePermission):
    """
    Restricts access to users with the ADMIN role.

    Used for fleet, route and trip management endpoints.
    """

    def has_permission(self, request, view):
        return RoleBasedPermissions.has_role(request, [Role.ADMIN])


class PublicReadAdminWriteMixin:
    """
    Mixin giving different permissions per request method.

    - GET/HEAD/OPTIONS: anyone, authenticated or not (catalog browsing)
    - POST/PUT/PATCH/DELETE: admins only
    """

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.AllowAny()]
        return [IsAdminUser()]


class AdminOnlyPermissionMixin:
    """
    Mixin to restrict every action of a view to admin users.
    """

    def get_permissions(self):
        return [IsAdminUser()]
