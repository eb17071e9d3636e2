from rest_framework import permissions


def is_privileged(user):
    """True when the caller may perform privileged order actions (owner/admin)"""
    return bool(
        user is not None
        and user.is_authenticated
        and getattr(user, 'is_admin_role', False)
    )


class IsAdminRole(permissions.BasePermission):
    """
    Permission to only allow owners and admins
    """
    message = 'Admin access required.'

    def has_permission(self, request, view):
        return is_privileged(request.user)


class IsStaffRole(permissions.BasePermission):
    """
    Permission to allow any back-office role (owner, admin, kitchen, staff)
    """
    message = 'Staff access required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and getattr(user, 'is_staff_role', False)
        )
