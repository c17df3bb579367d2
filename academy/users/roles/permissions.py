"""
Academy Role Permissions

Maps every role to the set of named permissions it grants and exposes DRF
permission classes built on that map.

Author: Academy Development Team
Version: 1.0.0
"""

from typing import FrozenSet, Type

from rest_framework import permissions
from rest_framework.request import Request

from ..models import Profile, Role

PERMISSIONS: FrozenSet[str] = frozenset(
    {
        "manage_users",
        "manage_departments",
        "manage_groups",
        "manage_modules",
        "manage_questions",
        "manage_notes",
        "manage_assessments",
        "post_notices",
        "manage_analytics",
        "view_analytics",
        "take_assessments",
    }
)

_STAFF_PERMISSIONS = frozenset(
    {
        "manage_modules",
        "manage_questions",
        "manage_notes",
        "manage_assessments",
        "post_notices",
        "view_analytics",
    }
)

ROLE_PERMISSIONS = {
    Role.ADMIN.value: PERMISSIONS,
    Role.HOD.value: _STAFF_PERMISSIONS | {"manage_groups"},
    Role.TEACHER.value: _STAFF_PERMISSIONS,
    Role.STUDENT.value: frozenset({"take_assessments"}),
}


def role_of(user) -> str:
    """
    Get the platform role of a user.

    Users without a profile are treated as students.
    """
    if user is None or not user.is_authenticated:
        return ""
    try:
        return user.profile.role
    except Profile.DoesNotExist:
        return Role.STUDENT


def permissions_for(user) -> FrozenSet[str]:
    return ROLE_PERMISSIONS.get(role_of(user), frozenset())


def has_permission(user, name: str) -> bool:
    return name in permissions_for(user)


class HasRolePermission(permissions.BasePermission):
    """
    Grants access when the user's role carries ``required_permission``.

    Use :func:`require_permission` to build a class for a given permission.
    """

    required_permission: str = ""
    message = "Insufficient permissions"

    def has_permission(self, request: Request, view) -> bool:
        return bool(
            request.user
            and request.user.is_authenticated
            and has_permission(request.user, self.required_permission)
        )


def require_permission(name: str) -> Type[HasRolePermission]:
    """
    Build a permission class requiring the named role permission.

    Args:
        name: One of :data:`PERMISSIONS`

    Returns:
        A ``HasRolePermission`` subclass usable in ``permission_classes``
    """
    if name not in PERMISSIONS:
        raise ValueError(f"Unknown permission: {name}")
    return type(
        f"Require_{name}",
        (HasRolePermission,),
        {"required_permission": name},
    )


class IsAdminRole(permissions.BasePermission):
    message = "Admin access required"

    def has_permission(self, request: Request, view) -> bool:
        return role_of(request.user) == Role.ADMIN
