"""Role-based permission classes shared by the ProjectFlow APIs."""

from collections.abc import Iterable

from rest_framework.permissions import SAFE_METHODS
from rest_framework.permissions import BasePermission

ROLE_ADMIN = "Admin"
ROLE_PROJECT_MANAGER = "ProjectManager"
ROLE_DEVELOPER = "Developer"
ROLES = (ROLE_ADMIN, ROLE_PROJECT_MANAGER, ROLE_DEVELOPER)


def _user_in_groups(user, names: Iterable[str]) -> bool:
    groups = getattr(user, "groups", None)
    names_list = list(names)
    if not groups or not names_list:
        return False
    return groups.filter(name__in=names_list).exists()


def is_admin(user) -> bool:
    return bool(getattr(user, "is_staff", False)) or _user_in_groups(
        user, [ROLE_ADMIN]
    )


class _RolePermission(BasePermission):
    """Base helper to gate unsafe methods by role names.

    Reads stay open to any authenticated user.
    """

    allowed_roles: tuple[str, ...] = ()
    allow_staff: bool = True

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if not (user and getattr(user, "is_authenticated", False)):
            return False
        if request.method in SAFE_METHODS:
            return True
        if self.allow_staff and getattr(user, "is_staff", False):
            return True
        return _user_in_groups(user, self.allowed_roles)


class IsDeveloperCanWrite(_RolePermission):
    allowed_roles = (ROLE_ADMIN, ROLE_PROJECT_MANAGER, ROLE_DEVELOPER)


class IsProjectManagerCanWrite(_RolePermission):
    allowed_roles = (ROLE_ADMIN, ROLE_PROJECT_MANAGER)


class IsOwnerOrAdmin(BasePermission):
    """Object-level write check against the view's ``owner_field``."""

    def has_object_permission(self, request, view, obj) -> bool:
        if request.method in SAFE_METHODS:
            return True
        owner_field = getattr(view, "owner_field", "user_id")
        if getattr(obj, owner_field, None) == request.user.id:
            return True
        return is_admin(request.user)


class IsAdminRole(BasePermission):
    """Staff or members of the Admin group, for every method."""

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if not (user and getattr(user, "is_authenticated", False)):
            return False
        return is_admin(user)
