"""
Role-based permission building blocks shared by the API apps.
"""
from rest_framework import permissions
from apps.authz.models import RoleChoices


def user_role_names(user):
    """Set of role names assigned to ``user`` (empty for anonymous users)."""
    if not user or not user.is_authenticated:
        return set()
    return set(user.user_roles.values_list('role__name', flat=True))


class RoleMatrixPermission(permissions.BasePermission):
    """
    Permission driven by three role sets.

    Subclasses declare which roles may read (safe methods), write
    (POST/PUT/PATCH) and delete.
    """
    read_roles = frozenset()
    write_roles = frozenset()
    delete_roles = frozenset({RoleChoices.ADMIN})

    def has_permission(self, request, view):
        roles = user_role_names(request.user)
        if not roles:
            return False

        if request.method in permissions.SAFE_METHODS:
            return bool(roles & self.read_roles)

        if request.method in ('POST', 'PATCH', 'PUT'):
            return bool(roles & self.write_roles)

        if request.method == 'DELETE':
            return bool(roles & self.delete_roles)

        return False


class PractitionerPermission(RoleMatrixPermission):
    """Everyone on staff can list practitioners. Only Admin edits them."""
    read_roles = frozenset(RoleChoices.values)
    write_roles = frozenset({RoleChoices.ADMIN})
