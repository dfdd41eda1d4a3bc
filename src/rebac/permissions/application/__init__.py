"""Typed tuple DSL: mutation builder, check builder and introspector."""

from permissions.application.builder import PermissionBuilder
from permissions.application.checker import PermissionChecker
from permissions.application.introspector import PermissionsIntrospector
from permissions.application.permissions import Permissions
from permissions.application.services import Groups, Resources, Users

__all__ = [
    "Groups",
    "PermissionBuilder",
    "PermissionChecker",
    "Permissions",
    "PermissionsIntrospector",
    "Resources",
    "Users",
]
