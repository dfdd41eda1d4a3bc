"""Observability for the permissions application layer."""

from permissions.application.observability.permissions_probe import (
    DefaultPermissionsProbe,
    PermissionsProbe,
)

__all__ = [
    "DefaultPermissionsProbe",
    "PermissionsProbe",
]
