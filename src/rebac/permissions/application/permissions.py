"""Entry point for building permissions against one engine client."""

from __future__ import annotations

from dataclasses import dataclass

from permissions.application.builder import PermissionBuilder
from permissions.application.checker import PermissionChecker
from permissions.application.introspector import PermissionsIntrospector
from permissions.application.observability import PermissionsProbe
from shared_kernel.authorization.protocols import AuthorizationProvider


@dataclass(frozen=True)
class Permissions:
    """Factories for builders bound to one provider.

    Each call returns a fresh builder, so one ``Permissions`` value can be
    shared freely while every unit of work gets its own accumulator.

    Example:
        >>> mutate, validate, introspect = Permissions.with_client(provider)
        >>> await mutate().add(User, "alice", Form.editor, Form, "224").commit()
    """

    provider: AuthorizationProvider
    transactional: bool = True
    probe: PermissionsProbe | None = None

    @classmethod
    def with_client(
        cls,
        provider: AuthorizationProvider,
        disable_transactions: bool = False,
        probe: PermissionsProbe | None = None,
    ) -> tuple:
        """Return ``(mutate, validate, introspect)`` factories for the provider."""
        permissions = cls(provider, not disable_transactions, probe)
        return permissions.mutate, permissions.validate, permissions.introspect

    @classmethod
    def with_client_no_tx(
        cls,
        provider: AuthorizationProvider,
        probe: PermissionsProbe | None = None,
    ) -> tuple:
        """Like ``with_client`` with non-transactional commits."""
        return cls.with_client(provider, disable_transactions=True, probe=probe)

    def mutate(self) -> PermissionBuilder:
        return PermissionBuilder(
            self.provider, transactional=self.transactional, probe=self.probe
        )

    def validate(self) -> PermissionChecker:
        return PermissionChecker(self.provider, probe=self.probe)

    def introspect(self) -> PermissionsIntrospector:
        return PermissionsIntrospector(self.provider, probe=self.probe)
