"""Check builder for relationship checks.

Accumulates typed check intents and evaluates them with one of four
combinators. ``validate_single`` evaluates only the *first* accumulated check;
``validate``, ``validate_all`` and ``validate_any`` evaluate the whole batch
in one request.
"""

from __future__ import annotations

from typing import Any

from permissions.application.observability import (
    DefaultPermissionsProbe,
    PermissionsProbe,
)
from permissions.ports.exceptions import OperationSequenceError
from shared_kernel.authorization.entities import (
    Accessor,
    Entity,
    Resource,
    require_capability,
)
from shared_kernel.authorization.naming import (
    RelationSelector,
    qualify,
    resolve_relation,
)
from shared_kernel.authorization.protocols import AuthorizationProvider
from shared_kernel.authorization.types import CheckRequest, CheckResult


class PermissionChecker:
    """Builder to accumulate checks and validate them in one call.

    Example:
        >>> allowed = await (
        ...     PermissionChecker(provider)
        ...     .can(User, "alice", Form.Perform.edit, Form, "241")
        ...     .can_also(Form.Perform.edit, Form, "242")
        ...     .validate_all()
        ... )
    """

    def __init__(
        self,
        provider: AuthorizationProvider,
        probe: PermissionsProbe | None = None,
    ):
        self._provider = provider
        self._probe = probe or DefaultPermissionsProbe()
        self._checks: list[CheckRequest] = []
        self._last_accessor: tuple[type[Entity], str] | None = None

    @property
    def pending_checks(self) -> tuple[CheckRequest, ...]:
        return tuple(self._checks)

    def can(
        self,
        accessor_type: type[Accessor],
        accessor_id: str,
        relation: RelationSelector,
        resource_type: type[Resource],
        resource_id: str,
        context: dict[str, Any] | None = None,
    ) -> PermissionChecker:
        """Add a check that the accessor holds ``relation`` on the resource.

        Args:
            accessor_type: Generated accessor class
            accessor_id: Accessor identifier
            relation: Relation selector resolved against ``resource_type``
            resource_type: Generated resource class
            resource_id: Resource identifier
            context: Optional check-time context from the generated
                ``CheckContexts``
        """
        require_capability(accessor_type, Accessor, "Accessor")
        require_capability(resource_type, Resource, "Resource")
        self._checks.append(
            CheckRequest(
                object=qualify(resource_type, resource_id),
                relation=resolve_relation(relation, resource_type),
                user=qualify(accessor_type, accessor_id),
                context=context,
            )
        )
        self._last_accessor = (accessor_type, accessor_id)
        return self

    has = can

    def can_also(
        self,
        relation: RelationSelector,
        resource_type: type[Resource],
        resource_id: str,
        context: dict[str, Any] | None = None,
    ) -> PermissionChecker:
        """Add a check for the accessor of the previous ``can``.

        Raises:
            OperationSequenceError: If no check has been added yet
        """
        if self._last_accessor is None:
            raise OperationSequenceError("No previous accessor to check relation for.")
        accessor_type, accessor_id = self._last_accessor
        return self.can(
            accessor_type, accessor_id, relation, resource_type, resource_id, context
        )

    has_also = can_also

    async def validate_single(self) -> bool:
        """Validate the first check that was added; any others are ignored.

        Returns:
            The first check's result; False without a request if none were added
        """
        if not self._checks:
            return False

        allowed = await self._provider.check(self._checks[0])

        check_count = len(self._checks)
        self._reset()
        self._probe.checks_validated(
            mode="single", check_count=check_count, allowed=allowed
        )
        return allowed

    async def validate(self) -> list[CheckResult]:
        """Validate every accumulated check with one batch request.

        Returns:
            One result per check, in the order the checks were added
        """
        if not self._checks:
            return []

        checks = list(self._checks)
        allowed = await self._provider.batch_check(checks)

        results = [
            CheckResult(allowed=flag, details=check.as_tuple())
            for check, flag in zip(checks, allowed, strict=True)
        ]
        self._reset()
        return results

    async def validate_all(self) -> bool:
        """True when every accumulated check passes (vacuously True when empty)."""
        results = await self.validate()
        all_allowed = all(r.allowed for r in results)
        self._probe.checks_validated(
            mode="all", check_count=len(results), allowed=all_allowed
        )
        return all_allowed

    async def validate_any(self) -> bool:
        """True when at least one accumulated check passes (False when empty)."""
        results = await self.validate()
        any_allowed = any(r.allowed for r in results)
        self._probe.checks_validated(
            mode="any", check_count=len(results), allowed=any_allowed
        )
        return any_allowed

    def _reset(self) -> None:
        self._checks.clear()
        self._last_accessor = None
