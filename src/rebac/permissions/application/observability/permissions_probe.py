"""Protocol for permissions DSL observability.

Defines the interface for domain probes that capture application-level
events for the mutation builder, the checker and the introspector. Failures
are not recorded here: they propagate to the caller unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PermissionsProbe(Protocol):
    """Domain probe for permissions DSL operations."""

    def changes_committed(
        self,
        written_count: int,
        deleted_count: int,
        transactional: bool,
    ) -> None:
        """Record that pending grants and revokes were committed."""
        ...

    def checks_validated(
        self,
        mode: str,
        check_count: int,
        allowed: bool,
    ) -> None:
        """Record that accumulated checks were evaluated."""
        ...

    def objects_listed(
        self,
        accessor: str,
        resource_type: str,
        relation: str | None,
        count: int,
    ) -> None:
        """Record that objects reachable by an accessor were listed."""
        ...

    def accessors_listed(
        self,
        resource: str,
        relation: str | None,
        count: int,
    ) -> None:
        """Record that accessors of an object were listed."""
        ...

    def with_context(self, context: ObservationContext) -> PermissionsProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPermissionsProbe:
    """Default implementation of PermissionsProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultPermissionsProbe:
        """Create a new probe with observation context bound."""
        return DefaultPermissionsProbe(logger=self._logger, context=context)

    def changes_committed(
        self,
        written_count: int,
        deleted_count: int,
        transactional: bool,
    ) -> None:
        """Record that pending grants and revokes were committed."""
        self._logger.info(
            "permissions_changes_committed",
            written_count=written_count,
            deleted_count=deleted_count,
            transactional=transactional,
            **self._get_context_kwargs(),
        )

    def checks_validated(
        self,
        mode: str,
        check_count: int,
        allowed: bool,
    ) -> None:
        """Record that accumulated checks were evaluated."""
        self._logger.debug(
            "permissions_checks_validated",
            mode=mode,
            check_count=check_count,
            allowed=allowed,
            **self._get_context_kwargs(),
        )

    def objects_listed(
        self,
        accessor: str,
        resource_type: str,
        relation: str | None,
        count: int,
    ) -> None:
        """Record that objects reachable by an accessor were listed."""
        self._logger.debug(
            "permissions_objects_listed",
            accessor=accessor,
            resource_type=resource_type,
            relation=relation,
            count=count,
            **self._get_context_kwargs(),
        )

    def accessors_listed(
        self,
        resource: str,
        relation: str | None,
        count: int,
    ) -> None:
        """Record that accessors of an object were listed."""
        self._logger.debug(
            "permissions_accessors_listed",
            resource=resource,
            relation=relation,
            count=count,
            **self._get_context_kwargs(),
        )
