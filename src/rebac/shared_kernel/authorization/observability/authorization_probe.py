"""Domain probe for authorization engine operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to relationship writes, checks and lookups
against the authorization engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthorizationProbe(Protocol):
    """Domain probe for authorization engine operations."""

    def relationships_written(
        self,
        written_count: int,
        deleted_count: int,
        transactional: bool,
    ) -> None:
        """Record that a commit was applied by the engine."""
        ...

    def relationships_write_failed(
        self,
        written_count: int,
        deleted_count: int,
        error: Exception,
    ) -> None:
        """Record that a commit was rejected."""
        ...

    def permission_checked(
        self,
        resource: str,
        permission: str,
        subject: str,
        granted: bool,
    ) -> None:
        """Record that a permission was checked."""
        ...

    def permission_check_failed(
        self,
        resource: str,
        permission: str,
        subject: str,
        error: Exception,
    ) -> None:
        """Record that checking a permission failed."""
        ...

    def bulk_check_completed(
        self,
        total_requests: int,
        permitted_count: int,
    ) -> None:
        """Record that a bulk permission check completed."""
        ...

    def bulk_check_failed(
        self,
        total_requests: int,
        error: Exception,
    ) -> None:
        """Record that a bulk permission check failed."""
        ...

    def lookup_completed(
        self,
        operation: str,
        result_count: int,
        **filters: Any,
    ) -> None:
        """Record that a lookup or read completed."""
        ...

    def lookup_failed(
        self,
        operation: str,
        error: Exception,
        **filters: Any,
    ) -> None:
        """Record that a lookup or read failed."""
        ...

    def schema_written(self) -> None:
        """Record that the engine schema was replaced."""
        ...

    def schema_write_failed(self, error: Exception) -> None:
        """Record that the engine rejected a schema."""
        ...

    def connection_failed(
        self,
        endpoint: str,
        error: Exception,
    ) -> None:
        """Record that connection to authorization system failed."""
        ...

    def with_context(self, context: ObservationContext) -> AuthorizationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthorizationProbe:
    """Default implementation of AuthorizationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAuthorizationProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthorizationProbe(logger=self._logger, context=context)

    def relationships_written(
        self,
        written_count: int,
        deleted_count: int,
        transactional: bool,
    ) -> None:
        """Record that a commit was applied by the engine."""
        self._logger.info(
            "authorization_relationships_written",
            written_count=written_count,
            deleted_count=deleted_count,
            transactional=transactional,
            **self._get_context_kwargs(),
        )

    def relationships_write_failed(
        self,
        written_count: int,
        deleted_count: int,
        error: Exception,
    ) -> None:
        """Record that a commit was rejected."""
        self._logger.error(
            "authorization_relationships_write_failed",
            written_count=written_count,
            deleted_count=deleted_count,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def permission_checked(
        self,
        resource: str,
        permission: str,
        subject: str,
        granted: bool,
    ) -> None:
        """Record that a permission was checked."""
        self._logger.debug(
            "authorization_permission_checked",
            resource=resource,
            permission=permission,
            subject=subject,
            granted=granted,
            **self._get_context_kwargs(),
        )

    def permission_check_failed(
        self,
        resource: str,
        permission: str,
        subject: str,
        error: Exception,
    ) -> None:
        """Record that checking a permission failed."""
        self._logger.error(
            "authorization_permission_check_failed",
            resource=resource,
            permission=permission,
            subject=subject,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def bulk_check_completed(
        self,
        total_requests: int,
        permitted_count: int,
    ) -> None:
        """Record that a bulk permission check completed."""
        self._logger.info(
            "authorization_bulk_check_completed",
            total_requests=total_requests,
            permitted_count=permitted_count,
            **self._get_context_kwargs(),
        )

    def bulk_check_failed(
        self,
        total_requests: int,
        error: Exception,
    ) -> None:
        """Record that a bulk permission check failed."""
        self._logger.error(
            "authorization_bulk_check_failed",
            total_requests=total_requests,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def lookup_completed(
        self,
        operation: str,
        result_count: int,
        **filters: Any,
    ) -> None:
        """Record that a lookup or read completed."""
        self._logger.debug(
            "authorization_lookup_completed",
            operation=operation,
            result_count=result_count,
            **filters,
            **self._get_context_kwargs(),
        )

    def lookup_failed(
        self,
        operation: str,
        error: Exception,
        **filters: Any,
    ) -> None:
        """Record that a lookup or read failed."""
        self._logger.error(
            "authorization_lookup_failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            **filters,
            **self._get_context_kwargs(),
        )

    def schema_written(self) -> None:
        """Record that the engine schema was replaced."""
        self._logger.info(
            "authorization_schema_written",
            **self._get_context_kwargs(),
        )

    def schema_write_failed(self, error: Exception) -> None:
        """Record that the engine rejected a schema."""
        self._logger.error(
            "authorization_schema_write_failed",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def connection_failed(
        self,
        endpoint: str,
        error: Exception,
    ) -> None:
        """Record that connection to authorization system failed."""
        self._logger.error(
            "authorization_connection_failed",
            endpoint=endpoint,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
