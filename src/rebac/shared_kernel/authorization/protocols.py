"""Authorization provider protocol for engine abstraction.

Defines the interface the permissions DSL needs from the authorization
engine, allowing for swappable implementations (SpiceDB, mock, alternative
providers). Implementations own the transport; callers only build requests
and interpret responses.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from shared_kernel.authorization.types import (
    CheckRequest,
    RelationshipTuple,
    WriteResult,
)


class AuthorizationProvider(Protocol):
    """Protocol for authorization providers.

    Every method is a coroutine. Cancelling the awaiting task aborts the
    in-flight call and raises ``asyncio.CancelledError``. Engine failures
    surface as ``AuthorizationError``; there is no retry at this layer.
    """

    async def write(
        self,
        writes: Sequence[RelationshipTuple],
        deletes: Sequence[RelationshipTuple],
        transactional: bool = True,
    ) -> WriteResult:
        """Write and delete relationships in one commit.

        Args:
            writes: Relationships to create (may carry conditions)
            deletes: Relationships to remove
            transactional: When True all changes apply atomically; when
                False a tuple may be both removed and added in one commit

        Returns:
            The tuples actually written and deleted

        Raises:
            AuthorizationError: If the engine rejects the write
        """
        ...

    async def check(self, request: CheckRequest) -> bool:
        """Check a single relation.

        Returns:
            True if the relation is granted, False otherwise

        Raises:
            AuthorizationError: If the check fails
        """
        ...

    async def batch_check(self, requests: Sequence[CheckRequest]) -> list[bool]:
        """Check several relations in one request.

        Returns:
            One allowed flag per request, in request order

        Raises:
            AuthorizationError: If the batch or any item fails
        """
        ...

    async def list_objects(
        self,
        user: str,
        relation: str,
        object_type: str,
        context: dict[str, Any] | None = None,
    ) -> list[str]:
        """List objects of a type the user holds a relation on.

        Returns:
            Qualified object references (e.g., ["form:240"])
        """
        ...

    async def read(
        self,
        object_type: str,
        object_id: str | None = None,
        user: str | None = None,
    ) -> list[RelationshipTuple]:
        """Read stored relationships without evaluating any rule.

        Args:
            object_type: Resource type to read
            object_id: Optional resource id to narrow to one object
            user: Optional qualified subject to narrow to one accessor

        Returns:
            Matching relationship tuples
        """
        ...

    async def list_users(
        self,
        object: str,
        relation: str,
        user_type: str,
    ) -> list[str]:
        """List subjects of a type holding a relation on an object.

        Returns:
            Qualified subject references (e.g., ["user:alice"])
        """
        ...

    async def write_schema(self, schema: str) -> None:
        """Replace the engine schema (bootstrap and test provisioning only)."""
        ...

    async def close(self) -> None:
        """Release the underlying connection."""
        ...
