"""Mutation builder for relationship grants and revokes.

Accumulates typed grant/revoke intents, resolves each one into a canonical
relationship tuple as it is added, and commits everything in one write
request.

A builder instance is a single-writer, per-unit-of-work object: do not share
one between concurrently running tasks. The provider it wraps can be shared.
"""

from __future__ import annotations

from collections.abc import Iterable

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
from shared_kernel.authorization.types import (
    ConditionInstance,
    RelationshipTuple,
    WriteResult,
)


class PermissionBuilder:
    """Builder to create a set of grants and revokes and commit them in one call.

    Example:
        >>> written, deleted = await (
        ...     PermissionBuilder(provider)
        ...     .add(User, "alice", Form.editor, Form, "224")
        ...     .add_also(Team.member, Team, "motion")
        ...     .commit()
        ... )
    """

    def __init__(
        self,
        provider: AuthorizationProvider,
        transactional: bool = True,
        probe: PermissionsProbe | None = None,
    ):
        """Create a builder.

        Args:
            provider: The authorization engine client
            transactional: Apply each commit atomically. Disable to allow a
                tuple to be both added and removed within one commit.
            probe: Optional domain probe for observability
        """
        self._provider = provider
        self._transactional = transactional
        self._probe = probe or DefaultPermissionsProbe()
        self._writes: list[RelationshipTuple] = []
        self._deletes: list[RelationshipTuple] = []
        self._last_accessor: tuple[type[Entity], str] | None = None

    @property
    def pending_writes(self) -> tuple[RelationshipTuple, ...]:
        return tuple(self._writes)

    @property
    def pending_deletes(self) -> tuple[RelationshipTuple, ...]:
        return tuple(self._deletes)

    def add(
        self,
        accessor_type: type[Accessor],
        accessor_id: str,
        relation: RelationSelector,
        resource_type: type[Resource],
        resource_id: str,
        condition: ConditionInstance | None = None,
    ) -> PermissionBuilder:
        """Grant ``relation`` on a resource to an accessor.

        The accessor is remembered for ``add_also``.

        Args:
            accessor_type: Generated accessor class (e.g., ``User``)
            accessor_id: Accessor identifier
            relation: Relation selector resolved against ``resource_type``
            resource_type: Generated resource class (e.g., ``Form``)
            resource_id: Resource identifier
            condition: Optional condition from the generated ``Conditions``

        Returns:
            The builder, to continue chaining
        """
        require_capability(accessor_type, Accessor, "Accessor")
        require_capability(resource_type, Resource, "Resource")
        return self._grant(
            accessor_type, accessor_id, relation, resource_type, resource_id, condition
        )

    def add_also(
        self,
        relation: RelationSelector,
        resource_type: type[Resource],
        resource_id: str,
        condition: ConditionInstance | None = None,
    ) -> PermissionBuilder:
        """Grant another relation to the accessor of the previous ``add``.

        Raises:
            OperationSequenceError: If no accessor has been added yet
        """
        accessor_type, accessor_id = self._require_last_accessor()
        require_capability(resource_type, Resource, "Resource")
        return self._grant(
            accessor_type, accessor_id, relation, resource_type, resource_id, condition
        )

    def add_many(
        self,
        accessor_type: type[Accessor],
        relation: RelationSelector,
        resource_type: type[Resource],
        resource_id: str,
        accessor_ids: Iterable[str],
    ) -> PermissionBuilder:
        """Grant the same relation on one resource to several accessors of one type."""
        for accessor_id in accessor_ids:
            self.add(accessor_type, accessor_id, relation, resource_type, resource_id)
        return self

    def assign(
        self,
        subject_type: type[Resource],
        subject_id: str,
        relation: RelationSelector,
        target_type: type[Resource],
        target_id: str,
        condition: ConditionInstance | None = None,
    ) -> PermissionBuilder:
        """Relate one resource to another (e.g., a company as parent of a person).

        Unlike ``add`` the subject only needs to be a Resource. The subject is
        remembered for ``assign_also`` and ``add_also``.
        """
        require_capability(subject_type, Resource, "Subject")
        require_capability(target_type, Resource, "Target")
        return self._grant(
            subject_type, subject_id, relation, target_type, target_id, condition
        )

    def assign_also(
        self,
        relation: RelationSelector,
        target_type: type[Resource],
        target_id: str,
        condition: ConditionInstance | None = None,
    ) -> PermissionBuilder:
        """Relate the subject of the previous call to another resource.

        Raises:
            OperationSequenceError: If no subject has been remembered yet
        """
        subject_type, subject_id = self._require_last_accessor()
        require_capability(target_type, Resource, "Target")
        return self._grant(
            subject_type, subject_id, relation, target_type, target_id, condition
        )

    def revoke(
        self,
        accessor_type: type[Accessor],
        accessor_id: str,
        relation: RelationSelector,
        resource_type: type[Resource],
        resource_id: str,
    ) -> PermissionBuilder:
        """Remove a relation from an accessor. Deletes never carry a condition."""
        require_capability(accessor_type, Accessor, "Accessor")
        require_capability(resource_type, Resource, "Resource")
        self._deletes.append(
            RelationshipTuple(
                object=qualify(resource_type, resource_id),
                relation=resolve_relation(relation, resource_type),
                user=qualify(accessor_type, accessor_id),
            )
        )
        return self

    def revoke_many(
        self,
        accessor_type: type[Accessor],
        relation: RelationSelector,
        resource_type: type[Resource],
        resource_id: str,
        accessor_ids: Iterable[str],
    ) -> PermissionBuilder:
        """Remove the same relation on one resource from several accessors."""
        for accessor_id in accessor_ids:
            self.revoke(accessor_type, accessor_id, relation, resource_type, resource_id)
        return self

    async def commit(self) -> WriteResult:
        """Send every pending grant and revoke in one write request.

        On success the pending lists and the remembered accessor are cleared.
        On failure (including cancellation) nothing is cleared, so the same
        commit can be retried.

        Returns:
            The tuples written and deleted; unpacks as ``written, deleted``

        Raises:
            OperationSequenceError: If nothing is pending
            AuthorizationError: If the engine rejects the write
        """
        if not self._writes and not self._deletes:
            raise OperationSequenceError("No changes to commit.")

        result = await self._provider.write(
            list(self._writes),
            list(self._deletes),
            transactional=self._transactional,
        )

        self._writes.clear()
        self._deletes.clear()
        self._last_accessor = None

        self._probe.changes_committed(
            written_count=len(result.written),
            deleted_count=len(result.deleted),
            transactional=self._transactional,
        )
        return result

    def discard(self) -> None:
        """Drop all pending changes without contacting the engine."""
        self._writes.clear()
        self._deletes.clear()
        self._last_accessor = None

    def _grant(
        self,
        subject_type: type[Entity],
        subject_id: str,
        relation: RelationSelector,
        object_type: type[Entity],
        object_id: str,
        condition: ConditionInstance | None,
    ) -> PermissionBuilder:
        self._writes.append(
            RelationshipTuple(
                object=qualify(object_type, object_id),
                relation=resolve_relation(relation, object_type),
                user=qualify(subject_type, subject_id),
                condition=condition,
            )
        )
        self._last_accessor = (subject_type, subject_id)
        return self

    def _require_last_accessor(self) -> tuple[type[Entity], str]:
        if self._last_accessor is None:
            raise OperationSequenceError("No previous accessor to add relation for.")
        return self._last_accessor
