"""Read-only relationship queries.

Every call is independent; the introspector holds no accumulation state.
"""

from __future__ import annotations

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
from shared_kernel.authorization.types import parse_reference

from permissions.application.observability import (
    DefaultPermissionsProbe,
    PermissionsProbe,
)


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


class PermissionsIntrospector:
    """Lists objects reachable by an accessor and accessors of an object."""

    def __init__(
        self,
        provider: AuthorizationProvider,
        probe: PermissionsProbe | None = None,
    ):
        self._provider = provider
        self._probe = probe or DefaultPermissionsProbe()

    async def list_objects_for_accessor(
        self,
        resource_type: type[Resource],
        accessor_type: type[Entity],
        accessor_id: str,
        relation: RelationSelector | None = None,
    ) -> list[str]:
        """List objects of ``resource_type`` the accessor can reach.

        With a relation, the engine evaluates the relation (including computed
        relations). Without one, stored relationships are read and every
        object the accessor has *any* direct relation to is returned.

        Returns:
            Qualified object references (e.g., ``["form:240"]``)
        """
        require_capability(resource_type, Resource, "Resource")
        accessor = qualify(accessor_type, accessor_id)
        object_type = qualify(resource_type)

        if relation is not None:
            relation_name = resolve_relation(relation, resource_type)
            objects = await self._provider.list_objects(
                user=accessor, relation=relation_name, object_type=object_type
            )
        else:
            relation_name = None
            tuples = await self._provider.read(object_type=object_type, user=accessor)
            objects = _unique([t.object for t in tuples])

        self._probe.objects_listed(
            accessor=accessor,
            resource_type=object_type,
            relation=relation_name,
            count=len(objects),
        )
        return objects

    async def list_accessors_for_object(
        self,
        resource_type: type[Resource],
        accessor_type: type[Accessor],
        object_id: str,
        relation: RelationSelector,
    ) -> list[str]:
        """List identifiers of ``accessor_type`` holding ``relation`` on the object.

        Returns:
            Bare accessor identifiers (e.g., ``["alice", "bob"]``)
        """
        require_capability(resource_type, Resource, "Resource")
        require_capability(accessor_type, Accessor, "Accessor")
        resource = qualify(resource_type, object_id)
        relation_name = resolve_relation(relation, resource_type)

        users = await self._provider.list_users(
            object=resource,
            relation=relation_name,
            user_type=qualify(accessor_type),
        )
        accessor_ids = _unique([parse_reference(u, "subject")[1] for u in users])

        self._probe.accessors_listed(
            resource=resource, relation=relation_name, count=len(accessor_ids)
        )
        return accessor_ids

    async def list_all_accessors_for_object(
        self,
        resource_type: type[Resource],
        object_id: str,
    ) -> list[str]:
        """List every accessor with any stored relation to the object.

        Returns:
            Qualified accessor references (e.g., ``["user:alice", "team:motion"]``)
        """
        require_capability(resource_type, Resource, "Resource")
        resource = qualify(resource_type, object_id)

        tuples = await self._provider.read(
            object_type=qualify(resource_type), object_id=object_id
        )
        accessors = _unique([t.user for t in tuples])

        self._probe.accessors_listed(resource=resource, relation=None, count=len(accessors))
        return accessors
