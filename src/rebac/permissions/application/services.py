"""Convenience services layered on the permissions builders.

Each service wraps a single provider and starts a fresh builder per call.
"""

from __future__ import annotations

from collections.abc import Iterable

from permissions.application.observability import PermissionsProbe
from permissions.application.permissions import Permissions
from shared_kernel.authorization.entities import Accessor, Resource
from shared_kernel.authorization.naming import RelationSelector
from shared_kernel.authorization.protocols import AuthorizationProvider
from shared_kernel.authorization.types import WriteResult


class Groups:
    """Membership management for a group-like entity type.

    Args:
        provider: The authorization engine client
        group_type: Generated group class (e.g., ``Group``)
        member_type: Generated member class (e.g., ``User``)
        relation: Membership relation on the group (defaults to ``member``)
    """

    def __init__(
        self,
        provider: AuthorizationProvider,
        group_type: type[Resource],
        member_type: type[Accessor],
        relation: RelationSelector = "member",
        probe: PermissionsProbe | None = None,
    ):
        self._permissions = Permissions(provider, probe=probe)
        self._group_type = group_type
        self._member_type = member_type
        self._relation = relation

    async def add_members(self, group_id: str, member_ids: Iterable[str]) -> WriteResult:
        return await (
            self._permissions.mutate()
            .add_many(
                self._member_type,
                self._relation,
                self._group_type,
                group_id,
                member_ids,
            )
            .commit()
        )

    async def list_members(self, group_id: str) -> list[str]:
        """Return bare ids of every member of the group."""
        return await self._permissions.introspect().list_accessors_for_object(
            self._group_type, self._member_type, group_id, self._relation
        )


class Resources:
    """Resource-scoped grants and listings."""

    def __init__(
        self,
        provider: AuthorizationProvider,
        probe: PermissionsProbe | None = None,
    ):
        self._permissions = Permissions(provider, probe=probe)

    async def add_users(
        self,
        resource_type: type[Resource],
        resource_id: str,
        accessor_type: type[Accessor],
        relation: RelationSelector,
        accessor_ids: Iterable[str],
    ) -> WriteResult:
        """Grant one relation on a resource to several accessors."""
        return await (
            self._permissions.mutate()
            .add_many(accessor_type, relation, resource_type, resource_id, accessor_ids)
            .commit()
        )

    async def list_users(
        self, resource_type: type[Resource], resource_id: str
    ) -> list[str]:
        """Qualified references of everyone with any relation to the resource."""
        return await self._permissions.introspect().list_all_accessors_for_object(
            resource_type, resource_id
        )


class Users:
    """Accessor-scoped listings for one accessor type."""

    def __init__(
        self,
        provider: AuthorizationProvider,
        user_type: type[Accessor],
        probe: PermissionsProbe | None = None,
    ):
        self._permissions = Permissions(provider, probe=probe)
        self._user_type = user_type

    async def list_objects(
        self,
        resource_type: type[Resource],
        user_id: str,
        relation: RelationSelector | None = None,
    ) -> list[str]:
        """Objects of ``resource_type`` the user relates to.

        Without a relation, any stored relation counts.
        """
        return await self._permissions.introspect().list_objects_for_accessor(
            resource_type, self._user_type, user_id, relation
        )
