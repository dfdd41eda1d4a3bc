"""Unit tests for PermissionsIntrospector."""

from typing import NamedTuple

import pytest

from permissions.application.introspector import PermissionsIntrospector
from shared_kernel.authorization.entities import Accessor, Resource
from shared_kernel.authorization.types import RelationshipTuple


class User(Accessor):
    __entity_name__ = "user"


class Group(Resource, Accessor):
    __entity_name__ = "group"
    __relations__ = {"member": "member"}

    member = "member"


class FormPerform(NamedTuple):
    edit: str = "edit"
    read: str = "read"


class Form(Resource):
    __entity_name__ = "form"
    __relations__ = {"editor": "editor", "Perform.edit": "edit", "Perform.read": "read"}

    editor = "editor"
    Perform = FormPerform()


@pytest.fixture
def introspector(mock_provider, mock_probe) -> PermissionsIntrospector:
    return PermissionsIntrospector(mock_provider, probe=mock_probe)


class TestListObjectsForAccessor:
    @pytest.mark.asyncio
    async def test_with_relation_uses_engine_evaluation(
        self, introspector, mock_provider
    ):
        mock_provider.list_objects.return_value = ["form:240", "form:241"]

        objects = await introspector.list_objects_for_accessor(
            Form, User, "alice", Form.Perform.edit
        )

        assert objects == ["form:240", "form:241"]
        mock_provider.list_objects.assert_awaited_once_with(
            user="user:alice", relation="edit", object_type="form"
        )
        mock_provider.read.assert_not_called()

    @pytest.mark.asyncio
    async def test_without_relation_reads_stored_tuples(self, introspector, mock_provider):
        mock_provider.read.return_value = [
            RelationshipTuple("form:240", "editor", "user:alice"),
            RelationshipTuple("form:240", "reader", "user:alice"),
            RelationshipTuple("form:241", "reader", "user:alice"),
        ]

        objects = await introspector.list_objects_for_accessor(Form, User, "alice")

        assert objects == ["form:240", "form:241"]
        mock_provider.read.assert_awaited_once_with(object_type="form", user="user:alice")

    @pytest.mark.asyncio
    async def test_records_probe_event(self, introspector, mock_provider, mock_probe):
        mock_provider.list_objects.return_value = ["form:240"]

        await introspector.list_objects_for_accessor(Form, User, "alice", "edit")

        mock_probe.objects_listed.assert_called_once_with(
            accessor="user:alice", resource_type="form", relation="edit", count=1
        )

    @pytest.mark.asyncio
    async def test_rejects_non_resource_type(self, introspector):
        with pytest.raises(TypeError, match="must implement Resource"):
            await introspector.list_objects_for_accessor(User, User, "alice")


class TestListAccessorsForObject:
    @pytest.mark.asyncio
    async def test_returns_bare_ids(self, introspector, mock_provider):
        mock_provider.list_users.return_value = ["user:alice", "user:bob"]

        members = await introspector.list_accessors_for_object(
            Group, User, "eng", Group.member
        )

        assert members == ["alice", "bob"]
        mock_provider.list_users.assert_awaited_once_with(
            object="group:eng", relation="member", user_type="user"
        )

    @pytest.mark.asyncio
    async def test_requires_accessor_type(self, introspector):
        with pytest.raises(TypeError, match="must implement Accessor"):
            await introspector.list_accessors_for_object(Group, Form, "eng", "member")


class TestListAllAccessorsForObject:
    @pytest.mark.asyncio
    async def test_returns_distinct_qualified_accessors(self, introspector, mock_provider):
        mock_provider.read.return_value = [
            RelationshipTuple("form:226", "reader", "user:alice"),
            RelationshipTuple("form:226", "editor", "user:alice"),
            RelationshipTuple("form:226", "reader", "group:eng#member"),
        ]

        accessors = await introspector.list_all_accessors_for_object(Form, "226")

        assert accessors == ["user:alice", "group:eng#member"]
        mock_provider.read.assert_awaited_once_with(object_type="form", object_id="226")
