"""SpiceDB client implementation for authorization.

Provides an async SpiceDB client wrapping the authzed library with proper
error handling and type safety. Conditions are mapped onto SpiceDB caveats:
a condition attached at grant time becomes the relationship's caveat and a
check-time context becomes the request context.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from enum import Enum
import inspect
from typing import Any

from authzed.api.v1 import (
    AsyncClient,
    CheckPermissionRequest,
    Consistency,
    ObjectReference,
    Relationship,
    RelationshipUpdate,
    SubjectReference,
    WriteRelationshipsRequest,
)
from authzed.api.v1.core_pb2 import ContextualizedCaveat
from authzed.api.v1.permission_service_pb2 import (
    CheckBulkPermissionsRequest,
    CheckBulkPermissionsRequestItem,
    CheckPermissionResponse,
    LookupPermissionship,
    LookupResourcesRequest,
    LookupSubjectsRequest,
    ReadRelationshipsRequest,
    RelationshipFilter,
    SubjectFilter,
)
from authzed.api.v1.schema_service_pb2 import WriteSchemaRequest
from google.protobuf.struct_pb2 import Struct
import grpc
from grpc.aio import AioRpcError
from grpcutil import bearer_token_credentials, insecure_bearer_token_credentials

from shared_kernel.authorization.observability import (
    AuthorizationProbe,
    DefaultAuthorizationProbe,
)
from shared_kernel.authorization.spicedb.exceptions import (
    AuthorizationError,
    SpiceDBConnectionError,
    SpiceDBPermissionError,
)
from shared_kernel.authorization.types import (
    CheckRequest,
    ConditionInstance,
    RelationshipTuple,
    WriteResult,
    format_resource,
    format_subject,
    parse_reference,
    parse_subject_reference,
)

_CONNECTION_STATUS_CODES = frozenset(
    {
        grpc.StatusCode.UNAVAILABLE,
        grpc.StatusCode.DEADLINE_EXCEEDED,
        grpc.StatusCode.UNAUTHENTICATED,
    }
)


class RelationshipOperation(str, Enum):
    """Kinds of relationship updates sent to SpiceDB."""

    WRITE = "write"
    DELETE = "delete"


def _object_reference(value: str, kind: str = "resource") -> ObjectReference:
    object_type, object_id = parse_reference(value, kind)
    return ObjectReference(object_type=object_type, object_id=object_id)


def _subject_reference(value: str) -> SubjectReference:
    object_type, object_id, relation = parse_subject_reference(value)
    return SubjectReference(
        object=ObjectReference(object_type=object_type, object_id=object_id),
        optional_relation=relation or "",
    )


def _struct(context: dict[str, Any] | None) -> Struct | None:
    if not context:
        return None
    struct = Struct()
    struct.update(context)
    return struct


def _build_relationship(tuple_: RelationshipTuple) -> Relationship:
    relationship = Relationship(
        resource=_object_reference(tuple_.object),
        relation=tuple_.relation,
        subject=_subject_reference(tuple_.user),
    )
    if tuple_.condition is not None:
        caveat = ContextualizedCaveat(caveat_name=tuple_.condition.name)
        context = _struct(tuple_.condition.context)
        if context is not None:
            caveat.context.CopyFrom(context)
        relationship.optional_caveat.CopyFrom(caveat)
    return relationship


def _build_relationship_update(
    tuple_: RelationshipTuple,
    operation: RelationshipOperation,
) -> RelationshipUpdate:
    """Build a TOUCH or DELETE update for one relationship tuple."""
    if operation == RelationshipOperation.DELETE:
        return RelationshipUpdate(
            operation=RelationshipUpdate.OPERATION_DELETE,
            relationship=_build_relationship(tuple_.without_condition()),
        )
    return RelationshipUpdate(
        operation=RelationshipUpdate.OPERATION_TOUCH,
        relationship=_build_relationship(tuple_),
    )


def _to_tuple(relationship: Relationship) -> RelationshipTuple:
    """Convert a stored SpiceDB relationship back to a tuple."""
    condition = None
    if relationship.HasField("optional_caveat"):
        caveat = relationship.optional_caveat
        condition = ConditionInstance(
            name=caveat.caveat_name,
            context=dict(caveat.context.items()),
        )
    subject = relationship.subject
    return RelationshipTuple(
        object=format_resource(
            relationship.resource.object_type, relationship.resource.object_id
        ),
        relation=relationship.relation,
        user=format_subject(
            subject.object.object_type,
            subject.object.object_id,
            subject.optional_relation or None,
        ),
        condition=condition,
    )


def _translate_error(error: Exception, message: str) -> AuthorizationError:
    """Map a transport error onto the authorization error taxonomy."""
    code = error.code() if isinstance(error, AioRpcError) else None
    status_code = code.name if code is not None else None
    if code in _CONNECTION_STATUS_CODES:
        return SpiceDBConnectionError(f"{message}: {error}", status_code=status_code)
    return SpiceDBPermissionError(f"{message}: {error}", status_code=status_code)


class SpiceDBClient:
    """SpiceDB client implementation of AuthorizationProvider protocol.

    This client provides async methods for writing relationships, checking
    permissions, bulk checks and lookups against a SpiceDB instance. One
    instance can be shared by any number of builders and checkers; it holds
    no accumulation state.
    """

    def __init__(
        self,
        endpoint: str,
        preshared_key: str,
        use_tls: bool = False,
        cert_path: str | None = None,
        fully_consistent: bool = True,
        probe: AuthorizationProbe | None = None,
    ):
        """Initialize SpiceDB client.

        Args:
            endpoint: SpiceDB gRPC endpoint (e.g., "localhost:50051")
            preshared_key: Pre-shared key for authentication
            use_tls: Whether to use a TLS channel
            cert_path: Optional CA certificate for TLS
            fully_consistent: Evaluate reads and checks at the newest revision
            probe: Optional domain probe for observability
        """
        self._endpoint = endpoint
        self._preshared_key = preshared_key
        self._use_tls = use_tls
        self._cert_path = cert_path
        self._fully_consistent = fully_consistent
        self._client: AsyncClient | None = None
        self._client_lock = asyncio.Lock()
        self._probe = probe or DefaultAuthorizationProbe()

    async def _ensure_client(self) -> AsyncClient:
        """Lazily initialize the gRPC client exactly once."""
        if self._client is not None:
            return self._client

        async with self._client_lock:
            if self._client is None:
                try:
                    if self._use_tls:
                        cert_chain = None
                        if self._cert_path:
                            with open(self._cert_path, "rb") as cert_file:
                                cert_chain = cert_file.read()
                        credentials = bearer_token_credentials(
                            self._preshared_key, cert_chain
                        )
                    else:
                        credentials = insecure_bearer_token_credentials(
                            self._preshared_key
                        )
                    self._client = AsyncClient(self._endpoint, credentials)
                except Exception as e:
                    self._probe.connection_failed(endpoint=self._endpoint, error=e)
                    raise SpiceDBConnectionError(
                        f"Failed to connect to SpiceDB at {self._endpoint}: {e}"
                    ) from e

        return self._client

    def _consistency(self) -> Consistency:
        if self._fully_consistent:
            return Consistency(fully_consistent=True)
        return Consistency(minimize_latency=True)

    async def write(
        self,
        writes: Sequence[RelationshipTuple],
        deletes: Sequence[RelationshipTuple],
        transactional: bool = True,
    ) -> WriteResult:
        """Write and delete relationships in one commit.

        Transactional commits send a single request so SpiceDB applies every
        update atomically. Non-transactional commits send the deletes and then
        the writes as separate requests, which lets a tuple be replaced within
        one commit.

        Raises:
            SpiceDBPermissionError: If SpiceDB rejects the write
            SpiceDBConnectionError: If SpiceDB cannot be reached
        """
        client = await self._ensure_client()

        write_updates = [
            _build_relationship_update(t, RelationshipOperation.WRITE) for t in writes
        ]
        delete_updates = [
            _build_relationship_update(t, RelationshipOperation.DELETE)
            for t in deletes
        ]

        if transactional:
            batches = [write_updates + delete_updates]
        else:
            batches = [batch for batch in (delete_updates, write_updates) if batch]

        try:
            for updates in batches:
                await client.WriteRelationships(
                    WriteRelationshipsRequest(updates=updates)
                )
        except Exception as e:
            self._probe.relationships_write_failed(
                written_count=len(writes),
                deleted_count=len(deletes),
                error=e,
            )
            raise _translate_error(e, "Failed to write relationships") from e

        self._probe.relationships_written(
            written_count=len(writes),
            deleted_count=len(deletes),
            transactional=transactional,
        )

        return WriteResult(
            written=tuple(writes),
            deleted=tuple(t.without_condition() for t in deletes),
        )

    async def check(self, request: CheckRequest) -> bool:
        """Check if a subject holds a relation or permission on a resource.

        Conditional answers (a caveat that could not be fully evaluated with
        the supplied context) count as not granted.

        Raises:
            SpiceDBPermissionError: If the check fails
        """
        client = await self._ensure_client()

        try:
            response = await client.CheckPermission(
                CheckPermissionRequest(
                    consistency=self._consistency(),
                    resource=_object_reference(request.object),
                    permission=request.relation,
                    subject=_subject_reference(request.user),
                    context=_struct(request.context),
                )
            )
        except Exception as e:
            self._probe.permission_check_failed(
                resource=request.object,
                permission=request.relation,
                subject=request.user,
                error=e,
            )
            raise _translate_error(
                e,
                f"Failed to check permission: {request.object} "
                f"{request.relation} {request.user}",
            ) from e

        has_permission = (
            response.permissionship
            == CheckPermissionResponse.PERMISSIONSHIP_HAS_PERMISSION
        )

        self._probe.permission_checked(
            resource=request.object,
            permission=request.relation,
            subject=request.user,
            granted=has_permission,
        )

        return has_permission

    async def batch_check(self, requests: Sequence[CheckRequest]) -> list[bool]:
        """Check several relations with one CheckBulkPermissions call.

        Returns:
            One allowed flag per request, in request order

        Raises:
            SpiceDBPermissionError: If the call or any single item fails
        """
        if not requests:
            return []

        client = await self._ensure_client()

        items = [
            CheckBulkPermissionsRequestItem(
                resource=_object_reference(r.object),
                permission=r.relation,
                subject=_subject_reference(r.user),
                context=_struct(r.context),
            )
            for r in requests
        ]

        try:
            response = await client.CheckBulkPermissions(
                CheckBulkPermissionsRequest(
                    consistency=self._consistency(),
                    items=items,
                )
            )
        except Exception as e:
            self._probe.bulk_check_failed(total_requests=len(requests), error=e)
            raise _translate_error(e, "Failed to bulk check permissions") from e

        results: list[bool] = []
        for request, pair in zip(requests, response.pairs, strict=True):
            if pair.HasField("error"):
                raise SpiceDBPermissionError(
                    f"Failed to check permission: {request.object} "
                    f"{request.relation} {request.user}: {pair.error.message}"
                )
            results.append(
                pair.item.permissionship
                == CheckPermissionResponse.PERMISSIONSHIP_HAS_PERMISSION
            )

        self._probe.bulk_check_completed(
            total_requests=len(requests),
            permitted_count=sum(results),
        )

        return results

    async def list_objects(
        self,
        user: str,
        relation: str,
        object_type: str,
        context: dict[str, Any] | None = None,
    ) -> list[str]:
        """List objects of a type on which the user holds a relation."""
        client = await self._ensure_client()

        request = LookupResourcesRequest(
            consistency=self._consistency(),
            resource_object_type=object_type,
            permission=relation,
            subject=_subject_reference(user),
            context=_struct(context),
        )

        objects: list[str] = []
        try:
            async for response in client.LookupResources(request):
                if (
                    response.permissionship
                    == LookupPermissionship.LOOKUP_PERMISSIONSHIP_HAS_PERMISSION
                ):
                    objects.append(
                        format_resource(object_type, response.resource_object_id)
                    )
        except Exception as e:
            self._probe.lookup_failed(
                operation="list_objects",
                error=e,
                subject=user,
                relation=relation,
                object_type=object_type,
            )
            raise _translate_error(e, "Failed to look up resources") from e

        self._probe.lookup_completed(
            operation="list_objects",
            result_count=len(objects),
            subject=user,
            relation=relation,
            object_type=object_type,
        )
        return objects

    async def read(
        self,
        object_type: str,
        object_id: str | None = None,
        user: str | None = None,
    ) -> list[RelationshipTuple]:
        """Read stored relationships for a resource type.

        Args:
            object_type: Resource type to read (required by SpiceDB)
            object_id: Optional resource id
            user: Optional qualified subject (``type:id`` or ``type:id#relation``)
        """
        client = await self._ensure_client()

        relationship_filter = RelationshipFilter(
            resource_type=object_type,
            optional_resource_id=object_id or "",
        )
        if user is not None:
            subject_type, subject_id, subject_relation = parse_subject_reference(user)
            subject_filter = SubjectFilter(
                subject_type=subject_type,
                optional_subject_id=subject_id,
            )
            if subject_relation:
                subject_filter.optional_relation.relation = subject_relation
            relationship_filter.optional_subject_filter.CopyFrom(subject_filter)

        tuples: list[RelationshipTuple] = []
        try:
            async for response in client.ReadRelationships(
                ReadRelationshipsRequest(
                    consistency=self._consistency(),
                    relationship_filter=relationship_filter,
                )
            ):
                tuples.append(_to_tuple(response.relationship))
        except Exception as e:
            self._probe.lookup_failed(
                operation="read",
                error=e,
                object_type=object_type,
                object_id=object_id,
                subject=user,
            )
            raise _translate_error(e, "Failed to read relationships") from e

        self._probe.lookup_completed(
            operation="read",
            result_count=len(tuples),
            object_type=object_type,
            object_id=object_id,
            subject=user,
        )
        return tuples

    async def list_users(
        self,
        object: str,
        relation: str,
        user_type: str,
    ) -> list[str]:
        """List subjects of a type holding a relation on an object."""
        client = await self._ensure_client()

        request = LookupSubjectsRequest(
            consistency=self._consistency(),
            resource=_object_reference(object),
            permission=relation,
            subject_object_type=user_type,
        )

        users: list[str] = []
        try:
            async for response in client.LookupSubjects(request):
                subject = response.subject
                if (
                    subject.permissionship
                    == LookupPermissionship.LOOKUP_PERMISSIONSHIP_HAS_PERMISSION
                ):
                    users.append(format_subject(user_type, subject.subject_object_id))
        except Exception as e:
            self._probe.lookup_failed(
                operation="list_users",
                error=e,
                resource=object,
                relation=relation,
                subject_type=user_type,
            )
            raise _translate_error(e, "Failed to look up subjects") from e

        self._probe.lookup_completed(
            operation="list_users",
            result_count=len(users),
            resource=object,
            relation=relation,
            subject_type=user_type,
        )
        return users

    async def write_schema(self, schema: str) -> None:
        """Replace the SpiceDB schema.

        Raises:
            SpiceDBPermissionError: If SpiceDB rejects the schema
        """
        client = await self._ensure_client()
        try:
            await client.WriteSchema(WriteSchemaRequest(schema=schema))
        except Exception as e:
            self._probe.schema_write_failed(error=e)
            raise _translate_error(e, "Failed to write schema") from e
        self._probe.schema_written()

    async def close(self) -> None:
        """Close the gRPC channel if one was opened."""
        client, self._client = self._client, None
        if client is None:
            return
        close = getattr(client, "close", None)
        if close is not None:
            result = close()
            if inspect.isawaitable(result):
                await result
