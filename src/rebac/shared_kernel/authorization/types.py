"""Authorization value objects shared by the permissions DSL and the engine client.

A relationship tuple is the wire-level unit exchanged with the authorization
engine: ``(object, relation, user[, condition])`` where ``object`` and
``user`` are always type-qualified (``"form:224"``, ``"user:alice"``).
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ConditionInstance:
    """A named condition attached to a relationship at grant time.

    Attributes:
        name: Condition name as declared in the schema (e.g., "active_trial")
        context: Serialized parameter values keyed by their original
            (suffixed) parameter names
    """

    name: str
    context: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RelationshipTuple:
    """A single relationship fact.

    Attributes:
        object: Resource identifier (e.g., "form:224")
        relation: Relation name (e.g., "editor")
        user: Subject identifier (e.g., "user:alice" or "group:eng#member")
        condition: Optional condition bound at write time
    """

    object: str
    relation: str
    user: str
    condition: ConditionInstance | None = None

    def without_condition(self) -> RelationshipTuple:
        """Return the same tuple with the condition dropped (deletes never carry one)."""
        return RelationshipTuple(
            object=self.object, relation=self.relation, user=self.user
        )


@dataclass(frozen=True)
class CheckRequest:
    """A single permission check.

    Attributes:
        object: Resource identifier (e.g., "form:224")
        relation: Relation or permission to check (e.g., "edit")
        user: Subject identifier (e.g., "user:alice")
        context: Optional check-time condition context
    """

    object: str
    relation: str
    user: str
    context: dict[str, Any] | None = None

    def as_tuple(self) -> RelationshipTuple:
        """Describe this check as the relationship tuple it asks about."""
        return RelationshipTuple(
            object=self.object, relation=self.relation, user=self.user
        )


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one check in a batch.

    Attributes:
        allowed: Whether the engine granted the relation
        details: The tuple that was checked
    """

    allowed: bool
    details: RelationshipTuple


@dataclass(frozen=True)
class WriteResult:
    """Tuples actually written and deleted by a single commit.

    Unpacks as ``written, deleted = result``.
    """

    written: tuple[RelationshipTuple, ...] = ()
    deleted: tuple[RelationshipTuple, ...] = ()

    def __iter__(self) -> Iterator[tuple[RelationshipTuple, ...]]:
        return iter((self.written, self.deleted))


def format_resource(resource_type: str, resource_id: str) -> str:
    """Format a resource identifier for the engine.

    Args:
        resource_type: The canonical type name of the resource
        resource_id: The unique identifier for the resource

    Returns:
        Formatted resource string (e.g., "form:224")

    Example:
        >>> format_resource("form", "224")
        "form:224"
    """
    return f"{resource_type}:{resource_id}"


def format_subject(
    subject_type: str,
    subject_id: str,
    subject_relation: str | None = None,
) -> str:
    """Format a subject identifier for the engine.

    Args:
        subject_type: The canonical type name of the subject
        subject_id: The unique identifier for the subject
        subject_relation: Optional relation on the subject (user-set)

    Returns:
        Formatted subject string (e.g., "user:alice" or "group:eng#member")
    """
    if subject_relation:
        return f"{subject_type}:{subject_id}#{subject_relation}"
    return f"{subject_type}:{subject_id}"


def parse_reference(value: str, kind: str = "resource") -> tuple[str, str]:
    """Split a ``type:id`` reference.

    Raises:
        ValueError: If the value is not type-qualified
    """
    if ":" not in value:
        raise ValueError(f"Invalid {kind} format: {value!r} (expected 'type:id')")
    object_type, object_id = value.split(":", 1)
    return object_type, object_id


def parse_subject_reference(value: str) -> tuple[str, str, str | None]:
    """Split a ``type:id[#relation]`` subject reference.

    Raises:
        ValueError: If the value is not type-qualified
    """
    reference, _, relation = value.partition("#")
    object_type, object_id = parse_reference(reference, "subject")
    return object_type, object_id, relation or None
