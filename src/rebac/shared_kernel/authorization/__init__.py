"""Authorization primitives for relationship-based access control.

This module provides shared authorization types and abstractions used across
bounded contexts: tuple value objects, the ``Resource``/``Accessor``
capability tags implemented by generated entity types, and the naming
resolver that turns entity types and relation selectors into wire names.
"""

from shared_kernel.authorization.entities import Accessor, Entity, Resource
from shared_kernel.authorization.naming import (
    RelationSelector,
    RelationSelectorError,
    canonical_name,
    qualify,
    resolve_relation,
)
from shared_kernel.authorization.types import (
    CheckRequest,
    CheckResult,
    ConditionInstance,
    RelationshipTuple,
    WriteResult,
    format_resource,
    format_subject,
)

__all__ = [
    "Accessor",
    "CheckRequest",
    "CheckResult",
    "ConditionInstance",
    "Entity",
    "RelationSelector",
    "RelationSelectorError",
    "RelationshipTuple",
    "Resource",
    "WriteResult",
    "canonical_name",
    "format_resource",
    "format_subject",
    "qualify",
    "resolve_relation",
]
