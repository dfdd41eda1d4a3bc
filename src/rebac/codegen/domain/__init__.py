"""Codegen domain module.

Contains the schema model and the accessor classification policy.
"""

from codegen.domain.classification import (
    DEFAULT_ACCESSOR_SUFFIXES,
    AccessorClassification,
)
from codegen.domain.model import (
    AuthorizationModel,
    Condition,
    Parameter,
    ParameterPhase,
    RelationKind,
    TypeDefinition,
)

__all__ = [
    "DEFAULT_ACCESSOR_SUFFIXES",
    "AccessorClassification",
    "AuthorizationModel",
    "Condition",
    "Parameter",
    "ParameterPhase",
    "RelationKind",
    "TypeDefinition",
]
