"""JSON schema loader.

Parses the JSON form of an authorization model (as produced by
``fga model transform --output-format json``) into the codegen schema model.
Only what generation needs is read: type names, relation names and whether
each relation is directly assignable, and condition parameters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from codegen.domain.model import (
    AuthorizationModel,
    Condition,
    Parameter,
    RelationKind,
    TypeDefinition,
)
from codegen.ports.exceptions import SchemaError
from shared_kernel.authorization.conditions import ParameterKind
from shared_kernel.authorization.naming import canonical_name

_TYPE_NAME_PREFIX = "TYPE_NAME_"

# Engine type names without a dedicated kind fall back to plain strings.
_PARAMETER_KINDS: dict[str, ParameterKind] = {
    "string": ParameterKind.STRING,
    "int": ParameterKind.INT,
    "uint": ParameterKind.INT,
    "bool": ParameterKind.BOOL,
    "timestamp": ParameterKind.TIMESTAMP,
    "duration": ParameterKind.DURATION,
    "double": ParameterKind.STRING,
    "any": ParameterKind.STRING,
    "list": ParameterKind.STRING,
    "map": ParameterKind.STRING,
    "ipaddress": ParameterKind.STRING,
}


class _Document(BaseModel):
    model_config = ConfigDict(extra="ignore")


class _RelationMetadataDocument(_Document):
    directly_related_user_types: list[dict[str, Any]] = Field(default_factory=list)


class _TypeMetadataDocument(_Document):
    relations: dict[str, _RelationMetadataDocument] | None = None


class _TypeDefinitionDocument(_Document):
    type: str = Field(min_length=1)
    relations: dict[str, dict[str, Any]] | None = None
    metadata: _TypeMetadataDocument | None = None


class _ParameterTypeDocument(_Document):
    type_name: str = "TYPE_NAME_STRING"


class _NamedParameterDocument(_Document):
    name: str = Field(min_length=1)
    type: str = "string"


class _ConditionDocument(_Document):
    name: str | None = None
    parameters: dict[str, _ParameterTypeDocument] | list[_NamedParameterDocument] = (
        Field(default_factory=dict)
    )


class _SchemaDocument(_Document):
    schema_version: str | None = None
    type_definitions: list[_TypeDefinitionDocument]
    conditions: dict[str, _ConditionDocument] | None = None


class _WrappedSchemaDocument(_Document):
    authorization_model: _SchemaDocument


def _parameter_kind(type_name: str, condition: str, parameter: str) -> ParameterKind:
    key = type_name.strip()
    if key.upper().startswith(_TYPE_NAME_PREFIX):
        key = key[len(_TYPE_NAME_PREFIX) :]
    kind = _PARAMETER_KINDS.get(key.lower())
    if kind is None:
        raise SchemaError(
            f"Unknown type {type_name!r} for parameter {parameter!r} "
            f"of condition {condition!r}"
        )
    return kind


def _has_this(rewrite: Any) -> bool:
    """Whether a relation rewrite includes direct assignment anywhere."""
    if isinstance(rewrite, dict):
        return "this" in rewrite or any(_has_this(v) for v in rewrite.values())
    if isinstance(rewrite, list):
        return any(_has_this(v) for v in rewrite)
    return False


def _relation_kind(
    name: str,
    rewrite: dict[str, Any],
    metadata: _TypeMetadataDocument | None,
) -> RelationKind:
    relation_metadata = (metadata.relations or {}).get(name) if metadata else None
    if relation_metadata and relation_metadata.directly_related_user_types:
        return RelationKind.DIRECT
    if _has_this(rewrite):
        return RelationKind.DIRECT
    return RelationKind.COMPUTED


def _to_type_definition(document: _TypeDefinitionDocument) -> TypeDefinition:
    relations: dict[str, RelationKind] = {}
    for raw_name, rewrite in (document.relations or {}).items():
        name = canonical_name(raw_name)
        if name in relations:
            raise SchemaError(
                f"Relation {raw_name!r} is declared more than once on type "
                f"{document.type!r}"
            )
        relations[name] = _relation_kind(raw_name, rewrite, document.metadata)
    return TypeDefinition(name=document.type, relations=relations)


def _to_condition(key: str, document: _ConditionDocument) -> Condition:
    name = document.name or key
    if isinstance(document.parameters, dict):
        parameters = tuple(
            Parameter(param, _parameter_kind(p.type_name, name, param))
            for param, p in document.parameters.items()
        )
    else:
        parameters = tuple(
            Parameter(p.name, _parameter_kind(p.type, name, p.name))
            for p in document.parameters
        )
    return Condition(name=name, parameters=parameters)


def parse_schema(text: str | bytes) -> AuthorizationModel:
    """Parse a JSON authorization model.

    Args:
        text: The JSON document. A document wrapped in an
            ``authorization_model`` key is unwrapped first.

    Raises:
        SchemaError: If the document is not a valid authorization model
    """
    try:
        document = _SchemaDocument.model_validate_json(text)
    except ValidationError as e:
        wrapped = _unwrap(text)
        if wrapped is None:
            raise SchemaError(f"Invalid authorization schema: {e}") from e
        document = wrapped

    type_definitions = tuple(_to_type_definition(t) for t in document.type_definitions)
    seen: set[str] = set()
    for type_definition in type_definitions:
        name = canonical_name(type_definition.name)
        if name in seen:
            raise SchemaError(f"Type {type_definition.name!r} is declared more than once")
        seen.add(name)

    conditions = {
        condition.name: condition
        for condition in (
            _to_condition(key, c) for key, c in (document.conditions or {}).items()
        )
    }
    return AuthorizationModel(type_definitions=type_definitions, conditions=conditions)


def _unwrap(text: str | bytes) -> _SchemaDocument | None:
    try:
        return _WrappedSchemaDocument.model_validate_json(text).authorization_model
    except ValidationError:
        return None


def load_schema(path: Path | str) -> AuthorizationModel:
    """Read and parse a JSON authorization model from disk.

    Raises:
        SchemaError: If the file cannot be read or is not a valid model
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaError(f"Cannot read authorization schema {path}: {e}") from e
    return parse_schema(text)


class JsonSchemaLoader:
    """SchemaLoader for JSON authorization models on disk."""

    def load(self, path: Path) -> AuthorizationModel:
        return load_schema(path)
