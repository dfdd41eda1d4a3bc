"""Codegen infrastructure: schema loading."""

from codegen.infrastructure.schema_loader import (
    JsonSchemaLoader,
    load_schema,
    parse_schema,
)

__all__ = ["JsonSchemaLoader", "load_schema", "parse_schema"]
