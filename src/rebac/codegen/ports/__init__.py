"""Codegen ports: the schema loader protocol and exceptions."""

from codegen.ports.exceptions import SchemaError
from codegen.ports.protocols import SchemaLoader

__all__ = ["SchemaError", "SchemaLoader"]
