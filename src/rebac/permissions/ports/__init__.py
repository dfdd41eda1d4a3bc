"""Permissions ports: exceptions raised by the builders."""

from permissions.ports.exceptions import OperationSequenceError

__all__ = ["OperationSequenceError"]
