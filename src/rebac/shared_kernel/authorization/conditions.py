"""Condition parameter kinds and their wire serialization.

Generated condition helpers call :func:`serialize_parameter` to turn typed
Python values into the context map attached to a relationship (write time)
or sent with a check (check time).
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any


class ParameterKind(str, Enum):
    """Supported condition parameter kinds."""

    STRING = "string"
    INT = "int"
    BOOL = "bool"
    TIMESTAMP = "timestamp"
    DURATION = "duration"


def serialize_timestamp(value: datetime) -> str:
    """ISO-8601 with millisecond precision and a literal ``Z``.

    Naive datetimes are taken to be UTC already.

    Example:
        >>> serialize_timestamp(datetime(2026, 1, 1, tzinfo=UTC))
        "2026-01-01T00:00:00.000Z"
    """
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


def serialize_duration(value: timedelta) -> str:
    """Total seconds suffixed with ``s`` (``timedelta(days=10)`` -> ``"864000s"``)."""
    seconds = value.total_seconds()
    if seconds.is_integer():
        return f"{int(seconds)}s"
    return f"{seconds}s"


def serialize_bool(value: bool) -> str:
    return "true" if value else "false"


def serialize_parameter(kind: ParameterKind | str, value: Any) -> Any:
    """Serialize a condition parameter value according to its kind."""
    match ParameterKind(kind):
        case ParameterKind.TIMESTAMP:
            return serialize_timestamp(value)
        case ParameterKind.INT:
            return value
        case ParameterKind.BOOL:
            return serialize_bool(value)
        case ParameterKind.DURATION:
            return serialize_duration(value)
        case _:
            return str(value)
