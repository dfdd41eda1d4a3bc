"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Attributes:
        request_id: Unique identifier for the current request/operation.
        actor_id: Identifier of the caller performing the operation (if applicable).
        schema_name: Name of the authorization schema in use (if applicable).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123", schema_name="forms")
        probe = DefaultAuthorizationProbe().with_context(context)
    """

    request_id: str | None = None
    actor_id: str | None = None
    schema_name: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.actor_id is not None:
            result["actor_id"] = self.actor_id
        if self.schema_name is not None:
            result["schema_name"] = self.schema_name
        result.update(self.extra)
        return result
