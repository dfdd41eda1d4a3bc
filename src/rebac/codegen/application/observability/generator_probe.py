"""Domain probe for entity generation.

Captures the build-time events of turning an authorization schema into a
generated Python module.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class GeneratorProbe(Protocol):
    """Domain probe for entity generation."""

    def schema_loaded(
        self,
        source: str,
        type_count: int,
        condition_count: int,
    ) -> None:
        """Record that an authorization schema was parsed."""
        ...

    def entities_generated(
        self,
        resource_count: int,
        accessor_count: int,
        condition_count: int,
    ) -> None:
        """Record that entity source was rendered."""
        ...

    def module_written(self, path: str, size: int) -> None:
        """Record that the generated module was written to disk."""
        ...

    def with_context(self, context: ObservationContext) -> GeneratorProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultGeneratorProbe:
    """Default implementation of GeneratorProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultGeneratorProbe:
        return DefaultGeneratorProbe(logger=self._logger, context=context)

    def schema_loaded(
        self,
        source: str,
        type_count: int,
        condition_count: int,
    ) -> None:
        self._logger.info(
            "codegen_schema_loaded",
            source=source,
            type_count=type_count,
            condition_count=condition_count,
            **self._get_context_kwargs(),
        )

    def entities_generated(
        self,
        resource_count: int,
        accessor_count: int,
        condition_count: int,
    ) -> None:
        self._logger.info(
            "codegen_entities_generated",
            resource_count=resource_count,
            accessor_count=accessor_count,
            condition_count=condition_count,
            **self._get_context_kwargs(),
        )

    def module_written(self, path: str, size: int) -> None:
        self._logger.info(
            "codegen_module_written",
            path=path,
            size=size,
            **self._get_context_kwargs(),
        )
