"""Observability for entity generation."""

from codegen.application.observability.generator_probe import (
    DefaultGeneratorProbe,
    GeneratorProbe,
)

__all__ = [
    "DefaultGeneratorProbe",
    "GeneratorProbe",
]
