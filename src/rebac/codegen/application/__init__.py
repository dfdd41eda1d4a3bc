"""Codegen application layer: the entity generator and its service."""

from codegen.application.generator import (
    EntityGenerator,
    GeneratedEntity,
    GeneratedModule,
    class_name,
)
from codegen.application.services import EntityGenerationService

__all__ = [
    "EntityGenerationService",
    "EntityGenerator",
    "GeneratedEntity",
    "GeneratedModule",
    "class_name",
]
