"""Application service for generating entity modules."""

from __future__ import annotations

import os
from pathlib import Path
import tempfile

from codegen.application.generator import EntityGenerator, GeneratedModule
from codegen.application.observability import DefaultGeneratorProbe, GeneratorProbe
from codegen.ports.protocols import SchemaLoader


class EntityGenerationService:
    """Loads a schema, renders its entity module and writes it out.

    Regeneration replaces the output file as a whole; a failed run leaves
    any previous module in place.
    """

    def __init__(
        self,
        loader: SchemaLoader,
        generator: EntityGenerator | None = None,
        probe: GeneratorProbe | None = None,
    ):
        self._loader = loader
        self._probe = probe or DefaultGeneratorProbe()
        self._generator = generator or EntityGenerator(probe=self._probe)

    def render(self, schema_path: Path) -> GeneratedModule:
        """Load ``schema_path`` and render the module without writing it."""
        model = self._loader.load(schema_path)
        self._probe.schema_loaded(
            source=str(schema_path),
            type_count=len(model.type_definitions),
            condition_count=len(model.conditions),
        )
        return self._generator.generate(model, source_name=schema_path.name)

    def generate(self, schema_path: Path, output_path: Path) -> GeneratedModule:
        """Render the module for ``schema_path`` and write it to ``output_path``."""
        module = self.render(schema_path)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            dir=output_path.parent, prefix=f".{output_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(module.source)
            os.replace(temp_name, output_path)
        except BaseException:
            os.unlink(temp_name)
            raise

        self._probe.module_written(path=str(output_path), size=len(module.source))
        return module
