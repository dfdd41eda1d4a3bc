"""Unit tests for EntityGenerationService."""

from unittest.mock import create_autospec

import pytest

from codegen.application.services import EntityGenerationService
from codegen.infrastructure.schema_loader import JsonSchemaLoader, parse_schema
from codegen.ports.exceptions import SchemaError
from codegen.ports.protocols import SchemaLoader


@pytest.fixture
def schema_file(tmp_path, forms_model_json):
    path = tmp_path / "fga-model.json"
    path.write_text(forms_model_json)
    return path


class TestEntityGenerationService:
    def test_generate_writes_module(self, tmp_path, schema_file, mock_generator_probe):
        output = tmp_path / "out" / "authorization_entities.py"
        service = EntityGenerationService(JsonSchemaLoader(), probe=mock_generator_probe)

        module = service.generate(schema_file, output)

        assert output.read_text() == module.source
        mock_generator_probe.schema_loaded.assert_called_once_with(
            source=str(schema_file), type_count=7, condition_count=2
        )
        mock_generator_probe.module_written.assert_called_once_with(
            path=str(output), size=len(module.source)
        )

    def test_regeneration_replaces_previous_module(self, tmp_path, schema_file):
        output = tmp_path / "authorization_entities.py"
        output.write_text("stale = True\n")

        EntityGenerationService(JsonSchemaLoader()).generate(schema_file, output)

        assert "stale" not in output.read_text()
        assert list(tmp_path.glob(".*.tmp")) == []

    def test_failed_generation_keeps_previous_module(self, tmp_path):
        output = tmp_path / "authorization_entities.py"
        output.write_text("previous = True\n")
        bad_schema = tmp_path / "bad.json"
        bad_schema.write_text("{}")

        with pytest.raises(SchemaError):
            EntityGenerationService(JsonSchemaLoader()).generate(bad_schema, output)

        assert output.read_text() == "previous = True\n"

    def test_render_uses_injected_loader(self, tmp_path, forms_model_json):
        loader = create_autospec(SchemaLoader, instance=True)
        loader.load.return_value = parse_schema(forms_model_json)

        module = EntityGenerationService(loader).render(tmp_path / "model.json")

        loader.load.assert_called_once_with(tmp_path / "model.json")
        assert "class Form(Resource):" in module.source
        assert "# This file is auto-generated from model.json." in module.source
