"""Integration test fixtures.

These fixtures require a running SpiceDB instance. Tests are skipped
unless ``REBAC_INTEGRATION=1``; connection settings come from the usual
``REBAC_SPICEDB_*`` variables.
"""

from collections.abc import AsyncGenerator
import os
from pathlib import Path
import types
import uuid

import pytest
import pytest_asyncio

from codegen.application.services import EntityGenerationService
from codegen.infrastructure.schema_loader import JsonSchemaLoader
from infrastructure.authorization_dependencies import AuthorizationBootstrap
from infrastructure.logging import configure_logging

SCHEMA_PATH = Path(__file__).parent / "fixtures" / "forms.zed"
MODEL_PATH = Path(__file__).parents[1] / "fixtures" / "forms-model.json"


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly enabled."""
    if os.getenv("REBAC_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set REBAC_INTEGRATION=1 to run against SpiceDB")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="session", autouse=True)
def logging_configured():
    configure_logging(debug=True)


@pytest_asyncio.fixture
async def bootstrap() -> AsyncGenerator[AuthorizationBootstrap, None]:
    """Provide a bootstrap that writes the test schema on first use."""
    bootstrap = AuthorizationBootstrap(schema=SCHEMA_PATH.read_text())
    yield bootstrap
    await bootstrap.close()


@pytest.fixture
def unique_id():
    """Build identifiers that do not collide with earlier runs."""
    suffix = uuid.uuid4().hex[:8]
    return lambda name: f"{name}_{suffix}"


@pytest.fixture(scope="session")
def entities() -> types.ModuleType:
    """Entity module generated from the JSON form of the test schema."""
    module = EntityGenerationService(JsonSchemaLoader()).render(MODEL_PATH)
    namespace = types.ModuleType("authorization_entities")
    exec(compile(module.source, "authorization_entities.py", "exec"), namespace.__dict__)
    return namespace
