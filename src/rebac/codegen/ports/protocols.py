"""Ports for the codegen bounded context."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from codegen.domain.model import AuthorizationModel


class SchemaLoader(Protocol):
    """Reads an authorization schema into the schema model."""

    def load(self, path: Path) -> AuthorizationModel:
        """Load the schema at ``path``.

        Raises:
            SchemaError: If the schema cannot be read or parsed
        """
        ...
