"""Fixtures for the permissions DSL tests."""

from unittest.mock import create_autospec

import pytest

from permissions.application.observability import PermissionsProbe


@pytest.fixture
def mock_probe():
    """Provide a mock PermissionsProbe."""
    return create_autospec(PermissionsProbe, instance=True)
