"""Unit test fixtures with mocked dependencies."""

from unittest.mock import create_autospec

import pytest

from shared_kernel.authorization.protocols import AuthorizationProvider
from shared_kernel.authorization.types import WriteResult


@pytest.fixture
def mock_provider():
    """Provide an AuthorizationProvider mock whose writes echo their input."""
    provider = create_autospec(AuthorizationProvider, instance=True)
    provider.write.side_effect = lambda writes, deletes, transactional=True: (
        WriteResult(written=tuple(writes), deleted=tuple(deletes))
    )
    provider.check.return_value = False
    provider.batch_check.side_effect = lambda requests: [False] * len(requests)
    provider.list_objects.return_value = []
    provider.read.return_value = []
    provider.list_users.return_value = []
    return provider
