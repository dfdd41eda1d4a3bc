"""Unit tests for authorization provider wiring."""

import asyncio
from unittest.mock import MagicMock, create_autospec

import pytest

from infrastructure.authorization_dependencies import (
    AuthorizationBootstrap,
    get_spicedb_client,
)
from infrastructure.settings import SpiceDBSettings
from shared_kernel.authorization.protocols import AuthorizationProvider
from shared_kernel.authorization.spicedb.client import SpiceDBClient
from shared_kernel.authorization.spicedb.exceptions import SpiceDBPermissionError

SCHEMA = "definition user {}"


@pytest.fixture
def provider():
    return create_autospec(AuthorizationProvider, instance=True)


@pytest.fixture
def factory(provider):
    return MagicMock(return_value=provider)


class TestGetSpiceDBClient:
    def test_builds_client_from_settings(self):
        settings = SpiceDBSettings(
            endpoint="spicedb:50051", preshared_key="key", _env_file=None
        )

        client = get_spicedb_client(settings)

        assert isinstance(client, SpiceDBClient)


class TestAuthorizationBootstrap:
    @pytest.mark.asyncio
    async def test_provider_is_created_once(self, factory, provider):
        bootstrap = AuthorizationBootstrap(schema=SCHEMA, factory=factory)

        results = await asyncio.gather(*(bootstrap.provider() for _ in range(5)))

        assert all(result is provider for result in results)
        factory.assert_called_once_with()
        provider.write_schema.assert_awaited_once_with(SCHEMA)
        assert bootstrap.is_provisioned

    @pytest.mark.asyncio
    async def test_schema_is_optional(self, factory, provider):
        bootstrap = AuthorizationBootstrap(factory=factory)

        await bootstrap.provider()

        provider.write_schema.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_schema_write_closes_provider(self, factory, provider):
        provider.write_schema.side_effect = SpiceDBPermissionError("bad schema")
        bootstrap = AuthorizationBootstrap(schema=SCHEMA, factory=factory)

        with pytest.raises(SpiceDBPermissionError):
            await bootstrap.provider()

        provider.close.assert_awaited_once()
        assert not bootstrap.is_provisioned

    @pytest.mark.asyncio
    async def test_permissions_are_bound_to_shared_provider(self, factory, provider):
        bootstrap = AuthorizationBootstrap(factory=factory)

        mutate, validate, introspect = await bootstrap.permissions()

        assert mutate.__self__.provider is provider
        assert validate.__self__.transactional is True
        assert introspect.__self__.provider is provider

    @pytest.mark.asyncio
    async def test_permissions_without_transactions(self, factory):
        bootstrap = AuthorizationBootstrap(factory=factory)

        mutate, _, _ = await bootstrap.permissions(disable_transactions=True)

        assert mutate.__self__.transactional is False

    @pytest.mark.asyncio
    async def test_close_releases_provider(self, factory, provider):
        bootstrap = AuthorizationBootstrap(factory=factory)
        await bootstrap.provider()

        await bootstrap.close()
        await bootstrap.close()

        provider.close.assert_awaited_once()
        assert not bootstrap.is_provisioned
