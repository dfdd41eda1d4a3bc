"""SpiceDB client wiring.

``get_spicedb_client`` builds a client from settings. ``AuthorizationBootstrap``
owns one shared client for a process or test session: the client is created
once, the schema is optionally written on first use, and the connection is
closed on teardown.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from infrastructure.settings import SpiceDBSettings, get_spicedb_settings
from permissions.application.permissions import Permissions
from shared_kernel.authorization.observability import AuthorizationProbe
from shared_kernel.authorization.protocols import AuthorizationProvider
from shared_kernel.authorization.spicedb.client import SpiceDBClient


def get_spicedb_client(
    settings: SpiceDBSettings | None = None,
    probe: AuthorizationProbe | None = None,
) -> AuthorizationProvider:
    """Get a SpiceDB authorization client.

    The underlying gRPC connection is opened lazily by the client on its
    first request.

    Returns:
        Configured SpiceDB client implementing AuthorizationProvider protocol
    """
    settings = settings or get_spicedb_settings()
    return SpiceDBClient(
        endpoint=settings.endpoint,
        preshared_key=settings.preshared_key.get_secret_value(),
        use_tls=settings.use_tls,
        cert_path=settings.cert_path,
        fully_consistent=settings.fully_consistent,
        probe=probe,
    )


class AuthorizationBootstrap:
    """Provision a shared authorization provider exactly once.

    Concurrent callers of :meth:`provider` wait on the same lock; only the
    first one builds the provider and writes the schema.

    Example:
        >>> bootstrap = AuthorizationBootstrap(schema=schema_text)
        >>> provider = await bootstrap.provider()
        >>> mutate, validate, introspect = await bootstrap.permissions()
        >>> await bootstrap.close()
    """

    def __init__(
        self,
        schema: str | None = None,
        factory: Callable[[], AuthorizationProvider] = get_spicedb_client,
    ):
        self._schema = schema
        self._factory = factory
        self._provider: AuthorizationProvider | None = None
        self._lock = asyncio.Lock()

    @property
    def is_provisioned(self) -> bool:
        return self._provider is not None

    async def provider(self) -> AuthorizationProvider:
        """Return the shared provider, creating it on first use."""
        if self._provider is not None:
            return self._provider

        async with self._lock:
            if self._provider is None:
                provider = self._factory()
                if self._schema is not None:
                    try:
                        await provider.write_schema(self._schema)
                    except BaseException:
                        await provider.close()
                        raise
                self._provider = provider

        return self._provider

    async def permissions(self, disable_transactions: bool = False) -> tuple:
        """``(mutate, validate, introspect)`` factories bound to the shared provider."""
        return Permissions.with_client(
            await self.provider(), disable_transactions=disable_transactions
        )

    async def close(self) -> None:
        """Close the shared provider, if one was created."""
        async with self._lock:
            provider, self._provider = self._provider, None
        if provider is not None:
            await provider.close()
