"""Bootstrap – build a ready :class:`WorkflowContext` from settings."""
from __future__ import annotations

from adt_saga.adapters.http import HttpxAdtConnection
from adt_saga.application.saga.context import WorkflowContext
from adt_saga.application.saga.store import JsonFileLockRegistry, LockRegistry
from adt_saga.config import AdtSettings, DotenvSettingsLoader, EnvSettingsLoader
from adt_saga.kernel.ports import AdtConnection, ClientFactory
from adt_saga.observability.logging import JsonLoggerFactory, get_logger

logger = get_logger(__name__)


def load_settings(env_file: str | None = None) -> AdtSettings:
    """Read :class:`AdtSettings` from ``ADT_*`` variables, optionally seeded from *env_file*."""
    if env_file is not None:
        return DotenvSettingsLoader(env_file).load(AdtSettings)
    return EnvSettingsLoader().load(AdtSettings)


def create_context(
    settings: AdtSettings,
    client_factory: ClientFactory,
    *,
    connection: AdtConnection | None = None,
    configure_logging: bool = True,
) -> WorkflowContext:
    """Wire logging, the connection and the lock registry into a context.

    Pass *connection* to reuse one (tests pass a fake); otherwise an
    :class:`HttpxAdtConnection` is built from *settings*.
    """
    if configure_logging:
        JsonLoggerFactory.configure(settings.log_level)
    if connection is None:
        connection = HttpxAdtConnection.from_settings(settings)
    registry: LockRegistry | None = None
    if settings.lock_registry_dir:
        registry = JsonFileLockRegistry(settings.lock_registry_dir)
    logger.info(
        "bootstrap.context_created",
        url=settings.url,
        client=settings.client,
        lock_registry=settings.lock_registry_dir,
    )
    return WorkflowContext(
        connection,
        client_factory,
        lock_registry=registry,
        cache_size=settings.client_cache_size,
    )


__all__ = ["create_context", "load_settings"]
