"""Dependency injection container."""

from dishka import AsyncContainer, Provider, make_async_container
from dishka.integrations.fastapi import setup_dishka

from tally.config import Settings
from tally.util.di import PROVIDERS, get_provider


def create_container(*extra_providers: Provider) -> AsyncContainer:
    """Build production container.

    Settings are loaded from environment variables automatically. With
    ``STORAGE__BACKEND=memory`` the persistence component uses the in-memory
    store instead of PostgreSQL.

    Args:
        extra_providers: Integration providers (e.g. FastapiProvider)

    Returns:
        Configured DI container
    """
    use_memory = Settings().storage.backend == "memory"

    provider_instances = []
    for base in PROVIDERS:
        use_mock = use_memory and getattr(base, "__mock_component__", None) == "persistence"
        provider_instances.append(get_provider(base, use_mock=use_mock)())

    return make_async_container(*provider_instances, *extra_providers)


def setup_di(app, container: AsyncContainer) -> None:
    """Setup dependency injection for FastAPI.

    Args:
        app: FastAPI application
        container: DI container
    """
    setup_dishka(container, app)
