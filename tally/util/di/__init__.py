"""Dependency injection module."""

from typing import Type

from tally.util.di.application import ProdApplicationProvider
from tally.util.di.base import Component, ProviderBase
from tally.util.di.core import ProdConfigProvider
from tally.util.di.domain import ProdDomainProvider
from tally.util.di.infrastructure import (
    BroadcastProvider,
    InMemoryPersistenceProvider,
    PersistenceProvider,
    ProdPersistenceProvider,
)

# Every provider of the app; swappable components are resolved by get_provider
PROVIDERS: list[Type[ProviderBase]] = [
    # Core providers (not mockable)
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    BroadcastProvider,
    # Infrastructure components (mockable)
    PersistenceProvider,
]


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Resolve a provider list entry to the class to instantiate.

    Entries without subclasses are concrete and returned unchanged. An
    entry with subclasses is a swappable component (only persistence
    today): the PostgreSQL implementation, or the in-memory one when
    ``use_mock`` is set.

    Raises:
        ValueError: If the component has no implementation of that kind
    """
    implementations = base.__subclasses__()
    if not implementations:
        return base

    impl = next(
        (c for c in implementations if getattr(c, "__is_mock__", False) == use_mock),
        None,
    )
    if impl is None:
        kind = "in-memory" if use_mock else "production"
        component_name = getattr(base, "__mock_component__", None) or base.__name__
        raise ValueError(f"No {kind} implementation for {component_name}")

    return impl


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    # Core providers
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "BroadcastProvider",
    # Infrastructure base classes
    "PersistenceProvider",
    # Infrastructure implementations
    "InMemoryPersistenceProvider",
    "ProdPersistenceProvider",
]
