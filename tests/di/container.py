"""Test container builder."""

from dishka import AsyncContainer, make_async_container

from tally.util.di import PROVIDERS, Component, get_provider


def build_test_container(unmock: set[Component] | None = None) -> AsyncContainer:
    """Build a container with swappable components on their in-memory side.

    Settings are read from the environment when first resolved, so tests
    can tune quotas or flags with monkeypatched variables.

    Args:
        unmock: Components to run on their production implementation
            (``{"persistence"}`` needs a migrated PostgreSQL database)

    Raises:
        ValueError: If an unknown component is named

    Examples:
        container = build_test_container()
        container = build_test_container(unmock={"persistence"})
    """
    unmock = unmock or set()
    _validate_unmock(unmock)

    provider_instances = []
    for base in PROVIDERS:
        component = getattr(base, "__mock_component__", None)
        use_mock = component is not None and component not in unmock
        provider_instances.append(get_provider(base, use_mock=use_mock)())

    return make_async_container(*provider_instances)


def _validate_unmock(unmock: set[Component]) -> None:
    known = {
        base.__mock_component__
        for base in PROVIDERS
        if base.__subclasses__() and base.__mock_component__
    }
    unknown = unmock - known
    if unknown:
        raise ValueError(f"Unknown components: {unknown}")
