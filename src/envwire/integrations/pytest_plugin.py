from __future__ import annotations

from collections.abc import Iterator

import pytest

from envwire.defaults import DefaultValues
from envwire.environment import Environment
from envwire.environment_context import environment_context


@pytest.fixture()
def envwire_defaults() -> DefaultValues:
    """Create a per-test default registry.

    Defaults built during a test (including settings models read from the
    process environment) are discarded afterwards, so ``monkeypatch.setenv``
    in one test never leaks a cached default into another.

    Returns:
        A new ``DefaultValues`` registry.

    """
    return DefaultValues()


@pytest.fixture()
def envwire_environment(envwire_defaults: DefaultValues) -> Environment:
    """Create the environment bound for the duration of each test.

    Override this fixture to seed bindings or endpoint overrides shared by a
    test module.

    Returns:
        An empty ``Environment`` backed by ``envwire_defaults``.

    """
    return Environment(defaults=envwire_defaults)


@pytest.fixture(autouse=True)
def _envwire_bound_environment(envwire_environment: Environment) -> Iterator[Environment]:
    """Bind ``envwire_environment`` into ``environment_context`` around each test."""
    with environment_context.bind(envwire_environment) as environment:
        yield environment
