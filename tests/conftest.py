"""Shared pytest fixtures for envwire tests."""

import pytest

from envwire.defaults import DefaultValues
from envwire.environment import Environment
from envwire.environment_context import EnvironmentContext


@pytest.fixture()
def defaults() -> DefaultValues:
    """Fresh default registry so cached defaults never cross tests."""
    return DefaultValues()


@pytest.fixture()
def environment(defaults: DefaultValues) -> Environment:
    """Empty environment backed by the per-test registry."""
    return Environment(defaults=defaults)


@pytest.fixture()
def context(environment: Environment) -> EnvironmentContext:
    """Environment context whose root is the per-test environment."""
    return EnvironmentContext(root=environment)
