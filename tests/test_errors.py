"""Tests for the envwire exception hierarchy and public exports."""

import pytest

import envwire
from envwire.exceptions import (
    EnvwireError,
    EnvwireInvalidInjectionError,
    EnvwireInvalidKeyError,
    EnvwireInvalidServiceError,
    EnvwireMissingDefaultError,
    EnvwireUnknownEndpointError,
)


@pytest.mark.parametrize(
    "error_type",
    [
        EnvwireInvalidInjectionError,
        EnvwireInvalidKeyError,
        EnvwireInvalidServiceError,
        EnvwireMissingDefaultError,
        EnvwireUnknownEndpointError,
    ],
)
def test_all_errors_share_the_envwire_base(error_type: type[Exception]) -> None:
    assert issubclass(error_type, EnvwireError)
    assert error_type.__doc__


def test_unknown_endpoint_is_an_attribute_error() -> None:
    assert issubclass(EnvwireUnknownEndpointError, AttributeError)


def test_public_exports_resolve() -> None:
    for name in envwire.__all__:
        assert getattr(envwire, name) is not None
