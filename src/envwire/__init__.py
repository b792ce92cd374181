from envwire.defaults import DefaultValues, default_values, register_default
from envwire.environment import Environment, EnvironmentKey
from envwire.environment_context import (
    EnvironmentContext,
    ServiceProperty,
    environment_context,
    resolve,
)
from envwire.exceptions import (
    EnvwireError,
    EnvwireInvalidInjectionError,
    EnvwireInvalidKeyError,
    EnvwireInvalidServiceError,
    EnvwireMissingDefaultError,
    EnvwireUnknownEndpointError,
)
from envwire.lock_mode import LockMode
from envwire.markers import FromEnvironment, Injected
from envwire.service import Endpoint, Service, ServiceHandle

__all__ = [
    "DefaultValues",
    "Endpoint",
    "Environment",
    "EnvironmentContext",
    "EnvironmentKey",
    "EnvwireError",
    "EnvwireInvalidInjectionError",
    "EnvwireInvalidKeyError",
    "EnvwireInvalidServiceError",
    "EnvwireMissingDefaultError",
    "EnvwireUnknownEndpointError",
    "FromEnvironment",
    "Injected",
    "LockMode",
    "Service",
    "ServiceHandle",
    "ServiceProperty",
    "default_values",
    "environment_context",
    "register_default",
    "resolve",
]
