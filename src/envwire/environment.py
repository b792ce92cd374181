from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeVar

from typing_extensions import Self

from envwire._internal.type_checks import ensure_environment_key
from envwire.defaults import DefaultValues, default_values
from envwire.exceptions import EnvwireInvalidKeyError, EnvwireInvalidServiceError

if TYPE_CHECKING:
    from envwire.service import Service, ServiceHandle

T = TypeVar("T")
EndpointsT = TypeVar("EndpointsT")


class EnvironmentKey:
    """Base class for environment keys whose default is their no-argument instance.

    Any class can be an environment key; subclassing ``EnvironmentKey`` only
    documents the intent and gives a ``default_value()`` hook to override when
    the default needs more than a bare constructor call.
    """

    @classmethod
    def default_value(cls) -> Self:
        """Return the value used when the key is not bound in an environment."""
        return cls()


class Environment:
    """Immutable key/value store keyed by type identity.

    Every mutation returns a new environment; the receiver is never changed, so
    an environment captured by a ``ServiceHandle`` is a stable snapshot.
    Lookups of unbound keys fall back to the key's default value from the
    ``DefaultValues`` registry, so a lookup of a valid key never fails for lack
    of a binding.

    Examples:
        .. code-block:: python

            environment = Environment().set(Locale, Locale("fi"))
            locale = environment[Locale]
            search = environment.service(Search)
            search.open("cats")

    """

    __slots__ = ("_defaults", "_values")

    def __init__(
        self,
        values: Mapping[type[Any], Any] | None = None,
        *,
        defaults: DefaultValues | None = None,
    ) -> None:
        bindings = dict(values or {})
        for key in bindings:
            ensure_environment_key(key)
        self._values: Mapping[type[Any], Any] = MappingProxyType(bindings)
        self._defaults = defaults if defaults is not None else default_values

    @property
    def defaults(self) -> DefaultValues:
        return self._defaults

    def get(self, key: type[T]) -> T:
        """Return the value bound to ``key`` or the key's default value.

        Raises:
            EnvwireInvalidKeyError: If ``key`` is not a runtime class.
            EnvwireMissingDefaultError: If ``key`` is unbound and has no default.

        """
        try:
            return self._values[key]
        except KeyError:
            return self._defaults.get(key)
        except TypeError as exc:
            msg = f"Environment keys must be classes, got {key!r}."
            raise EnvwireInvalidKeyError(msg) from exc

    def __getitem__(self, key: type[T]) -> T:
        return self.get(key)

    def set(self, key: type[T], value: T) -> Environment:
        """Return a new environment binding ``key`` to ``value``."""
        ensure_environment_key(key)
        return self._copy_with({key: value})

    def with_values(self, values: Mapping[type[Any], Any]) -> Environment:
        """Return a new environment with every pair of ``values`` bound."""
        for key in values:
            ensure_environment_key(key)
        return self._copy_with(values)

    def override_endpoints(
        self,
        service_key: type[Service[EndpointsT]],
        endpoints: EndpointsT | None = None,
        /,
        **changes: Any,
    ) -> Environment:
        """Return a new environment overriding endpoints of ``service_key``.

        The service currently visible for the key (bound or default) is copied
        with its record replaced by ``endpoints`` when given, then with each
        named endpoint in ``changes`` replaced. Fields not named keep their
        current functions.

        Raises:
            EnvwireInvalidServiceError: If ``service_key`` is not bound to a service.
            EnvwireUnknownEndpointError: If a change names an undeclared endpoint.

        """
        current = self.get(service_key)
        with_endpoints = getattr(current, "with_endpoints", None)
        if with_endpoints is None:
            msg = f"'{service_key!r}' is not bound to a service; its endpoints cannot be overridden."
            raise EnvwireInvalidServiceError(msg)
        return self.set(service_key, with_endpoints(endpoints, **changes))

    def service(self, service_key: type[Service[EndpointsT]]) -> ServiceHandle[EndpointsT]:
        """Return a handle for ``service_key`` capturing this environment."""
        from envwire.service import ServiceHandle  # noqa: PLC0415

        return ServiceHandle.from_environment(self, service_key)

    def is_bound(self, key: type[Any]) -> bool:
        """Return whether ``key`` has an explicit binding (defaults do not count)."""
        return key in self._values

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[type[Any]]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        keys = ", ".join(getattr(key, "__qualname__", repr(key)) for key in self._values)
        return f"Environment({keys})"

    def _copy_with(self, values: Mapping[type[Any], Any]) -> Environment:
        return Environment({**self._values, **values}, defaults=self._defaults)


__all__ = [
    "Environment",
    "EnvironmentKey",
]
