from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any, Generic, TypeAlias, TypeVar

from typing_extensions import Self

from envwire._internal.endpoints import (
    endpoint_names,
    get_endpoint,
    is_single_endpoint,
    normalize_endpoints,
    replace_endpoints,
)
from envwire._internal.type_checks import is_runtime_class
from envwire.environment import Environment
from envwire.exceptions import EnvwireInvalidServiceError, EnvwireMissingDefaultError

EndpointsT = TypeVar("EndpointsT")
ActionT = TypeVar("ActionT")

Endpoint: TypeAlias = Callable[[Environment], ActionT]
"""A function from the environment captured by a handle to the action it runs.

Examples:
    .. code-block:: python

        def open_endpoint(environment: Environment) -> Callable[[str], None]:
            open_url = environment[OpenURL]
            return lambda query: open_url(f"https://example.com?q={query}")

"""

_ENDPOINTS_ATTR = "endpoints"
_MISSING: Any = object()


class Service(Generic[EndpointsT]):
    """Base class for service keys: environment keys carrying an endpoint record.

    A subclass declares its default endpoints with a class-level ``endpoints``
    record. The record is a frozen dataclass, a ``NamedTuple`` or a mapping
    whose fields are all ``Endpoint`` functions, or a single ``Endpoint`` for
    callable services. The record is validated when the subclass is defined.

    The default value of a service key is ``cls()``: an instance carrying the
    class-level record. Instances are immutable; overrides build copies with
    ``with_endpoints``.

    Examples:
        .. code-block:: python

            @dataclass(frozen=True)
            class SearchEndpoints:
                open: Endpoint[Callable[[str], None]]
                fetch: Endpoint[Callable[[str], Awaitable[bytes]]]


            class Search(Service[SearchEndpoints]):
                endpoints = SearchEndpoints(open=_open, fetch=_fetch)

    """

    endpoints: EndpointsT

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        declared = _declared_endpoints(cls)
        if declared is not _MISSING:
            normalize_endpoints(declared, owner=cls.__qualname__)

    def __init__(self, endpoints: EndpointsT | None = None) -> None:
        owner = type(self).__qualname__
        if endpoints is None:
            endpoints = _declared_endpoints(type(self))
            if endpoints is _MISSING:
                msg = (
                    f"Service '{owner}' declares no default endpoints. Declare a class-level "
                    "'endpoints' record, pass endpoints explicitly, or register a default "
                    "factory with register_default()."
                )
                raise EnvwireMissingDefaultError(msg)
        object.__setattr__(self, _ENDPOINTS_ATTR, normalize_endpoints(endpoints, owner=owner))

    @classmethod
    def default_value(cls) -> Self:
        """Return the value used when the key is not bound in an environment."""
        return cls()

    def with_endpoints(self, endpoints: EndpointsT | None = None, /, **changes: Any) -> Self:
        """Return a copy with the record replaced and/or named endpoints overridden.

        Args:
            endpoints: Replacement record; the current record is kept when omitted.
            **changes: Endpoint functions replacing same-named fields.

        Raises:
            EnvwireUnknownEndpointError: If a change names an undeclared endpoint.
            EnvwireInvalidServiceError: If a replacement is not callable.

        """
        owner = type(self).__qualname__
        record = self.endpoints if endpoints is None else normalize_endpoints(endpoints, owner=owner)
        record = replace_endpoints(record, owner=owner, **changes)
        clone = copy.copy(self)
        object.__setattr__(clone, _ENDPOINTS_ATTR, record)
        return clone

    def __setattr__(self, name: str, value: Any) -> None:
        msg = f"'{type(self).__qualname__}' is immutable; use with_endpoints() to override endpoints."
        raise AttributeError(msg)

    def __delattr__(self, name: str) -> None:
        msg = f"'{type(self).__qualname__}' is immutable."
        raise AttributeError(msg)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return bool(self.endpoints == other.endpoints)  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        names = endpoint_names(self.endpoints)
        return f"{type(self).__qualname__}(endpoints=({', '.join(names) or 'callable'}))"


class ServiceHandle(Generic[EndpointsT]):
    """Pair an environment snapshot with a service's endpoint record.

    Attribute access dispatches by endpoint name: ``handle.fetch`` is
    ``endpoints.fetch(environment)``, evaluated on every access against the
    environment captured when the handle was built. Later overrides never
    reach an existing handle. Endpoint names that collide with handle members
    (``resolve``, ``environment``...) are reachable through ``resolve(name)``.

    For callable services (the record is a single endpoint) the handle itself
    is callable: ``handle(*args)`` runs ``endpoints(environment)(*args)``.
    """

    __slots__ = ("_endpoints", "_environment", "_service_key")

    def __init__(
        self,
        *,
        environment: Environment,
        service_key: type[Service[EndpointsT]],
        endpoints: EndpointsT,
    ) -> None:
        object.__setattr__(self, "_environment", environment)
        object.__setattr__(self, "_service_key", service_key)
        object.__setattr__(self, "_endpoints", endpoints)

    @classmethod
    def from_environment(
        cls,
        environment: Environment,
        service_key: type[Service[EndpointsT]],
    ) -> ServiceHandle[EndpointsT]:
        """Build a handle for ``service_key`` from the value bound in ``environment``.

        Raises:
            EnvwireInvalidServiceError: If ``service_key`` is not a ``Service``
                subclass or is bound to something other than a service instance.

        """
        if not (is_runtime_class(service_key) and issubclass(service_key, Service)):
            msg = f"'{service_key!r}' is not a Service subclass and cannot be resolved as a service."
            raise EnvwireInvalidServiceError(msg)
        service = environment.get(service_key)
        if not isinstance(service, Service):
            msg = (
                f"Environment binds '{service_key.__qualname__}' to {service!r}, "
                "which is not a Service instance."
            )
            raise EnvwireInvalidServiceError(msg)
        return cls(environment=environment, service_key=service_key, endpoints=service.endpoints)

    @property
    def environment(self) -> Environment:
        return self._environment

    @property
    def endpoints(self) -> EndpointsT:
        return self._endpoints

    @property
    def service_key(self) -> type[Service[EndpointsT]]:
        return self._service_key

    def resolve(self, name: str) -> Any:
        """Return the action of endpoint ``name`` for the captured environment.

        Raises:
            EnvwireUnknownEndpointError: If the record declares no such endpoint.

        """
        return get_endpoint(self._endpoints, name)(self._environment)

    def action(self) -> Any:
        """Return the action of a callable service.

        Raises:
            EnvwireInvalidServiceError: If the record is a table of named endpoints.

        """
        if not is_single_endpoint(self._endpoints):
            msg = (
                f"'{self._service_key.__qualname__}' declares named endpoints "
                f"({', '.join(endpoint_names(self._endpoints))}); access them by name."
            )
            raise EnvwireInvalidServiceError(msg)
        endpoint: Callable[[Environment], Any] = self._endpoints  # type: ignore[assignment]
        return endpoint(self._environment)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.action()(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.resolve(name)

    def __setattr__(self, name: str, value: Any) -> None:
        msg = "ServiceHandle is immutable."
        raise AttributeError(msg)

    def __dir__(self) -> list[str]:
        return sorted({*super().__dir__(), *endpoint_names(self._endpoints)})

    def __repr__(self) -> str:
        names = endpoint_names(self._endpoints)
        return (
            f"ServiceHandle({self._service_key.__qualname__}, "
            f"endpoints=({', '.join(names) or 'callable'}))"
        )


def _declared_endpoints(cls: type[Any]) -> Any:
    for klass in cls.__mro__:
        if klass is Service:
            break
        declared = vars(klass).get(_ENDPOINTS_ATTR, _MISSING)
        if declared is _MISSING:
            continue
        if isinstance(declared, staticmethod):
            return declared.__func__
        return declared
    return _MISSING


__all__ = [
    "Endpoint",
    "Service",
    "ServiceHandle",
]
