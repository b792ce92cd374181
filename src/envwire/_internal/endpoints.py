from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from envwire.exceptions import EnvwireInvalidServiceError, EnvwireUnknownEndpointError


def is_dataclass_record(record: object) -> bool:
    return dataclasses.is_dataclass(record) and not isinstance(record, type)


def is_namedtuple_record(record: object) -> bool:
    return isinstance(record, tuple) and hasattr(type(record), "_fields")


def is_single_endpoint(record: object) -> bool:
    """Return whether the record is one endpoint rather than a named table."""
    if is_dataclass_record(record) or is_namedtuple_record(record):
        return False
    if isinstance(record, Mapping):
        return False
    return callable(record)


def normalize_endpoints(record: Any, *, owner: str) -> Any:
    """Validate an endpoint record and freeze mapping records."""
    if isinstance(record, Mapping):
        record = MappingProxyType(dict(record))
    for name in endpoint_names(record, owner=owner):
        endpoint = get_endpoint(record, name)
        if not callable(endpoint):
            msg = f"Endpoint '{name}' of '{owner}' must be callable, got {endpoint!r}."
            raise EnvwireInvalidServiceError(msg)
    return record


def endpoint_names(record: object, *, owner: str = "service") -> tuple[str, ...]:
    """Return the endpoint names declared by a record.

    A single-endpoint record has no names.

    Raises:
        EnvwireInvalidServiceError: If the record is not a supported shape.

    """
    if is_dataclass_record(record):
        return tuple(field.name for field in dataclasses.fields(record))  # type: ignore[arg-type]
    if is_namedtuple_record(record):
        return tuple(type(record)._fields)  # type: ignore[attr-defined]
    if isinstance(record, Mapping):
        return tuple(str(name) for name in record)
    if callable(record):
        return ()
    msg = (
        f"Endpoints of '{owner}' must be a dataclass, a NamedTuple, a mapping of "
        f"endpoints or a single endpoint callable, got {record!r}."
    )
    raise EnvwireInvalidServiceError(msg)


def get_endpoint(record: object, name: str) -> Callable[..., Any]:
    """Return the endpoint stored under ``name``.

    Raises:
        EnvwireUnknownEndpointError: If the record declares no such endpoint.

    """
    if isinstance(record, Mapping):
        try:
            return record[name]
        except KeyError:
            pass
    elif name in endpoint_names(record):
        return getattr(record, name)
    msg = (
        f"Unknown endpoint '{name}'. Available endpoints: "
        f"{', '.join(endpoint_names(record)) or '(single endpoint)'}."
    )
    raise EnvwireUnknownEndpointError(msg)


def replace_endpoints(record: Any, *, owner: str, **changes: Any) -> Any:
    """Return a copy of ``record`` with the named endpoints replaced.

    Raises:
        EnvwireUnknownEndpointError: If a change names an undeclared endpoint.
        EnvwireInvalidServiceError: If a replacement is not callable.

    """
    if not changes:
        return record

    names = endpoint_names(record, owner=owner)
    unknown = [name for name in changes if name not in names]
    if unknown:
        msg = (
            f"'{owner}' declares no endpoint named {', '.join(repr(name) for name in unknown)}. "
            f"Available endpoints: {', '.join(names) or '(single endpoint)'}."
        )
        raise EnvwireUnknownEndpointError(msg)

    for name, endpoint in changes.items():
        if not callable(endpoint):
            msg = f"Endpoint '{name}' of '{owner}' must be callable, got {endpoint!r}."
            raise EnvwireInvalidServiceError(msg)

    if is_dataclass_record(record):
        return dataclasses.replace(record, **changes)
    if is_namedtuple_record(record):
        return record._replace(**changes)
    return MappingProxyType({**record, **changes})


__all__ = [
    "endpoint_names",
    "get_endpoint",
    "is_single_endpoint",
    "normalize_endpoints",
    "replace_endpoints",
]
