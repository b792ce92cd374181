from __future__ import annotations

import types
from typing import Any, TypeGuard

from envwire.exceptions import EnvwireInvalidKeyError


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a plain class rather than an alias or instance.

    ``list[int]`` passes ``isinstance(..., type)`` on some interpreters, so
    parameterized generics are excluded explicitly.
    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def ensure_environment_key(key: object) -> None:
    """Reject anything that cannot identify a slot in an ``Environment``.

    Raises:
        EnvwireInvalidKeyError: If ``key`` is an instance, a string forward
            reference or a parameterized generic.

    """
    if not is_runtime_class(key):
        msg = f"Environment keys must be classes, got {key!r}."
        raise EnvwireInvalidKeyError(msg)


__all__ = ["ensure_environment_key", "is_runtime_class"]
