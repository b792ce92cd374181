from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from typing import Any, TypeVar, overload

from envwire._internal.type_checks import ensure_environment_key
from envwire.exceptions import EnvwireInvalidKeyError, EnvwireMissingDefaultError
from envwire.integrations.pydantic_settings import (
    is_pydantic_settings_subclass,
    load_settings_default,
)
from envwire.lock_mode import LockMode

logger = logging.getLogger(__name__)

T = TypeVar("T")
DefaultFactory = Callable[[], Any]

_DEFAULT_VALUE_ATTR = "default_value"


class DefaultValues:
    """Registry of lazily built default values keyed by type identity.

    The default for a key is chosen in this order: a factory registered with
    ``register``, the key's ``default_value()`` classmethod, a zero-argument
    call for Pydantic settings models, and finally a zero-argument call of the
    key itself. Each default is built once, on the first unbound lookup, and
    cached for the lifetime of the registry.
    """

    def __init__(self, *, lock_mode: LockMode = LockMode.THREAD) -> None:
        self._factories: dict[type[Any], DefaultFactory] = {}
        self._values: dict[type[Any], Any] = {}
        self._lock_mode = lock_mode
        self._lock: AbstractContextManager[Any] = (
            threading.RLock() if lock_mode is LockMode.THREAD else nullcontext()
        )

    @property
    def lock_mode(self) -> LockMode:
        return self._lock_mode

    @overload
    def register(self, key: type[T], factory: Callable[[], T]) -> Callable[[], T]: ...

    @overload
    def register(
        self,
        key: type[T],
        factory: None = None,
    ) -> Callable[[Callable[[], T]], Callable[[], T]]: ...

    def register(
        self,
        key: type[T],
        factory: Callable[[], T] | None = None,
    ) -> Callable[[], T] | Callable[[Callable[[], T]], Callable[[], T]]:
        """Register the factory that builds the default value for ``key``.

        Supports direct and decorator forms. Registering a factory drops any
        default already cached for the key, so the next unbound lookup builds
        a fresh value.

        Args:
            key: Environment key the factory provides a default for.
            factory: Zero-argument callable returning the default value.

        Raises:
            EnvwireInvalidKeyError: If ``key`` is not a runtime class.

        """
        ensure_environment_key(key)

        def decorator(decorated_factory: Callable[[], T]) -> Callable[[], T]:
            with self._lock:
                self._factories[key] = decorated_factory
                self._values.pop(key, None)
            logger.debug("Registered default factory for %s", _key_name(key))
            return decorated_factory

        if factory is None:
            return decorator
        return decorator(factory)

    def get(self, key: type[T]) -> T:
        """Return the cached default for ``key``, building it on first use.

        Raises:
            EnvwireInvalidKeyError: If ``key`` is not a runtime class.
            EnvwireMissingDefaultError: If no default can be built for ``key``.

        """
        try:
            return self._values[key]
        except KeyError:
            pass
        except TypeError as exc:
            msg = f"Environment keys must be classes, got {key!r}."
            raise EnvwireInvalidKeyError(msg) from exc

        ensure_environment_key(key)
        with self._lock:
            if key in self._values:
                return self._values[key]
            value = self._build(key)
            self._values[key] = value
        return value

    def clear(self, key: type[Any] | None = None) -> None:
        """Drop cached defaults so they are rebuilt on the next lookup.

        Registered factories are kept.
        """
        with self._lock:
            if key is None:
                self._values.clear()
            else:
                self._values.pop(key, None)

    def _build(self, key: type[T]) -> T:
        factory = self._factories.get(key)
        if factory is not None:
            logger.debug("Building default for %s from registered factory", _key_name(key))
            return factory()

        if _has_default_value_hook(key):
            logger.debug("Building default for %s via default_value()", _key_name(key))
            return getattr(key, _DEFAULT_VALUE_ATTR)()

        if is_pydantic_settings_subclass(key):
            return load_settings_default(key)

        if not _is_default_constructible(key):
            msg = (
                f"No default value for '{_key_name(key)}': its constructor requires "
                "arguments. Register a factory with register_default(), define a "
                "default_value() classmethod, or bind a value before lookup."
            )
            raise EnvwireMissingDefaultError(msg)
        logger.debug("Building default for %s with zero-argument constructor", _key_name(key))
        return key()


def _is_default_constructible(key: type[Any]) -> bool:
    try:
        signature = inspect.signature(key)
    except (TypeError, ValueError):
        # Builtins without signature metadata.
        return True
    try:
        signature.bind()
    except TypeError:
        return False
    return True


def _has_default_value_hook(key: type[Any]) -> bool:
    # Instance methods named default_value are ordinary members, not hooks.
    hook = inspect.getattr_static(key, _DEFAULT_VALUE_ATTR, None)
    return isinstance(hook, (classmethod, staticmethod))


def _key_name(key: type[Any]) -> str:
    return getattr(key, "__qualname__", repr(key))


default_values = DefaultValues()
"""Process-wide default registry used by environments built without ``defaults=``."""

register_default = default_values.register
"""Register a default factory on the process-wide registry.

Examples:
    .. code-block:: python

        @register_default(HttpClient)
        def _default_client() -> HttpClient:
            return HttpClient(base_url="https://example.com")

"""

__all__ = [
    "DefaultFactory",
    "DefaultValues",
    "default_values",
    "register_default",
]
