from __future__ import annotations

import importlib
import logging
import warnings
from typing import Any, TypeVar

from envwire._internal.type_checks import is_runtime_class

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Modules probed for a ``BaseSettings`` class, newest first.
_SETTINGS_MODULES = ("pydantic_settings", "pydantic.v1")
_PYDANTIC_V1_WARNING_PATTERN = (
    r"Core Pydantic V1 functionality isn't compatible with Python 3\.14 or greater\."
)


def _settings_base_from(module_name: str) -> type[Any] | None:
    with warnings.catch_warnings():
        warnings.filterwarnings(
            "ignore",
            message=_PYDANTIC_V1_WARNING_PATTERN,
            category=UserWarning,
        )
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            return None
    base_settings = getattr(module, "BaseSettings", None)
    return base_settings if isinstance(base_settings, type) else None


def _discover_settings_bases() -> tuple[type[Any], ...]:
    bases: dict[type[Any], None] = {}
    for module_name in _SETTINGS_MODULES:
        base = _settings_base_from(module_name)
        if base is not None:
            bases.setdefault(base)
    return tuple(bases)


SETTINGS_BASES: tuple[type[Any], ...] = _discover_settings_bases()


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether an environment key is a Pydantic settings model.

    Settings keys need no ``default_value()`` hook and no registered factory:
    their default is the model itself, populated from process environment
    variables. Returns ``False`` for everything when Pydantic is not
    installed.
    """
    if not is_runtime_class(candidate):
        return False
    try:
        return any(issubclass(candidate, base) for base in SETTINGS_BASES)
    except TypeError:
        return False


def load_settings_default(key: type[T]) -> T:
    """Build the default value of a settings key from the process environment.

    The model is called without arguments, so values come from environment
    variables (and ``.env`` files, when the model configures one). Validation
    errors propagate unchanged; a settings key whose required variables are
    unset has no default.

    Args:
        key: Settings model used as an environment key.

    Returns:
        The loaded settings instance. ``DefaultValues`` caches it, so each
        registry reads the environment once per key.

    """
    logger.debug("Loading settings default for %s from environment variables", key.__qualname__)
    return key()


__all__ = [
    "SETTINGS_BASES",
    "is_pydantic_settings_subclass",
    "load_settings_default",
]
