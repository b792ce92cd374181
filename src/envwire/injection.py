from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, get_type_hints

from envwire.markers import FromEnvironmentMarker, InjectedMarker, marked_key

INJECT_ENVIRONMENT_KWARG = "__envwire_environment"
INJECT_WRAPPER_MARKER = "__envwire_inject_wrapper__"


@dataclass(frozen=True, slots=True)
class InjectedParameter:
    """Parameter receiving a ``ServiceHandle`` for ``service_key``."""

    name: str
    service_key: Any


@dataclass(frozen=True, slots=True)
class EnvironmentParameter:
    """Parameter receiving the environment value bound to ``key``."""

    name: str
    key: Any


@dataclass(frozen=True, slots=True)
class InjectedCallableInspection:
    """Injection metadata derived from a callable signature and annotations."""

    signature: inspect.Signature
    injected_parameters: tuple[InjectedParameter, ...]
    environment_parameters: tuple[EnvironmentParameter, ...]
    public_signature: inspect.Signature


@dataclass(slots=True)
class InjectedCallableInspector:
    """Inspect callables for ``Injected[...]``/``FromEnvironment[...]`` parameters."""

    def inspect_callable(self, callable_obj: Callable[..., Any]) -> InjectedCallableInspection:
        """Build injection metadata and a public signature for a callable."""
        signature = inspect.signature(callable_obj)
        annotations = self.resolved_annotations(callable_obj=callable_obj)

        injected_parameters: list[InjectedParameter] = []
        environment_parameters: list[EnvironmentParameter] = []
        for parameter in signature.parameters.values():
            annotation = annotations.get(parameter.name, parameter.annotation)
            if annotation is inspect.Signature.empty or isinstance(annotation, str):
                continue
            service_key = marked_key(annotation, InjectedMarker)
            if service_key is not None:
                injected_parameters.append(
                    InjectedParameter(name=parameter.name, service_key=service_key),
                )
                continue
            key = marked_key(annotation, FromEnvironmentMarker)
            if key is not None:
                environment_parameters.append(EnvironmentParameter(name=parameter.name, key=key))

        hidden_parameter_names = {parameter.name for parameter in injected_parameters}
        hidden_parameter_names.update(parameter.name for parameter in environment_parameters)
        public_signature = signature.replace(
            parameters=[
                parameter
                for parameter in signature.parameters.values()
                if parameter.name not in hidden_parameter_names
            ],
        )
        return InjectedCallableInspection(
            signature=signature,
            injected_parameters=tuple(injected_parameters),
            environment_parameters=tuple(environment_parameters),
            public_signature=public_signature,
        )

    def resolved_annotations(self, *, callable_obj: Callable[..., Any]) -> dict[str, Any]:
        """Resolve callable annotations with extras, falling back to an empty mapping."""
        try:
            return get_type_hints(callable_obj, include_extras=True)
        except (AttributeError, NameError, TypeError):
            return {}


__all__ = [
    "INJECT_ENVIRONMENT_KWARG",
    "INJECT_WRAPPER_MARKER",
    "EnvironmentParameter",
    "InjectedCallableInspection",
    "InjectedCallableInspector",
    "InjectedParameter",
]
