from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any, Generic, TypeVar, cast, overload

from envwire._internal.type_checks import is_runtime_class
from envwire.environment import Environment
from envwire.exceptions import EnvwireInvalidInjectionError
from envwire.injection import (
    INJECT_ENVIRONMENT_KWARG,
    INJECT_WRAPPER_MARKER,
    InjectedCallableInspection,
    InjectedCallableInspector,
)
from envwire.service import Service, ServiceHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")
EndpointsT = TypeVar("EndpointsT")
InjectableF = TypeVar("InjectableF", bound=Callable[..., Any])


class EnvironmentContext:
    """Task/thread-local ambient environment with scoped overrides.

    The current environment lives in a ``ContextVar``: it flows into called
    functions and into ``asyncio`` tasks created while it is bound, and every
    override is confined to the ``with`` block that installed it. Sibling
    tasks and threads never observe each other's overrides. When nothing is
    bound the root environment is current.

    Examples:
        .. code-block:: python

            search = environment_context.resolve(Search)
            search.open("cats")

            with environment_context.override(Search, open=open_in_duckduckgo):
                environment_context.resolve(Search).open("cats")

    """

    __slots__ = ("_current_var", "_injected_callable_inspector", "_root")

    def __init__(self, root: Environment | None = None) -> None:
        self._root = root if root is not None else Environment()
        self._current_var: ContextVar[Environment | None] = ContextVar(
            "envwire_environment",
            default=None,
        )
        self._injected_callable_inspector = InjectedCallableInspector()

    @property
    def root(self) -> Environment:
        return self._root

    def get_current(self) -> Environment:
        """Return the environment bound in the current context, or the root."""
        environment = self._current_var.get()
        if environment is None:
            return self._root
        return environment

    def set_current(self, environment: Environment) -> Token[Environment | None]:
        """Bind ``environment`` in the current context; undo with ``reset``.

        Prefer ``bind`` unless the binding has to outlive a ``with`` block,
        such as an application-wide binding made during startup.
        """
        return self._current_var.set(environment)

    def reset(self, token: Token[Environment | None]) -> None:
        """Restore the binding that was current before ``set_current``."""
        self._current_var.reset(token)

    @contextmanager
    def bind(self, environment: Environment) -> Iterator[Environment]:
        """Bind ``environment`` for the duration of the ``with`` block."""
        token = self._current_var.set(environment)
        try:
            yield environment
        finally:
            self._current_var.reset(token)

    @contextmanager
    def with_values(self, values: Mapping[type[Any], Any]) -> Iterator[Environment]:
        """Bind the current environment extended with ``values`` for the block."""
        with self.bind(self.get_current().with_values(values)) as environment:
            yield environment

    @contextmanager
    def set_value(self, key: type[T], value: T) -> Iterator[Environment]:
        """Bind ``key`` to ``value`` on top of the current environment for the block."""
        with self.bind(self.get_current().set(key, value)) as environment:
            yield environment

    @contextmanager
    def override(
        self,
        service_key: type[Service[EndpointsT]],
        endpoints: EndpointsT | None = None,
        /,
        **changes: Any,
    ) -> Iterator[Environment]:
        """Override endpoints of ``service_key`` for the duration of the block.

        The override is computed from the environment current when the block
        is entered. Handles resolved inside the block (and in tasks started
        from it) see the override; handles resolved before or outside it do
        not.

        Raises:
            EnvwireInvalidServiceError: If ``service_key`` is not bound to a service.
            EnvwireUnknownEndpointError: If a change names an undeclared endpoint.

        """
        environment = self.get_current().override_endpoints(service_key, endpoints, **changes)
        logger.debug(
            "Overriding %s endpoints for scope: %s",
            service_key.__qualname__,
            ", ".join(changes) or "record",
        )
        with self.bind(environment):
            yield environment

    def get(self, key: type[T]) -> T:
        """Return the value of ``key`` in the current environment."""
        return self.get_current().get(key)

    def resolve(self, service_key: type[Service[EndpointsT]]) -> ServiceHandle[EndpointsT]:
        """Return a handle for ``service_key`` capturing the current environment."""
        return ServiceHandle.from_environment(self.get_current(), service_key)

    @overload
    def inject(self, func: InjectableF) -> InjectableF: ...

    @overload
    def inject(self, func: None = None) -> Callable[[InjectableF], InjectableF]: ...

    def inject(
        self,
        func: InjectableF | None = None,
    ) -> InjectableF | Callable[[InjectableF], InjectableF]:
        """Wrap callables so marked parameters resolve from the environment at call time.

        ``Injected[SomeService]`` parameters receive a ``ServiceHandle`` and
        ``FromEnvironment[Key]`` parameters receive the bound value. All of
        them are read from one environment snapshot per call: the one passed
        through the reserved ``__envwire_environment`` keyword, or else the
        current environment. Arguments passed explicitly by the caller win.
        Marked parameters are hidden from the wrapper's public signature.

        Raises:
            EnvwireInvalidInjectionError: If ``Injected[...]`` wraps a non-service
                class or the callable declares the reserved keyword.

        """

        def decorator(callable_obj: InjectableF) -> InjectableF:
            return self._inject_callable(callable_obj)

        if func is None:
            return decorator
        return decorator(func)

    def _inject_callable(self, callable_obj: InjectableF) -> InjectableF:
        inspection = self._injected_callable_inspector.inspect_callable(callable_obj)
        if INJECT_ENVIRONMENT_KWARG in inspection.signature.parameters:
            msg = (
                f"Callable '{_callable_name(callable_obj)}' cannot declare reserved parameter "
                f"'{INJECT_ENVIRONMENT_KWARG}'."
            )
            raise EnvwireInvalidInjectionError(msg)
        for parameter in inspection.injected_parameters:
            service_key = parameter.service_key
            if not (is_runtime_class(service_key) and issubclass(service_key, Service)):
                msg = (
                    f"Parameter '{parameter.name}' of '{_callable_name(callable_obj)}' is marked "
                    f"Injected[{service_key!r}], but only Service subclasses can be injected. "
                    "Use FromEnvironment[...] for plain environment values."
                )
                raise EnvwireInvalidInjectionError(msg)

        if inspect.iscoroutinefunction(callable_obj):

            @functools.wraps(callable_obj)
            async def _async_injected(*args: Any, **kwargs: Any) -> Any:
                bound_arguments = self._bind_injected_arguments(inspection, args, kwargs)
                async_callable = cast("Callable[..., Awaitable[Any]]", callable_obj)
                return await async_callable(*bound_arguments.args, **bound_arguments.kwargs)

            wrapped_callable: Callable[..., Any] = _async_injected
        else:

            @functools.wraps(callable_obj)
            def _sync_injected(*args: Any, **kwargs: Any) -> Any:
                bound_arguments = self._bind_injected_arguments(inspection, args, kwargs)
                return callable_obj(*bound_arguments.args, **bound_arguments.kwargs)

            wrapped_callable = _sync_injected

        wrapped_callable.__signature__ = inspection.public_signature  # type: ignore[attr-defined]
        wrapped_callable.__dict__[INJECT_WRAPPER_MARKER] = True
        return cast("InjectableF", wrapped_callable)

    def _bind_injected_arguments(
        self,
        inspection: InjectedCallableInspection,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> inspect.BoundArguments:
        environment = cast("Environment | None", kwargs.pop(INJECT_ENVIRONMENT_KWARG, None))
        if environment is None:
            environment = self.get_current()
        bound_arguments = inspection.signature.bind_partial(*args, **kwargs)
        for injected in inspection.injected_parameters:
            if injected.name in bound_arguments.arguments:
                continue
            bound_arguments.arguments[injected.name] = environment.service(injected.service_key)
        for parameter in inspection.environment_parameters:
            if parameter.name in bound_arguments.arguments:
                continue
            bound_arguments.arguments[parameter.name] = environment.get(parameter.key)
        return bound_arguments


class ServiceProperty(Generic[EndpointsT]):
    """Declarative, computed service binding for classes.

    Every attribute access resolves a fresh ``ServiceHandle`` against the
    environment current at the point of use, never the one current when the
    owning class or instance was created.

    Examples:
        .. code-block:: python

            class SearchView:
                search = ServiceProperty(Search)

                def on_submit(self, query: str) -> None:
                    self.search.open(query)

    """

    def __init__(
        self,
        service_key: type[Service[EndpointsT]],
        *,
        context: EnvironmentContext | None = None,
    ) -> None:
        self._service_key = service_key
        self._context = context
        self._name = service_key.__name__

    def __set_name__(self, owner: type[Any], name: str) -> None:
        self._name = name

    @overload
    def __get__(self, instance: None, owner: type[Any] | None = None) -> ServiceProperty[EndpointsT]: ...

    @overload
    def __get__(self, instance: object, owner: type[Any] | None = None) -> ServiceHandle[EndpointsT]: ...

    def __get__(
        self,
        instance: object | None,
        owner: type[Any] | None = None,
    ) -> ServiceProperty[EndpointsT] | ServiceHandle[EndpointsT]:
        if instance is None:
            return self
        context = self._context if self._context is not None else environment_context
        return context.resolve(self._service_key)

    def __set__(self, instance: object, value: Any) -> None:
        msg = (
            f"Service property '{self._name}' is resolved from the environment; "
            "override its endpoints with environment_context.override() instead."
        )
        raise AttributeError(msg)


def _callable_name(callable_obj: Callable[..., Any]) -> str:
    return getattr(callable_obj, "__qualname__", repr(callable_obj))


environment_context = EnvironmentContext()
"""Provide the process-wide ambient environment used by module-level helpers."""


def resolve(service_key: type[Service[EndpointsT]]) -> ServiceHandle[EndpointsT]:
    """Return a handle for ``service_key`` from ``environment_context``."""
    return environment_context.resolve(service_key)


__all__ = [
    "EnvironmentContext",
    "ServiceProperty",
    "environment_context",
    "resolve",
]
