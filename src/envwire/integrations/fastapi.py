from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from envwire.environment import Environment
from envwire.environment_context import EnvironmentContext, environment_context
from envwire.service import Service, ServiceHandle

try:
    from fastapi import Depends, FastAPI
    from starlette.types import ASGIApp, Receive, Scope, Send
except ModuleNotFoundError as exc:  # pragma: no cover - exercised in optional import scenarios
    message = "FastAPI integration requires fastapi. Install with 'envwire[fastapi]'."
    raise ModuleNotFoundError(message) from exc

EndpointsT = TypeVar("EndpointsT")


class EnvwireMiddleware:
    """ASGI middleware binding an environment around every request.

    Each request runs with ``environment`` bound in ``context``; overrides a
    handler installs with ``context.override`` stay within that request.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        environment: Environment | Callable[[], Environment],
        context: EnvironmentContext = environment_context,
    ) -> None:
        self.app = app
        self.environment = environment
        self.context = context

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return
        environment = self.environment() if callable(self.environment) else self.environment
        with self.context.bind(environment):
            await self.app(scope, receive, send)


def ServiceDepends(  # noqa: N802
    service_key: type[Service[EndpointsT]],
    *,
    context: EnvironmentContext = environment_context,
) -> Any:
    """Return a FastAPI dependency resolving a handle for ``service_key``.

    The handle captures the environment current while the request's
    dependencies are solved.

    Examples:
        .. code-block:: python

            @app.get("/search")
            async def search(
                q: str,
                search: ServiceHandle[SearchEndpoints] = ServiceDepends(Search),
            ) -> bytes:
                return await search.fetch(q)

    """

    async def _resolve_service() -> ServiceHandle[EndpointsT]:
        return context.resolve(service_key)

    _resolve_service.__name__ = f"resolve_{service_key.__name__}"
    return Depends(_resolve_service)


def setup_envwire(
    app: FastAPI,
    environment: Environment | Callable[[], Environment] | None = None,
    *,
    context: EnvironmentContext = environment_context,
) -> None:
    """Bind an environment around every request handled by ``app``.

    Args:
        app: Application to configure.
        environment: Environment (or zero-argument factory building one per
            request) to bind. Defaults to the context's root environment.
        context: Environment context the handlers resolve from.

    """
    bound = environment if environment is not None else context.root
    app.add_middleware(EnvwireMiddleware, environment=bound, context=context)


__all__ = ["EnvwireMiddleware", "ServiceDepends", "setup_envwire"]
