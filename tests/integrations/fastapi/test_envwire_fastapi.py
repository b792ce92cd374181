from collections.abc import Callable
from dataclasses import dataclass

from fastapi import FastAPI
from fastapi.testclient import TestClient

from envwire import (
    Endpoint,
    Environment,
    EnvironmentContext,
    EnvironmentKey,
    Service,
    ServiceHandle,
    environment_context,
)
from envwire.integrations.fastapi import EnvwireMiddleware, ServiceDepends, setup_envwire


class Salutation(EnvironmentKey):
    def __init__(self, word: str = "Hello") -> None:
        self.word = word


def _greet(environment: Environment) -> Callable[[str], str]:
    word = environment[Salutation].word
    return lambda name: f"{word}, {name}"


def _shout(environment: Environment) -> Callable[[str], str]:
    word = environment[Salutation].word
    return lambda name: f"{word.upper()}, {name.upper()}!"


@dataclass(frozen=True)
class GreeterEndpoints:
    greet: Endpoint[Callable[[str], str]]


class Greeter(Service[GreeterEndpoints]):
    endpoints = GreeterEndpoints(greet=_greet)


def _build_app(context: EnvironmentContext = environment_context) -> FastAPI:
    app = FastAPI()

    @app.get("/greet")
    async def greet(
        name: str,
        greeter: ServiceHandle[GreeterEndpoints] = ServiceDepends(Greeter, context=context),
    ) -> dict[str, str]:
        return {"message": greeter.greet(name)}

    @app.get("/shout")
    async def shout(name: str) -> dict[str, str]:
        with context.override(Greeter, greet=_shout):
            return {"message": context.resolve(Greeter).greet(name)}

    return app


def test_service_depends_resolves_default_environment() -> None:
    client = TestClient(_build_app())

    response = client.get("/greet", params={"name": "Ada"})

    assert response.status_code == 200
    assert response.json() == {"message": "Hello, Ada"}


def test_setup_envwire_binds_environment_for_requests() -> None:
    app = _build_app()
    environment = Environment().set(Salutation, Salutation("Hei"))
    setup_envwire(app, environment)

    client = TestClient(app)
    response = client.get("/greet", params={"name": "Ada"})

    assert response.json() == {"message": "Hei, Ada"}


def test_request_overrides_do_not_leak_into_other_requests() -> None:
    client = TestClient(_build_app())

    shouted = client.get("/shout", params={"name": "Ada"})
    greeted = client.get("/greet", params={"name": "Ada"})

    assert shouted.json() == {"message": "HELLO, ADA!"}
    assert greeted.json() == {"message": "Hello, Ada"}


def test_environment_factory_runs_per_request() -> None:
    words = iter(["Hi", "Hey"])
    context = EnvironmentContext()
    app = _build_app(context)

    def _per_request() -> Environment:
        return Environment().set(Salutation, Salutation(next(words)))

    setup_envwire(app, _per_request, context=context)
    client = TestClient(app)

    first = client.get("/greet", params={"name": "Ada"})
    second = client.get("/greet", params={"name": "Ada"})

    assert first.json() == {"message": "Hi, Ada"}
    assert second.json() == {"message": "Hey, Ada"}


def test_setup_envwire_defaults_to_root_environment() -> None:
    context = EnvironmentContext(root=Environment().set(Salutation, Salutation("Yo")))
    app = _build_app(context)

    setup_envwire(app, context=context)
    response = TestClient(app).get("/greet", params={"name": "Ada"})

    assert response.json() == {"message": "Yo, Ada"}
    assert any(middleware.cls is EnvwireMiddleware for middleware in app.user_middleware)
