"""End-to-end search service: default endpoints, subtree overrides and async fetch."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, field
from urllib.parse import urlencode

import pytest

from envwire import (
    Endpoint,
    Environment,
    EnvironmentContext,
    EnvironmentKey,
    Injected,
    Service,
)


@dataclass
class OpenURL(EnvironmentKey):
    """Navigation action; records every URL it is asked to open."""

    opened: list[str] = field(default_factory=list)

    def __call__(self, url: str) -> None:
        self.opened.append(url)


@dataclass
class Transport(EnvironmentKey):
    """Fake HTTP transport returning canned bodies."""

    body: bytes = b""
    requested: list[str] = field(default_factory=list)

    async def get(self, url: str) -> bytes:
        self.requested.append(url)
        return self.body


def search_url(base: str, query: str) -> str:
    return f"{base}?{urlencode({'q': query})}"


def _open(environment: Environment) -> Callable[[str], None]:
    open_url = environment[OpenURL]

    def open_query(query: str) -> None:
        open_url(search_url("https://example.com", query))

    return open_query


def _fetch(environment: Environment) -> Callable[[str], Awaitable[bytes]]:
    transport = environment[Transport]

    async def fetch_query(query: str) -> bytes:
        return await transport.get(search_url("https://example.com", query))

    return fetch_query


def _open_in_duckduckgo(environment: Environment) -> Callable[[str], None]:
    open_url = environment[OpenURL]

    def open_query(query: str) -> None:
        open_url(search_url("https://duckduckgo.com", query))

    return open_query


@dataclass(frozen=True)
class SearchEndpoints:
    open: Endpoint[Callable[[str], None]]
    fetch: Endpoint[Callable[[str], Awaitable[bytes]]]


class Search(Service[SearchEndpoints]):
    endpoints = SearchEndpoints(open=_open, fetch=_fetch)


class SearchView:
    def __init__(self, context: EnvironmentContext) -> None:
        self.context = context

    def submit(self, query: str) -> None:
        self.context.resolve(Search).open(query)


@pytest.fixture()
def navigator() -> OpenURL:
    return OpenURL()


@pytest.fixture()
def scenario(context: EnvironmentContext, navigator: OpenURL) -> Iterator[EnvironmentContext]:
    token = context.set_current(context.root.set(OpenURL, navigator))
    yield context
    context.reset(token)


def test_default_open_navigates_to_example(scenario: EnvironmentContext, navigator: OpenURL) -> None:
    scenario.resolve(Search).open("cats")

    assert navigator.opened == ["https://example.com?q=cats"]


def test_override_changes_domain_inside_subtree_only(
    scenario: EnvironmentContext,
    navigator: OpenURL,
) -> None:
    view = SearchView(scenario)

    with scenario.override(Search, open=_open_in_duckduckgo):
        view.submit("cats")
    view.submit("cats")

    assert navigator.opened == [
        "https://duckduckgo.com?q=cats",
        "https://example.com?q=cats",
    ]


def test_query_is_url_encoded(scenario: EnvironmentContext, navigator: OpenURL) -> None:
    scenario.resolve(Search).open("black cats & dogs")

    assert navigator.opened == ["https://example.com?q=black+cats+%26+dogs"]


def test_fetch_keeps_default_when_open_is_overridden(scenario: EnvironmentContext) -> None:
    with scenario.override(Search, open=_open_in_duckduckgo):
        handle = scenario.resolve(Search)

    assert handle.endpoints.fetch is _fetch


@pytest.mark.asyncio
async def test_fetch_uses_transport_from_captured_environment(
    scenario: EnvironmentContext,
) -> None:
    transport = Transport(body=b"<html>cats</html>")

    with scenario.set_value(Transport, transport):
        search = scenario.resolve(Search)

    assert await search.fetch("cats") == b"<html>cats</html>"
    assert transport.requested == ["https://example.com?q=cats"]


@pytest.mark.asyncio
async def test_fetch_failures_reach_the_caller(scenario: EnvironmentContext) -> None:
    class _Unreachable(Transport):
        async def get(self, url: str) -> bytes:
            raise ConnectionError(url)

    with scenario.set_value(Transport, _Unreachable()):
        search = scenario.resolve(Search)

    with pytest.raises(ConnectionError, match="example.com"):
        await search.fetch("cats")


def test_injected_handler_follows_override(
    scenario: EnvironmentContext,
    navigator: OpenURL,
) -> None:
    @scenario.inject
    def on_submit(query: str, search: Injected[Search]) -> None:
        search.open(query)

    on_submit("cats")
    with scenario.override(Search, open=_open_in_duckduckgo):
        on_submit("dogs")

    assert navigator.opened == [
        "https://example.com?q=cats",
        "https://duckduckgo.com?q=dogs",
    ]
