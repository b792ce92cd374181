"""Scoped overrides: swap one endpoint for a subtree of the call hierarchy.

Overrides are installed with a ``with`` block and revert when it ends.
Handles built earlier keep the environment they captured.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from envwire import Endpoint, Environment, Service, environment_context


def _default_open(environment: Environment) -> Callable[[str], str]:
    return lambda query: f"https://example.com?q={query}"


def _duckduckgo_open(environment: Environment) -> Callable[[str], str]:
    return lambda query: f"https://duckduckgo.com?q={query}"


def _fetch(environment: Environment) -> Callable[[str], str]:
    return lambda query: f"fetched:{query}"


@dataclass(frozen=True)
class SearchEndpoints:
    open: Endpoint[Callable[[str], str]]
    fetch: Endpoint[Callable[[str], str]]


class Search(Service[SearchEndpoints]):
    endpoints = SearchEndpoints(open=_default_open, fetch=_fetch)


def render() -> str:
    return environment_context.resolve(Search).open("cats")


def main() -> None:
    before = environment_context.resolve(Search)

    with environment_context.override(Search, open=_duckduckgo_open):
        print(f"inside={render()}")  # => inside=https://duckduckgo.com?q=cats
        print(f"fetch={environment_context.resolve(Search).fetch('cats')}")  # => fetch=fetched:cats
        print(f"captured={before.open('cats')}")  # => captured=https://example.com?q=cats

    print(f"outside={render()}")  # => outside=https://example.com?q=cats


if __name__ == "__main__":
    main()
