"""Quickstart: declare a service and resolve it from the ambient environment.

A service is a record of endpoints. Each endpoint receives the environment
captured by the handle and returns the action the caller runs.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import urlencode

from envwire import Endpoint, Environment, Service, resolve


def _open(environment: Environment) -> Callable[[str], str]:
    def open_query(query: str) -> str:
        return f"https://example.com?{urlencode({'q': query})}"

    return open_query


@dataclass(frozen=True)
class SearchEndpoints:
    open: Endpoint[Callable[[str], str]]


class Search(Service[SearchEndpoints]):
    endpoints = SearchEndpoints(open=_open)


def main() -> None:
    search = resolve(Search)

    print(f"url={search.open('cats')}")  # => url=https://example.com?q=cats
    print(f"handle={search!r}")  # => handle=ServiceHandle(Search, endpoints=(open))


if __name__ == "__main__":
    main()
