"""Function injection: resolve services and values when the function is called.

``Injected[Service]`` parameters receive a handle and ``FromEnvironment[Key]``
parameters receive the bound value. Both are hidden from the public signature.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass

from envwire import (
    Endpoint,
    Environment,
    EnvironmentKey,
    FromEnvironment,
    Injected,
    Service,
    environment_context,
)


class Currency(EnvironmentKey):
    def __init__(self, code: str = "EUR") -> None:
        self.code = code


def _format(environment: Environment) -> Callable[[int], str]:
    code = environment[Currency].code
    return lambda cents: f"{cents / 100:.2f} {code}"


@dataclass(frozen=True)
class PricingEndpoints:
    format: Endpoint[Callable[[int], str]]


class Pricing(Service[PricingEndpoints]):
    endpoints = PricingEndpoints(format=_format)


@environment_context.inject
def describe(cents: int, pricing: Injected[Pricing], currency: FromEnvironment[Currency]) -> str:
    return f"{pricing.format(cents)} ({currency.code})"


def main() -> None:
    print(f"parameters={list(inspect.signature(describe).parameters)}")  # => parameters=['cents']
    print(describe(1250))  # => 12.50 EUR (EUR)

    with environment_context.set_value(Currency, Currency("SEK")):
        print(describe(1250))  # => 12.50 SEK (SEK)


if __name__ == "__main__":
    main()
