"""Default factories: services that need configuration to build a default.

A service without class-level endpoints cannot be default-constructed.
Registering a factory separates building the default from looking it up.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from envwire import (
    Endpoint,
    Environment,
    EnvwireMissingDefaultError,
    Service,
    environment_context,
    register_default,
)


@dataclass(frozen=True)
class MailerEndpoints:
    send: Endpoint[Callable[[str], str]]


class Mailer(Service[MailerEndpoints]):
    pass


def _smtp_send(host: str) -> Endpoint[Callable[[str], str]]:
    def endpoint(environment: Environment) -> Callable[[str], str]:
        return lambda to: f"sent to {to} via {host}"

    return endpoint


def main() -> None:
    try:
        environment_context.resolve(Mailer)
    except EnvwireMissingDefaultError:
        print("missing_default=True")  # => missing_default=True

    register_default(Mailer, lambda: Mailer(MailerEndpoints(send=_smtp_send("smtp.local"))))

    mailer = environment_context.resolve(Mailer)
    print(mailer.send("ada@example.com"))  # => sent to ada@example.com via smtp.local


if __name__ == "__main__":
    main()
