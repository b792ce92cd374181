class EnvwireError(Exception):
    """Represent a base class for all envwire-specific failures.

    Catch this type when you want to handle any envwire error path without
    matching each concrete exception class individually. Errors raised by
    endpoint actions themselves are never wrapped in this hierarchy.
    """


class EnvwireInvalidKeyError(EnvwireError):
    """Signal use of a value that cannot act as an environment key.

    Environment keys are runtime classes: lookups, bindings and default
    registrations are keyed by type identity. Parametrized generics,
    instances and other objects are rejected.

    Typical fix is passing the class itself (``environment[Search]``) rather
    than an instance or a subscripted alias.
    """


class EnvwireMissingDefaultError(EnvwireError):
    """Signal that an unbound key cannot produce a default value.

    Raised on the first lookup of a key that is not bound in the environment
    when no default factory is registered, the key defines no
    ``default_value()`` and its constructor requires arguments. Also raised
    when a ``Service`` subclass without class-level ``endpoints`` is built
    without an explicit record.

    Typical fixes include registering a factory with ``register_default``,
    declaring class-level ``endpoints`` on the service, or binding a value
    with ``environment_context.set_value`` before resolution.
    """


class EnvwireInvalidServiceError(EnvwireError):
    """Signal a malformed service declaration or endpoint record.

    Raised when a ``Service`` subclass is defined (or instantiated) with an
    endpoint record whose fields are not all callable, when the record is not
    one of the supported shapes (dataclass, ``NamedTuple``, mapping or a
    single callable), and when a non-service class is resolved as a service.
    """


class EnvwireUnknownEndpointError(EnvwireError, AttributeError):
    """Signal access to an endpoint name the service record does not declare.

    Raised by ``ServiceHandle`` attribute dispatch and ``resolve(name)`` and by
    endpoint overrides naming a missing field. Subclasses ``AttributeError`` so
    ``getattr(handle, name, default)`` and ``hasattr`` behave as usual.
    """


class EnvwireInvalidInjectionError(EnvwireError):
    """Signal invalid injection configuration on a decorated callable.

    Raised by ``EnvironmentContext.inject`` when ``Injected[...]`` names a class
    that is not a ``Service`` subclass, or when the callable declares the
    reserved environment keyword parameter.
    """
