from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any, TypeVar, Union, get_args, get_origin

T = TypeVar("T")
_ANNOTATED_MARKER_MIN_ARGS = 2


class InjectedMarker:
    """Marker for parameters that receive a ``ServiceHandle`` at call time."""


class FromEnvironmentMarker:
    """Marker for parameters that receive the raw value bound to a key."""


if TYPE_CHECKING:
    Injected = Union[T, T]  # noqa: UP007,PYI016
    """Mark a parameter for service injection.

    At runtime ``Injected[Search]`` becomes ``Annotated[Search, InjectedMarker()]``
    and the parameter receives a ``ServiceHandle`` for ``Search`` built from the
    environment current at call time.

    Examples:
        .. code-block:: python

            @environment_context.inject
            def open_results(query: str, search: Injected[Search]) -> None:
                search.open(query)
    """

    FromEnvironment = Union[T, T]  # noqa: UP007,PYI016
    """Mark a parameter to receive the value bound to a key (or its default).

    At runtime ``FromEnvironment[Locale]`` becomes
    ``Annotated[Locale, FromEnvironmentMarker()]``.
    """
else:

    class Injected:
        def __class_getitem__(cls, item: Any) -> Any:
            return _annotate(item, InjectedMarker())

    class FromEnvironment:
        def __class_getitem__(cls, item: Any) -> Any:
            return _annotate(item, FromEnvironmentMarker())


def _annotate(item: Any, marker: object) -> Any:
    if get_origin(item) is Annotated:
        args = get_args(item)
        return _build_annotated((args[0], *args[1:], marker))
    return _build_annotated((item, marker))


def _build_annotated(params: tuple[Any, ...]) -> Any:
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]


def marked_key(annotation: Any, marker_type: type[Any]) -> Any | None:
    """Return the key wrapped by a marker annotation, or ``None`` when unmarked."""
    if get_origin(annotation) is not Annotated:
        return None
    args = get_args(annotation)
    if len(args) < _ANNOTATED_MARKER_MIN_ARGS:
        return None
    if not any(isinstance(item, marker_type) for item in args[1:]):
        return None
    return args[0]


__all__ = [
    "FromEnvironment",
    "FromEnvironmentMarker",
    "Injected",
    "InjectedMarker",
    "marked_key",
]
