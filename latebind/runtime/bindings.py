"""Binding shapes produced by providers for bodyless members."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .types import MemberKind


@dataclass(frozen=True, slots=True, eq=False)
class Getter:
    """Reads a property value from a receiver."""

    fn: Callable[[Any], Any]

    def __call__(self, receiver: Any) -> Any:
        return self.fn(receiver)


@dataclass(frozen=True, slots=True, eq=False)
class Setter:
    """Writes a property value on a receiver."""

    fn: Callable[[Any, Any], None]

    def __call__(self, receiver: Any, value: Any) -> None:
        self.fn(receiver, value)


@dataclass(frozen=True, slots=True, eq=False)
class Invoker:
    """Calls a bodyless method on a receiver."""

    fn: Callable[..., Any]

    def __call__(self, receiver: Any, *args: Any, **kwargs: Any) -> Any:
        return self.fn(receiver, *args, **kwargs)


@dataclass(frozen=True, slots=True, eq=False)
class EventBinding:
    """Subscribes and unsubscribes event handlers on a receiver.

    Both functions are resolved together as one unit.
    """

    add: Callable[[Any, Callable[..., Any]], None]
    remove: Callable[[Any, Callable[..., Any]], None]


Binding = Getter | Setter | Invoker | EventBinding

_SHAPES: dict[MemberKind, type] = {
    MemberKind.GET: Getter,
    MemberKind.SET: Setter,
    MemberKind.INVOKE: Invoker,
    MemberKind.EVENT_ADD: EventBinding,
    MemberKind.EVENT_REMOVE: EventBinding,
}


def shape_for(kind: MemberKind) -> type:
    """Return the binding class a descriptor of ``kind`` must resolve to."""
    return _SHAPES[kind]
