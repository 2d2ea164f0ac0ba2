"""Binding provider protocol and ancestor resolution."""

import logging
from types import FunctionType
from typing import Any

from .bindings import Binding, EventBinding, Getter, Invoker, Setter, shape_for
from .types import MemberDescriptor, MemberKind

logger = logging.getLogger(__name__)


class BindingError(RuntimeError):
    """Base class for binding resolution failures."""


class UnsupportedMember(BindingError):
    """Raised by a provider hook that declines a descriptor."""


class NoProviderFound(BindingError):
    """Raised when no ancestor provider accepts a descriptor."""

    def __init__(self, descriptor: MemberDescriptor, declined: tuple[type, ...]) -> None:
        self.descriptor = descriptor
        self.declined = declined
        if declined:
            names = ", ".join(t.__qualname__ for t in declined)
            detail = f"declined by {names}"
        else:
            detail = "no ancestor implements the binding provider protocol"
        super().__init__(f"No provider for {descriptor} ({detail})")


class ShapeMismatch(BindingError):
    """Raised when a provider returns a binding of the wrong shape."""

    def __init__(self, descriptor: MemberDescriptor, provider: type, binding: Any) -> None:
        self.descriptor = descriptor
        self.provider = provider
        self.binding = binding
        expected = shape_for(descriptor.kind).__name__
        super().__init__(
            f"{provider.__qualname__} returned {type(binding).__name__} for {descriptor}, "
            f"expected {expected}"
        )


HOOKS: dict[MemberKind, str] = {
    MemberKind.GET: "resolve_getter",
    MemberKind.SET: "resolve_setter",
    MemberKind.INVOKE: "resolve_invoker",
    MemberKind.EVENT_ADD: "resolve_event_binding",
    MemberKind.EVENT_REMOVE: "resolve_event_binding",
}


class BindingProvider:
    """Base class for types that implement their descendants' bodyless members.

    Subclasses override any of the ``resolve_*`` hooks. Hooks are class-level:
    a hook written as a plain function is turned into a classmethod, the same
    way ``__init_subclass__`` is. Each hook receives the descriptor of the
    member being resolved (its ``owning_type`` is the derived class that
    declared it) and returns a binding of the matching shape, or raises
    ``UnsupportedMember`` to let the next ancestor try.

    Hooks are called at most once per (declaring type, member), so they do not
    need to guard against concurrent calls.

    Example:
        class Stored(Bindable):
            def resolve_getter(cls, descriptor):
                return Getter(lambda obj: obj.__dict__.get(descriptor.name, 0))
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for hook_name in set(HOOKS.values()):
            hook = cls.__dict__.get(hook_name)
            if isinstance(hook, FunctionType):
                setattr(cls, hook_name, classmethod(hook))

    @classmethod
    def resolve_getter(cls, descriptor: MemberDescriptor) -> Getter:
        raise UnsupportedMember(f"{cls.__qualname__} does not supply getters")

    @classmethod
    def resolve_setter(cls, descriptor: MemberDescriptor) -> Setter:
        raise UnsupportedMember(f"{cls.__qualname__} does not supply setters")

    @classmethod
    def resolve_invoker(cls, descriptor: MemberDescriptor) -> Invoker:
        raise UnsupportedMember(f"{cls.__qualname__} does not supply invokers")

    @classmethod
    def resolve_event_binding(cls, descriptor: MemberDescriptor) -> EventBinding:
        raise UnsupportedMember(f"{cls.__qualname__} does not supply event bindings")


def provider_ancestors(declaring_type: type) -> tuple[type, ...]:
    """Return the ancestors searched for a provider, nearest first."""
    return tuple(
        ancestor
        for ancestor in declaring_type.__mro__[1:]
        if issubclass(ancestor, BindingProvider) and ancestor is not BindingProvider
    )


def resolve_binding(declaring_type: type, descriptor: MemberDescriptor) -> tuple[Binding, type]:
    """Ask the nearest accepting ancestor of ``declaring_type`` for a binding.

    Ancestors whose own namespace lacks the hook for the descriptor's kind are
    skipped. The first hook that returns wins.

    Args:
        declaring_type: The class the member is resolved for.
        descriptor: The member accessor to resolve.

    Returns:
        Tuple of (binding, provider class that supplied it).

    Raises:
        ShapeMismatch: The accepting provider returned the wrong binding class.
        NoProviderFound: Every ancestor declined.
    """
    hook_name = HOOKS[descriptor.kind]
    expected = shape_for(descriptor.kind)
    declined: list[type] = []

    for ancestor in provider_ancestors(declaring_type):
        hook = ancestor.__dict__.get(hook_name)
        if hook is None:
            continue

        try:
            binding = hook.__get__(None, ancestor)(descriptor)
        except UnsupportedMember as exc:
            logger.debug("%s declined %s: %s", ancestor.__qualname__, descriptor, exc)
            declined.append(ancestor)
            continue

        if not isinstance(binding, expected):
            raise ShapeMismatch(descriptor, ancestor, binding)
        return binding, ancestor

    raise NoProviderFound(descriptor, tuple(declined))
