"""Dispatch shims for bodyless members and the Bindable base class.

A shim is the Python descriptor placed on the declaring class. It builds the
member's descriptors when the class is created and, on every access, fetches
the cached binding and calls it with the receiver.

Example:
    class Record(Bindable):
        def resolve_getter(cls, descriptor):
            ...
        def resolve_setter(cls, descriptor):
            ...

    class Document(Record):
        title: str = bodyless("Default Title")
        count: int = bodyless()
        revision: int = bodyless(static=True)
        changed = bodyless_event()

        @bodyless_method
        def render(self, width: int) -> str: ...
"""

import functools
import inspect
import logging
from collections.abc import Callable, Iterator
from types import MethodType
from typing import Any, overload

from .cache import BindingCache
from .cache import binding_cache as default_binding_cache
from .provider import BindingProvider
from .types import MISSING, MemberDescriptor, MemberKind

logger = logging.getLogger(__name__)


class InvalidDeclaration(TypeError):
    """Raised when a bodyless member is declared in a way that cannot be bound."""


class BodylessMember:
    """Declaration handling shared by all shims."""

    kinds: tuple[MemberKind, ...] = ()

    def __init__(self, *, static: bool = False) -> None:
        self.static = static
        self.name: str | None = None
        self.owner: type | None = None
        self.descriptors: dict[MemberKind, MemberDescriptor] = {}
        self._cache: BindingCache = default_binding_cache

    def __set_name__(self, owner: type, name: str) -> None:
        if self.owner is not None:
            raise InvalidDeclaration(
                f"{self.owner.__qualname__}.{self.name} cannot also be declared "
                f"as {owner.__qualname__}.{name}"
            )
        # @abstractmethod applied on top of the shim marks it after __init__ ran.
        if getattr(self, "__isabstractmethod__", False):
            raise InvalidDeclaration(
                f"{owner.__qualname__}.{name} cannot be both bodyless and abstract; "
                "its body is supplied by a binding"
            )
        cache = getattr(owner, "binding_cache", default_binding_cache)
        if not isinstance(cache, BindingCache):
            raise InvalidDeclaration(
                f"{owner.__qualname__}.binding_cache must be a BindingCache, "
                f"got {type(cache).__name__}"
            )

        self.owner = owner
        self.name = name
        self._cache = cache
        self.validate(owner)
        metadata = self.metadata(owner, name)
        self.descriptors = {
            kind: MemberDescriptor.declare(owner, name, kind, static=self.static, **metadata)
            for kind in self.kinds
        }
        logger.debug("Declared bodyless member %s.%s", owner.__qualname__, name)

    def validate(self, owner: type) -> None:
        """Reject declarations that cannot be bound. Called once per shim."""

    def metadata(self, owner: type, name: str) -> dict[str, Any]:
        """Return the type information recorded in the member's descriptors."""
        return {}

    @property
    def cache(self) -> BindingCache:
        """The cache this member resolves its bindings through."""
        return self._cache

    @property
    def qualname(self) -> str:
        owner = self.owner.__qualname__ if self.owner is not None else "<unbound>"
        return f"{owner}.{self.name}"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.qualname}>"


def _annotation(owner: type, name: str) -> Any:
    try:
        annotations = inspect.get_annotations(owner)
    except NameError:
        # Forward references that cannot be evaluated yet.
        return None
    return annotations.get(name)


class BodylessProperty(BodylessMember):
    """Property whose getter and setter are supplied by an ancestor provider."""

    def __init__(
        self,
        default: Any = MISSING,
        *,
        static: bool = False,
        readonly: bool = False,
        value_type: Any = None,
    ) -> None:
        if readonly and default is not MISSING:
            raise InvalidDeclaration("a read-only bodyless property cannot declare a default")
        super().__init__(static=static)
        self.default = default
        self.readonly = readonly
        self.value_type = value_type
        self.kinds = (MemberKind.GET,) if readonly else (MemberKind.GET, MemberKind.SET)
        self._get: MemberDescriptor | None = None
        self._set: MemberDescriptor | None = None

    def validate(self, owner: type) -> None:
        if self.default is not MISSING and not isinstance(owner, BindableMeta):
            raise InvalidDeclaration(
                f"{owner.__qualname__}.{self.name} declares a default, "
                "which requires the class to derive from Bindable"
            )

    def metadata(self, owner: type, name: str) -> dict[str, Any]:
        value_type = self.value_type if self.value_type is not None else _annotation(owner, name)
        return {"value_type": value_type}

    def __set_name__(self, owner: type, name: str) -> None:
        super().__set_name__(owner, name)
        self._get = self.descriptors[MemberKind.GET]
        self._set = self.descriptors.get(MemberKind.SET)

    @overload
    def __get__(self, instance: None, owner: type) -> Any: ...

    @overload
    def __get__(self, instance: object, owner: type | None = None) -> Any: ...

    def __get__(self, instance: object | None, owner: type | None = None) -> Any:
        if self.static:
            return self._cache.get_binding(self.owner, self._get)(None)
        if instance is None:
            return self
        return self._cache.get_binding(self.owner, self._get)(instance)

    def __set__(self, instance: object, value: Any) -> None:
        if self._set is None:
            raise AttributeError(f"{self.qualname} is read-only")
        receiver = None if self.static else instance
        self._cache.get_binding(self.owner, self._set)(receiver, value)

    def apply_default(self, receiver: object | None) -> None:
        """Route the declared default through the setter binding."""
        self._cache.get_binding(self.owner, self._set)(receiver, self.default)


class BodylessMethod(BodylessMember):
    """Method whose implementation is supplied by an ancestor provider.

    The decorated function is never called; its signature only describes the
    member.
    """

    kinds = (MemberKind.INVOKE,)

    def __init__(self, fn: Callable[..., Any], *, static: bool = False) -> None:
        if getattr(fn, "__isabstractmethod__", False):
            raise InvalidDeclaration(
                f"{fn.__qualname__} cannot be both bodyless and abstract; "
                "its body is supplied by a binding"
            )
        super().__init__(static=static)
        self.fn = fn
        functools.update_wrapper(self, fn)
        self._invoke_descriptor: MemberDescriptor | None = None

    def metadata(self, owner: type, name: str) -> dict[str, Any]:
        try:
            signature = inspect.signature(self.fn)
        except NameError:
            return {}
        parameters = list(signature.parameters.values())
        if not self.static and parameters:
            parameters = parameters[1:]
        return {
            "parameter_types": tuple(
                (p.name, None if p.annotation is p.empty else p.annotation) for p in parameters
            ),
            "return_type": (
                None if signature.return_annotation is signature.empty else signature.return_annotation
            ),
        }

    def __set_name__(self, owner: type, name: str) -> None:
        super().__set_name__(owner, name)
        self._invoke_descriptor = self.descriptors[MemberKind.INVOKE]

    def __get__(self, instance: object | None, owner: type | None = None) -> Any:
        if self.static:
            return functools.partial(self.invoke, None)
        if instance is None:
            return self
        return MethodType(self.invoke, instance)

    def __call__(self, receiver: object, *args: Any, **kwargs: Any) -> Any:
        return self.invoke(receiver, *args, **kwargs)

    def invoke(self, receiver: object | None, *args: Any, **kwargs: Any) -> Any:
        invoker = self._cache.get_binding(self.owner, self._invoke_descriptor)
        return invoker(receiver, *args, **kwargs)


class EventAccessor:
    """Bound view of an event member on one receiver.

    Supports ``add``/``remove`` as well as ``obj.event += handler`` and
    ``obj.event -= handler``.
    """

    __slots__ = ("member", "receiver")

    def __init__(self, member: "BodylessEvent", receiver: object | None) -> None:
        self.member = member
        self.receiver = receiver

    def add(self, handler: Callable[..., Any]) -> None:
        self.member.add(self.receiver, handler)

    def remove(self, handler: Callable[..., Any]) -> None:
        self.member.remove(self.receiver, handler)

    def __iadd__(self, handler: Callable[..., Any]) -> "EventAccessor":
        self.add(handler)
        return self

    def __isub__(self, handler: Callable[..., Any]) -> "EventAccessor":
        self.remove(handler)
        return self

    def __repr__(self) -> str:
        return f"<EventAccessor {self.member.qualname}>"


class BodylessEvent(BodylessMember):
    """Event whose add and remove accessors are supplied by an ancestor provider."""

    kinds = (MemberKind.EVENT_ADD, MemberKind.EVENT_REMOVE)

    def __init__(self, handler_type: Any = None, *, static: bool = False) -> None:
        super().__init__(static=static)
        self.handler_type = handler_type
        self._add: MemberDescriptor | None = None

    def metadata(self, owner: type, name: str) -> dict[str, Any]:
        handler_type = self.handler_type if self.handler_type is not None else _annotation(owner, name)
        return {"value_type": handler_type}

    def __set_name__(self, owner: type, name: str) -> None:
        super().__set_name__(owner, name)
        self._add = self.descriptors[MemberKind.EVENT_ADD]

    def __get__(self, instance: object | None, owner: type | None = None) -> Any:
        if self.static:
            return EventAccessor(self, None)
        if instance is None:
            return self
        return EventAccessor(self, instance)

    def __set__(self, instance: object, value: Any) -> None:
        # `obj.event += handler` stores the accessor back after __iadd__.
        if not self.accepts_assignment(value):
            raise AttributeError(f"cannot assign to event {self.qualname}; use += or add()")

    def accepts_assignment(self, value: Any) -> bool:
        return isinstance(value, EventAccessor) and value.member is self

    def add(self, receiver: object | None, handler: Callable[..., Any]) -> None:
        self._cache.get_binding(self.owner, self._add).add(receiver, handler)

    def remove(self, receiver: object | None, handler: Callable[..., Any]) -> None:
        # Both accessors share the binding resolved under the add descriptor.
        self._cache.get_binding(self.owner, self._add).remove(receiver, handler)


def bodyless(
    default: Any = MISSING,
    *,
    static: bool = False,
    readonly: bool = False,
    value_type: Any = None,
) -> Any:
    """Declare a bodyless property.

    Args:
        default: Initial value, written through the setter binding once per
            instance (or once per class for static members).
        static: Key the member by the declaring class; bindings receive
            ``None`` as the receiver.
        readonly: Declare only a getter.
        value_type: Value type recorded in the descriptors. Defaults to the
            class annotation of the member.

    Returns:
        The property shim.
    """
    return BodylessProperty(default, static=static, readonly=readonly, value_type=value_type)


@overload
def bodyless_method(fn: Callable[..., Any], /) -> Any: ...


@overload
def bodyless_method(*, static: bool = False) -> Callable[[Callable[..., Any]], Any]: ...


def bodyless_method(fn: Callable[..., Any] | None = None, /, *, static: bool = False) -> Any:
    """Declare a bodyless method, with or without arguments.

    Example:
        @bodyless_method
        def render(self, width: int) -> str: ...

        @bodyless_method(static=True)
        def registry() -> dict[str, int]: ...
    """
    if fn is None:
        return functools.partial(BodylessMethod, static=static)
    return BodylessMethod(fn, static=static)


def bodyless_event(handler_type: Any = None, *, static: bool = False) -> Any:
    """Declare a bodyless event.

    Args:
        handler_type: Handler signature recorded in the descriptors.
        static: Key the member by the declaring class.

    Returns:
        The event shim.
    """
    return BodylessEvent(handler_type, static=static)


def _lookup(cls: type, name: str) -> Any:
    for klass in cls.__mro__:
        if name in vars(klass):
            return vars(klass)[name]
    return None


def declared_members(cls: type) -> Iterator[BodylessMember]:
    """Yield the shims visible on ``cls``, nearest class first."""
    seen: set[str] = set()
    for klass in cls.__mro__:
        for name, value in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(value, BodylessMember):
                yield value


def member_descriptors(cls: type) -> Iterator[MemberDescriptor]:
    """Yield the descriptors of every bodyless member visible on ``cls``."""
    for member in declared_members(cls):
        yield from member.descriptors.values()


class BindableMeta(type):
    """Metaclass that applies bodyless defaults and routes static assignments."""

    __bodyless_defaults__: tuple[BodylessProperty, ...]

    def __init__(
        cls, name: str, bases: tuple[type, ...], namespace: dict[str, Any], **kwargs: Any
    ) -> None:
        super().__init__(name, bases, namespace, **kwargs)
        visible = {member.name: member for member in declared_members(cls)}
        # Base class defaults are written first, each class in declaration order.
        defaults = tuple(
            value
            for klass in reversed(cls.__mro__)
            for value in vars(klass).values()
            if isinstance(value, BodylessProperty)
            and visible.get(value.name) is value
            and not value.static
            and value.default is not MISSING
        )
        type.__setattr__(cls, "__bodyless_defaults__", defaults)

        for value in namespace.values():
            if isinstance(value, BodylessProperty) and value.static and value.default is not MISSING:
                value.apply_default(None)

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        instance = cls.__new__(cls, *args, **kwargs)
        if isinstance(instance, cls):
            instance_type = type(instance)
            for member in instance_type.__bodyless_defaults__:
                member.apply_default(instance)
            instance_type.__init__(instance, *args, **kwargs)
        return instance

    def __setattr__(cls, name: str, value: Any) -> None:
        member = _lookup(cls, name)
        if isinstance(member, BodylessProperty) and member.static:
            member.__set__(None, value)
            return
        if isinstance(member, BodylessEvent) and member.static and member.accepts_assignment(value):
            return
        super().__setattr__(name, value)


class Bindable(BindingProvider, metaclass=BindableMeta):
    """Base class for types that declare bodyless members or provide them."""
