"""Runtime descriptors for bodyless members.

A descriptor identifies one accessor of a member that a class declares without
a body. Descriptors are created by the dispatch shims when the declaring class
is built and are used as cache keys, provider arguments and data slot
addresses. Every descriptor handed to a provider corresponds to a non-abstract
member; the shims reject abstract bodyless declarations before a descriptor is
ever built.
"""

from dataclasses import dataclass, field, replace
from enum import StrEnum, auto
from typing import Any, Self


class MemberKind(StrEnum):
    """Accessor shape of a bodyless member."""

    GET = auto()
    SET = auto()
    INVOKE = auto()
    EVENT_ADD = auto()
    EVENT_REMOVE = auto()


class _Missing:
    """Marker for an absent default value."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

# Only descriptors built through MemberDescriptor.declare() carry this token.
_DECLARE_TOKEN = object()


@dataclass(frozen=True, slots=True)
class MemberDescriptor:
    """Describes one accessor of a bodyless member.

    Equality covers every public field, so two structurally identical
    members on different classes never compare equal. The hash covers only
    the owning type, name, kind and static flag, which keeps descriptors
    with unhashable annotations usable as keys.

    Use ``MemberDescriptor.declare`` to build one; calling the constructor
    directly raises ``TypeError``.
    """

    owning_type: type
    name: str
    kind: MemberKind
    value_type: Any = None
    parameter_types: tuple[tuple[str, Any], ...] = ()
    return_type: Any = None
    static: bool = False
    _token: object = field(default=None, repr=False, compare=False)
    _hash: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self._token is not _DECLARE_TOKEN:
            raise TypeError("MemberDescriptor instances are created by MemberDescriptor.declare()")
        # Annotations may be unhashable (Annotated metadata), so they stay out of the hash.
        object.__setattr__(
            self, "_hash", hash((self.owning_type, self.name, self.kind, self.static))
        )

    def __hash__(self) -> int:
        return self._hash

    @classmethod
    def declare(
        cls,
        owning_type: type,
        name: str,
        kind: MemberKind,
        *,
        value_type: Any = None,
        parameter_types: tuple[tuple[str, Any], ...] = (),
        return_type: Any = None,
        static: bool = False,
    ) -> Self:
        """Assemble the descriptor for one accessor of a declared member.

        Args:
            owning_type: The class that declares the member.
            name: The attribute name of the member.
            kind: Which accessor this descriptor identifies.
            value_type: Annotation of the property value or event handler.
            parameter_types: ``(name, annotation)`` pairs of an invoke member.
            return_type: Return annotation of an invoke member.
            static: True for members keyed by the class instead of an instance.

        Returns:
            The new descriptor.
        """
        return cls(
            owning_type,
            name,
            MemberKind(kind),
            value_type,
            tuple(parameter_types),
            return_type,
            static,
            _DECLARE_TOKEN,
        )

    def sibling(self, kind: MemberKind) -> Self:
        """Return the descriptor of another accessor of the same member."""
        if kind == self.kind:
            return self
        return replace(self, kind=MemberKind(kind))

    @property
    def primary(self) -> Self:
        """The descriptor that identifies the member as a whole.

        Properties are identified by their getter, events by their add
        accessor, methods by themselves.
        """
        if self.kind == MemberKind.SET:
            return self.sibling(MemberKind.GET)
        if self.kind == MemberKind.EVENT_REMOVE:
            return self.sibling(MemberKind.EVENT_ADD)
        return self

    @property
    def resolution_key(self) -> Self:
        """Descriptor under which the binding for this accessor is resolved.

        Both event accessors share one ``EventBinding``, so removal resolves
        through the add accessor.
        """
        if self.kind == MemberKind.EVENT_REMOVE:
            return self.sibling(MemberKind.EVENT_ADD)
        return self

    @property
    def qualname(self) -> str:
        """Dotted ``Class.member`` name used in messages."""
        return f"{self.owning_type.__qualname__}.{self.name}"

    def __str__(self) -> str:
        prefix = "static " if self.static else ""
        return f"{prefix}{self.kind} {self.qualname}"
