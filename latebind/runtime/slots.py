"""Typed storage cells that providers attach to instances and classes.

A provider that keeps per-member state can allocate a data slot instead of
maintaining its own map keyed by descriptor. Slots live in an arena stored on
the owner itself, so they are created with the owner and released with it.
Each descriptor gets a fixed arena index the first time any slot is allocated
for it.
"""

import threading
from typing import Any

from .types import MISSING, MemberDescriptor

ARENA_ATTRIBUTE = "__latebind_slots__"


class DataSlot:
    """Storage cell owned by one (owner, member) pair.

    Keeps the current value and the value it replaced, which is enough for
    providers that report changes.
    """

    __slots__ = ("descriptor", "value_type", "_current", "_previous", "__weakref__")

    def __init__(self, descriptor: MemberDescriptor, value_type: Any = None) -> None:
        self.descriptor = descriptor
        self.value_type = value_type
        self._current: Any = MISSING
        self._previous: Any = MISSING

    @property
    def has_value(self) -> bool:
        return self._current is not MISSING

    @property
    def previous(self) -> Any:
        """The value replaced by the last ``set``, or ``MISSING``."""
        return self._previous

    def get(self, default: Any = MISSING) -> Any:
        """Return the current value.

        Args:
            default: Returned when the slot is empty.

        Raises:
            LookupError: The slot is empty and no default was given.
        """
        if self._current is MISSING:
            if default is MISSING:
                raise LookupError(f"Slot for {self.descriptor.qualname} holds no value")
            return default
        return self._current

    def set(self, value: Any) -> None:
        """Store ``value``, keeping the replaced value as ``previous``."""
        if isinstance(self.value_type, type) and not isinstance(value, self.value_type):
            raise TypeError(
                f"{self.descriptor.qualname} expects {self.value_type.__name__}, "
                f"got {type(value).__name__}"
            )
        self._previous = self._current
        self._current = value

    def clear(self) -> None:
        self._previous = self._current
        self._current = MISSING

    def __repr__(self) -> str:
        return f"DataSlot({self.descriptor.qualname}={self._current!r})"


class SlotStore:
    """Assigns arena indexes to descriptors and hands out slots."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._indexes: dict[MemberDescriptor, int] = {}

    def index_of(self, descriptor: MemberDescriptor) -> int:
        """Return the arena index of a member, assigning one on first use."""
        key = descriptor.primary
        index = self._indexes.get(key)
        if index is None:
            with self._lock:
                index = self._indexes.setdefault(key, len(self._indexes))
        return index

    def allocate_slot(
        self, owner: Any, descriptor: MemberDescriptor, value_type: Any = None
    ) -> DataSlot:
        """Return the slot of ``descriptor`` on ``owner``, creating it if needed.

        Accessors of the same member (a property's getter and setter, an
        event's add and remove) share one slot.

        Args:
            owner: The instance, or the class for static members.
            descriptor: Any accessor of the member.
            value_type: Class checked by ``DataSlot.set``; defaults to the
                descriptor's ``value_type``.

        Returns:
            The slot exclusively owned by (owner, member).
        """
        index = self.index_of(descriptor)
        arena = vars(owner).get(ARENA_ATTRIBUTE)
        if arena is not None and index < len(arena) and arena[index] is not None:
            return arena[index]

        with self._lock:
            arena = _arena(owner)
            if index >= len(arena):
                arena.extend([None] * (index + 1 - len(arena)))
            slot = arena[index]
            if slot is None:
                if value_type is None:
                    value_type = descriptor.value_type
                slot = arena[index] = DataSlot(descriptor.primary, value_type)
        return slot


def _arena(owner: Any) -> list[DataSlot | None]:
    # The owner's own namespace, so a subclass never sees its base's arena.
    namespace = vars(owner)
    arena = namespace.get(ARENA_ATTRIBUTE)
    if arena is None:
        arena = []
        if isinstance(owner, type):
            type.__setattr__(owner, ARENA_ATTRIBUTE, arena)
        else:
            namespace[ARENA_ATTRIBUTE] = arena
    return arena


slot_store = SlotStore()


def allocate_slot(owner: Any, descriptor: MemberDescriptor, value_type: Any = None) -> DataSlot:
    """Allocate a slot from the process-wide store."""
    return slot_store.allocate_slot(owner, descriptor, value_type)
