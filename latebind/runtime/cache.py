"""Process-wide cache of resolved bindings with once-only resolution."""

import logging
import threading
from dataclasses import dataclass
from enum import StrEnum, auto
from types import TracebackType

from .bindings import Binding
from .provider import BindingError, resolve_binding
from .types import MemberDescriptor

logger = logging.getLogger(__name__)


class ConcurrentResolutionFailure(BindingError):
    """Raised when a pending resolution is aborted or re-entered."""


class EntryState(StrEnum):
    """Lifecycle of a cache entry."""

    UNRESOLVED = auto()
    RESOLVING = auto()
    RESOLVED = auto()  # terminal
    FAILED = auto()  # terminal, sticky


CacheKey = tuple[type, MemberDescriptor]


class _Entry:
    __slots__ = ("state", "binding", "provider", "error", "traceback", "resolver_thread", "done")

    def __init__(self) -> None:
        self.state = EntryState.UNRESOLVED
        self.binding: Binding | None = None
        self.provider: type | None = None
        self.error: BaseException | None = None
        self.traceback: TracebackType | None = None
        self.resolver_thread: int | None = None
        self.done = threading.Event()

    def outcome(self) -> Binding:
        if self.error is not None:
            # Raise with the traceback captured when resolution failed.
            raise self.error.with_traceback(self.traceback)
        assert self.binding is not None
        return self.binding


@dataclass(frozen=True)
class CacheEntrySnapshot:
    """Point-in-time view of one cache entry."""

    state: EntryState
    binding: Binding | None = None
    provider: type | None = None
    error: BaseException | None = None


class BindingCache:
    """Memoizes the binding of every (declaring type, member) pair.

    Resolved bindings are published to a plain dict that is only ever written
    after the binding is complete, so lookups of resolved members take no lock.
    The first caller for a key resolves it; concurrent callers wait for that
    result. Entries are never updated once resolved or failed and never
    evicted.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[CacheKey, _Entry] = {}
        self._resolved: dict[CacheKey, Binding] = {}

    def get_binding(self, declaring_type: type, descriptor: MemberDescriptor) -> Binding:
        """Return the binding for a member, resolving it on first use.

        Args:
            declaring_type: The class the member is resolved for.
            descriptor: The member accessor.

        Returns:
            The binding shared by every caller for this key.

        Raises:
            BindingError: Resolution failed now or on an earlier attempt.
        """
        key = (declaring_type, descriptor.resolution_key)
        binding = self._resolved.get(key)
        if binding is not None:
            return binding
        return self._resolve(key)

    def _resolve(self, key: CacheKey) -> Binding:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            winner = entry.state == EntryState.UNRESOLVED
            if winner:
                entry.state = EntryState.RESOLVING
                entry.resolver_thread = threading.get_ident()

        if not winner:
            if entry.state == EntryState.RESOLVING and entry.resolver_thread == threading.get_ident():
                raise ConcurrentResolutionFailure(
                    f"{key[1]} was accessed while its own binding was being resolved"
                )
            entry.done.wait()
            return entry.outcome()

        declaring_type, descriptor = key
        logger.debug("Resolving %s for %s", descriptor, declaring_type.__qualname__)
        try:
            binding, provider = resolve_binding(declaring_type, descriptor)
        except Exception as exc:
            logger.warning("Resolution of %s failed: %s", descriptor, exc)
            entry.error = exc
            entry.traceback = exc.__traceback__
            entry.state = EntryState.FAILED
            entry.done.set()
            raise
        except BaseException:
            entry.error = ConcurrentResolutionFailure(f"Resolution of {descriptor} was aborted")
            entry.state = EntryState.FAILED
            entry.done.set()
            raise

        entry.binding = binding
        entry.provider = provider
        self._resolved[key] = binding
        entry.state = EntryState.RESOLVED
        entry.done.set()
        logger.debug("Resolved %s via %s", descriptor, provider.__qualname__)
        return binding

    def state(self, declaring_type: type, descriptor: MemberDescriptor) -> EntryState:
        """Return the lifecycle state of a member's entry."""
        entry = self._entries.get((declaring_type, descriptor.resolution_key))
        return EntryState.UNRESOLVED if entry is None else entry.state

    def snapshot(self, declaring_type: type, descriptor: MemberDescriptor) -> CacheEntrySnapshot:
        """Return the state, binding, provider and error of a member's entry."""
        entry = self._entries.get((declaring_type, descriptor.resolution_key))
        if entry is None:
            return CacheEntrySnapshot(EntryState.UNRESOLVED)
        return CacheEntrySnapshot(entry.state, entry.binding, entry.provider, entry.error)

    def stats(self) -> dict[str, int]:
        """Count entries per state."""
        with self._lock:
            entries = list(self._entries.values())
        counts = {state.value: 0 for state in EntryState}
        for entry in entries:
            counts[entry.state.value] += 1
        return counts

    def __len__(self) -> int:
        return len(self._entries)


binding_cache = BindingCache()
