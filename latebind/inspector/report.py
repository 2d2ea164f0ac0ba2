"""Reports describing how a class's bodyless members are bound."""

from dataclasses import dataclass
from typing import Any

from dataclasses_json import DataClassJsonMixin

from latebind.runtime import (
    BindingCache,
    EntryState,
    MemberDescriptor,
    declared_members,
    provider_ancestors,
)
from latebind.runtime.provider import HOOKS


@dataclass
class MemberReport(DataClassJsonMixin):
    """Binding status of one accessor of a bodyless member."""

    name: str
    kind: str
    static: bool
    value_type: str | None
    state: str
    provider: str | None
    shape: str | None
    error: str | None


@dataclass
class TypeReport(DataClassJsonMixin):
    """Binding status of every bodyless member visible on a class."""

    name: str
    module: str
    providers: list[str]
    members: list[MemberReport]

    @property
    def failures(self) -> list[MemberReport]:
        return [m for m in self.members if m.state == EntryState.FAILED]


def format_type(annotation: Any) -> str | None:
    """Render an annotation for display."""
    if annotation is None:
        return None
    if isinstance(annotation, type):
        return annotation.__qualname__
    return str(annotation)


class ReportBuilder:
    """Collect cache state for the members of one class."""

    def __init__(self, cls: type, *, resolve: bool = False):
        self.cls = cls
        self.resolve = resolve

    def member_report(self, member_cache: BindingCache, descriptor: MemberDescriptor) -> MemberReport:
        """Report one descriptor, resolving it first when requested."""
        declaring_type = descriptor.owning_type
        if self.resolve:
            try:
                member_cache.get_binding(declaring_type, descriptor)
            except Exception:  # pylint: disable=broad-except
                # Recorded on the cache entry and reported below.
                pass

        snapshot = member_cache.snapshot(declaring_type, descriptor)
        return MemberReport(
            name=descriptor.name,
            kind=descriptor.kind.value,
            static=descriptor.static,
            value_type=format_type(descriptor.value_type),
            state=snapshot.state.value,
            provider=snapshot.provider.__qualname__ if snapshot.provider is not None else None,
            shape=type(snapshot.binding).__name__ if snapshot.binding is not None else None,
            error=str(snapshot.error) if snapshot.error is not None else None,
        )

    def build(self) -> TypeReport:
        members = [
            self.member_report(member.cache, descriptor)
            for member in declared_members(self.cls)
            for descriptor in member.descriptors.values()
        ]
        return TypeReport(
            name=self.cls.__qualname__,
            module=self.cls.__module__,
            providers=[
                p.__qualname__
                for p in provider_ancestors(self.cls)
                if any(hook in vars(p) for hook in HOOKS.values())
            ],
            members=members,
        )


def build_report(cls: type, *, resolve: bool = False) -> TypeReport:
    """Describe the bodyless members of ``cls``.

    Args:
        cls: The class to inspect.
        resolve: Resolve every member first. Resolution errors are recorded in
            the report instead of raised.

    Returns:
        The report.
    """
    return ReportBuilder(cls, resolve=resolve).build()
