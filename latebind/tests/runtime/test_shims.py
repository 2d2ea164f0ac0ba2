"""Tests for bodyless member declarations and dispatch"""

# pylint: disable=redefined-outer-name,unused-variable,expression-not-assigned,singleton-comparison

from abc import abstractmethod
from typing import Annotated

import pytest

from latebind.runtime import (
    Bindable,
    BindingCache,
    BodylessEvent,
    BodylessProperty,
    EntryState,
    Getter,
    InvalidDeclaration,
    Invoker,
    MemberKind,
    NoProviderFound,
    Setter,
    UnsupportedMember,
    bodyless,
    bodyless_event,
    bodyless_method,
    member_descriptors,
)


def describe_bodyless_property():
    def stores_per_instance(expect, map_store):
        class Counter(map_store):
            count: int = bodyless()

        d = Counter()
        d.count = 5
        d2 = Counter()

        expect(d.count) == 5
        expect(d2.count) == 0

    def resolves_once_per_accessor(expect, map_store):
        class Counter(map_store):
            count: int = bodyless()

        for value in range(5):
            c = Counter()
            c.count = value
            expect(c.count) == value

        kinds = [d.kind for d in map_store.calls]
        expect(sorted(kinds)) == [MemberKind.GET, MemberKind.SET]

    def passes_the_declared_type(expect, map_store):
        class Counter(map_store):
            count: int = bodyless()

        Counter().count

        getter = map_store.calls[0]
        expect(getter.owning_type) == Counter
        expect(getter.name) == "count"
        expect(getter.value_type) == int

    def explicit_value_type_wins(expect, map_store):
        class Counter(map_store):
            count = bodyless(value_type=float)

        descriptors = list(member_descriptors(Counter))
        expect({d.value_type for d in descriptors}) == {float}

    def accepts_unhashable_annotations(expect, map_store):
        class Track(map_store):
            length: Annotated[int, {"unit": "m"}] = bodyless()

        t = Track()
        t.length = 3

        expect(t.length) == 3
        expect(map_store.calls[0].value_type) == Annotated[int, {"unit": "m"}]

    def returns_the_shim_on_class_access(expect, map_store):
        class Counter(map_store):
            count: int = bodyless()

        expect(Counter.count.name) == "count"
        expect(Counter.count.owner) == Counter

    def is_inherited_with_the_same_binding(expect, map_store):
        class Base(map_store):
            count: int = bodyless()

        class Derived(Base):
            pass

        b = Base()
        d = Derived()
        b.count = 1
        d.count = 2

        expect((b.count, d.count)) == (1, 2)
        expect(len(map_store.calls)) == 2

    def readonly_has_no_setter(expect, map_store):
        class Counter(map_store):
            total: int = bodyless(readonly=True)

        c = Counter()
        expect(c.total) == 0
        with pytest.raises(AttributeError) as exinfo:
            c.total = 3

        expect(str(exinfo.value)).includes("read-only")
        expect([d.kind for d in member_descriptors(Counter)]) == [MemberKind.GET]

    def missing_provider_fails_at_first_use(expect):
        class Orphan(Bindable):
            count: int = bodyless()

        o = Orphan()
        with pytest.raises(NoProviderFound):
            o.count
        with pytest.raises(NoProviderFound):
            o.count = 1

    def uses_a_pinned_cache(expect, map_store):
        cache = BindingCache()

        class Counter(map_store):
            binding_cache = cache
            count: int = bodyless()

        Counter().count

        expect(Counter.count.cache is cache) == True
        expect(cache.state(Counter, Counter.count.descriptors[MemberKind.GET])) == EntryState.RESOLVED


def describe_default_values():
    def route_through_the_setter_once(expect):
        writes = []

        class Recording(Bindable):
            def resolve_getter(cls, descriptor):
                return Getter(lambda obj: obj.__dict__.get("_title", "unset"))

            def resolve_setter(cls, descriptor):
                def write(obj, value):
                    writes.append((obj, value))
                    obj.__dict__["_title"] = value

                return Setter(write)

        class Document(Recording):
            title: str = bodyless("Default Title")

        doc = Document()

        expect(writes) == [(doc, "Default Title")]
        expect(doc.title) == "Default Title"
        expect("title" in doc.__dict__) == False

    def apply_before_init(expect, map_store):
        seen = []

        class Document(map_store):
            title: str = bodyless("Default Title")

            def __init__(self, suffix):
                seen.append(self.title)
                self.title = self.title + suffix

        doc = Document("!")

        expect(seen) == ["Default Title"]
        expect(doc.title) == "Default Title!"

    def apply_base_defaults_first(expect):
        order = []

        class Recording(Bindable):
            def resolve_setter(cls, descriptor):
                return Setter(lambda obj, value: order.append(descriptor.name))

        class Base(Recording):
            a: int = bodyless(1)
            b: int = bodyless(2)

        class Derived(Base):
            c: int = bodyless(3)

        Derived()

        expect(order) == ["a", "b", "c"]

    def are_not_applied_when_shadowed(expect, map_store):
        class Base(map_store):
            title: str = bodyless("base")

        class Derived(Base):
            title = "plain attribute"

        d = Derived()

        expect(d.title) == "plain attribute"
        expect(map_store.calls) == []

    def static_default_applies_at_class_creation(expect, map_store):
        class Settings(map_store):
            version: int = bodyless(3, static=True)

        expect(Settings.version) == 3
        expect([d.kind for d in map_store.calls]) == [MemberKind.SET, MemberKind.GET]

    def require_a_bindable_owner(expect):
        with pytest.raises(InvalidDeclaration) as exinfo:

            class Plain:
                title: str = bodyless("x")

        expect(str(exinfo.value)).includes("derive from Bindable")

    def cannot_be_readonly(expect):
        with pytest.raises(InvalidDeclaration):
            bodyless("x", readonly=True)


def describe_static_property():
    def reads_and_writes_through_the_class(expect, map_store):
        class Settings(map_store):
            version: int = bodyless(static=True)

        expect(Settings.version) == 0
        Settings.version = 7

        expect(Settings.version) == 7
        expect(Settings().version) == 7
        expect(isinstance(Settings.__dict__["version"], BodylessProperty)) == True

    def receives_no_receiver(expect):
        receivers = []

        class Provider(Bindable):
            def resolve_getter(cls, descriptor):
                return Getter(lambda obj: receivers.append(obj))

        class Settings(Provider):
            version: int = bodyless(static=True)

        Settings.version
        Settings().version

        expect(receivers) == [None, None]

    def is_keyed_by_the_declaring_type(expect, map_store):
        class Base(map_store):
            version: int = bodyless(static=True)

        class Derived(Base):
            pass

        Derived.version = 4

        expect(Base.version) == 4
        expect(len([d for d in map_store.calls if d.kind == MemberKind.GET])) == 1

    def instance_assignment_updates_the_class_value(expect, map_store):
        class Settings(map_store):
            version: int = bodyless(static=True)

        Settings().version = 9

        expect(Settings.version) == 9


def describe_bodyless_method():
    def routes_calls_through_the_invoker(expect, map_store):
        class Greeter(map_store):
            @bodyless_method
            def greet(self, name: str, *, loud: bool = False) -> str: ...

        g = Greeter()

        expect(g.greet("ada", loud=True)) == ("greet", ("ada",), {"loud": True})
        expect(Greeter.greet(g, "bob")) == ("greet", ("bob",), {})

    def records_the_signature(expect, map_store):
        class Greeter(map_store):
            @bodyless_method
            def greet(self, name: str, times: int) -> str: ...

        (descriptor,) = member_descriptors(Greeter)

        expect(descriptor.kind) == MemberKind.INVOKE
        expect(descriptor.parameter_types) == (("name", str), ("times", int))
        expect(descriptor.return_type) == str

    def keeps_the_function_metadata(expect, map_store):
        class Greeter(map_store):
            @bodyless_method
            def greet(self, name: str) -> str:
                """Say hello."""

        expect(Greeter.greet.__name__) == "greet"
        expect(Greeter.greet.__doc__) == "Say hello."

    def never_runs_the_declared_body(expect):
        class Provider(Bindable):
            def resolve_invoker(cls, descriptor):
                return Invoker(lambda obj: "bound")

        class Greeter(Provider):
            @bodyless_method
            def greet(self):
                raise AssertionError("body must not run")

        expect(Greeter().greet()) == "bound"

    def static_methods_get_no_receiver(expect, map_store):
        class Factory(map_store):
            @bodyless_method(static=True)
            def create(name: str) -> str: ...

        (descriptor,) = member_descriptors(Factory)

        expect(Factory.create("x")) == ("create", ("x",), {})
        expect(Factory().create("y")) == ("create", ("y",), {})
        expect(descriptor.static) == True
        expect(descriptor.parameter_types) == (("name", str),)

    def rejects_abstract_declarations(expect):
        with pytest.raises(InvalidDeclaration) as exinfo:

            class Shape(Bindable):
                @bodyless_method
                @abstractmethod
                def area(self) -> float: ...

        expect(str(exinfo.value)).includes("both bodyless and abstract")

    def rejects_abstract_applied_over_the_shim(expect):
        with pytest.raises(InvalidDeclaration) as exinfo:

            class Shape(Bindable):
                @abstractmethod
                @bodyless_method
                def area(self) -> float: ...

        expect(str(exinfo.value)).includes("Shape.area cannot be both bodyless and abstract")


def describe_bodyless_event():
    def adds_and_removes_handlers(expect, map_store):
        class Button(map_store):
            clicked = bodyless_event()

        def handler():
            pass

        b = Button()
        b.clicked.add(handler)
        expect(b.__dict__["_handlers"]) == [handler]

        b.clicked.remove(handler)
        expect(b.__dict__["_handlers"]) == []

    def supports_augmented_assignment(expect, map_store):
        class Button(map_store):
            clicked = bodyless_event()

        def handler():
            pass

        b = Button()
        b.clicked += handler
        expect(b.__dict__["_handlers"]) == [handler]

        b.clicked -= handler
        expect(b.__dict__["_handlers"]) == []

    def resolves_the_pair_once(expect, map_store):
        class Button(map_store):
            clicked = bodyless_event()

        b = Button()
        b.clicked += print
        b.clicked -= print

        expect([d.kind for d in map_store.calls]) == [MemberKind.EVENT_ADD]

    def rejects_plain_assignment(expect, map_store):
        class Button(map_store):
            clicked = bodyless_event()

        with pytest.raises(AttributeError):
            Button().clicked = print

    def static_events_use_the_class(expect, map_store):
        class Bus(map_store):
            published = bodyless_event(static=True)

        Bus.published += print

        expect(map_store.static_values[(Bus, "events")]) == [print]
        expect(isinstance(Bus.__dict__["published"], BodylessEvent)) == True

    def records_the_handler_type(expect, map_store):
        class Button(map_store):
            clicked = bodyless_event(handler_type="Callable[[], None]")

        expect({d.value_type for d in member_descriptors(Button)}) == {"Callable[[], None]"}


def describe_declarations():
    def cannot_share_a_shim_between_classes(expect):
        shared = bodyless()

        class First(Bindable):
            title = shared

        with pytest.raises(InvalidDeclaration):

            class Second(Bindable):
                title = shared

    def reject_a_bad_pinned_cache(expect):
        with pytest.raises(InvalidDeclaration):

            class Document(Bindable):
                binding_cache = {}
                title: str = bodyless()

    def list_descriptors_nearest_first(expect, map_store):
        class Base(map_store):
            a: int = bodyless()

        class Derived(Base):
            b: int = bodyless(readonly=True)

            @bodyless_method
            def run(self) -> None: ...

        names = [(d.name, d.kind) for d in member_descriptors(Derived)]

        expect(names) == [
            ("b", MemberKind.GET),
            ("run", MemberKind.INVOKE),
            ("a", MemberKind.GET),
            ("a", MemberKind.SET),
        ]

    def providers_can_decline_by_name(expect):
        class Flags(Bindable):
            def resolve_getter(cls, descriptor):
                if not descriptor.name.startswith("is_"):
                    raise UnsupportedMember(f"{descriptor.name} is not a flag")
                return Getter(lambda obj: True)

        class Feature(Flags):
            is_enabled: bool = bodyless(readonly=True)
            label: str = bodyless(readonly=True)

        f = Feature()

        expect(f.is_enabled) == True
        with pytest.raises(NoProviderFound):
            f.label
