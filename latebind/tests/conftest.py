"""Shared fixtures for latebind tests."""

import threading

import pytest

from latebind.runtime import Bindable, EventBinding, Getter, Invoker, Setter


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


def _values(receiver, descriptor):
    return receiver.__dict__.setdefault("_values", {})


@pytest.fixture
def map_store():
    """A fresh provider keeping property values in a per-instance map.

    Unset properties read as 0. Every hook call is recorded in ``calls``.
    """

    class MapStore(Bindable):
        calls: list = []
        static_values: dict = {}

        def resolve_getter(cls, descriptor):
            cls.calls.append(descriptor)
            if descriptor.static:
                values = cls.static_values.setdefault(descriptor.owning_type, {})
                return Getter(lambda _: values.get(descriptor.name, 0))
            return Getter(lambda obj: _values(obj, descriptor).get(descriptor.name, 0))

        def resolve_setter(cls, descriptor):
            cls.calls.append(descriptor)
            if descriptor.static:
                values = cls.static_values.setdefault(descriptor.owning_type, {})
                return Setter(lambda _, value: values.__setitem__(descriptor.name, value))
            return Setter(
                lambda obj, value: _values(obj, descriptor).__setitem__(descriptor.name, value)
            )

        def resolve_invoker(cls, descriptor):
            cls.calls.append(descriptor)
            return Invoker(lambda obj, *args, **kwargs: (descriptor.name, args, kwargs))

        def resolve_event_binding(cls, descriptor):
            cls.calls.append(descriptor)

            def handlers(obj):
                if descriptor.static:
                    return cls.static_values.setdefault((descriptor.owning_type, "events"), [])
                return obj.__dict__.setdefault("_handlers", [])

            return EventBinding(
                add=lambda obj, handler: handlers(obj).append(handler),
                remove=lambda obj, handler: handlers(obj).remove(handler),
            )

    return MapStore


@pytest.fixture
def run_concurrently():
    """Run ``fn`` on several threads released at the same moment.

    Returns the list of results; an exception raised in a thread is returned
    in place of its result.
    """

    def run(fn, threads=16):
        barrier = threading.Barrier(threads)
        results = [None] * threads

        def worker(index):
            barrier.wait()
            try:
                results[index] = fn()
            except Exception as exc:  # pylint: disable=broad-except
                results[index] = exc

        workers = [threading.Thread(target=worker, args=(i,)) for i in range(threads)]
        for worker_thread in workers:
            worker_thread.start()
        for worker_thread in workers:
            worker_thread.join()
        return results

    return run
