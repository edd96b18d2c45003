# tests/core/test_events.py

from __future__ import annotations

from termprofiles.core.events import Emitter


def test_emit_calls_subscribers_in_order():
    emitter = Emitter()
    seen = []
    emitter.on("ping", lambda p: seen.append(("a", p)))
    emitter.on("ping", lambda p: seen.append(("b", p)))
    emitter.on("other", lambda p: seen.append(("c", p)))

    emitter.emit("ping", 1)

    assert seen == [("a", 1), ("b", 1)]


def test_dispose_unsubscribes_once():
    emitter = Emitter()
    seen = []
    sub = emitter.on("ping", seen.append)

    sub.dispose()
    sub.dispose()
    emitter.emit("ping", 1)

    assert seen == []
    assert sub.disposed is True
    assert emitter.listener_count("ping") == 0


def test_failing_subscriber_does_not_stop_dispatch():
    emitter = Emitter()
    seen = []

    def boom(_payload):
        raise RuntimeError("boom")

    emitter.on("ping", boom)
    emitter.on("ping", seen.append)

    emitter.emit("ping", "x")

    assert seen == ["x"]


def test_subscription_as_context_manager():
    emitter = Emitter()
    seen = []
    with emitter.on("ping", seen.append):
        emitter.emit("ping", 1)
    emitter.emit("ping", 2)

    assert seen == [1]
