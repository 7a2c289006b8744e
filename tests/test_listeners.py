"""Listener registries and subscriptions."""

from __future__ import annotations

from richtext.bridge.listeners import ListenerRegistry


def test_notify_in_registration_order():
    registry = ListenerRegistry("test")
    calls = []
    registry.add(lambda v: calls.append(("first", v)))
    registry.add(lambda v: calls.append(("second", v)))

    registry.notify(["bold"])

    assert calls == [("first", ["bold"]), ("second", ["bold"])]


def test_unsubscribe_is_idempotent():
    registry = ListenerRegistry("test")
    calls = []
    subscription = registry.add(calls.append)

    subscription.unsubscribe()
    subscription.unsubscribe()
    registry.notify("x")

    assert calls == []
    assert len(registry) == 0
    assert not subscription.active


def test_failing_listener_does_not_stop_fan_out(caplog):
    registry = ListenerRegistry("test")
    calls = []

    def broken(value):
        raise RuntimeError("boom")

    registry.add(broken)
    registry.add(calls.append)

    registry.notify("x")

    assert calls == ["x"]
    assert "boom" in caplog.text


def test_unsubscribe_during_notify_still_completes_round():
    registry = ListenerRegistry("test")
    calls = []
    holder = {}

    def first(value):
        calls.append("first")
        holder["second"].unsubscribe()

    registry.add(first)
    holder["second"] = registry.add(lambda v: calls.append("second"))

    registry.notify(None)
    registry.notify(None)

    assert calls == ["first", "second", "first"]
