"""Tests for the event emitter."""

import pytest

from formupload.services.form.events import EventEmitter


def test_listeners_run_in_registration_order():
    em = EventEmitter()
    calls = []
    em.on("field", lambda name, value: calls.append(("a", name, value)))
    em.on("field", lambda name, value: calls.append(("b", name, value)))
    assert em.emit("field", "title", "hello") is True
    assert calls == [("a", "title", "hello"), ("b", "title", "hello")]


def test_emit_without_listeners_returns_false():
    assert EventEmitter().emit("end") is False


def test_once_listener_runs_once():
    em = EventEmitter()
    calls = []
    em.once("end", lambda: calls.append(1))
    em.emit("end")
    em.emit("end")
    assert calls == [1]
    assert em.listener_count("end") == 0


def test_off_removes_listener():
    em = EventEmitter()
    calls = []

    def listener():
        calls.append(1)

    em.on("end", listener).off("end", listener)
    em.emit("end")
    assert calls == []
    assert em.listeners("end") == []


def test_unhandled_error_is_raised():
    em = EventEmitter()
    with pytest.raises(ValueError, match="boom"):
        em.emit("error", ValueError("boom"))


def test_handled_error_is_not_raised():
    em = EventEmitter()
    seen = []
    em.on("error", seen.append)
    err = ValueError("boom")
    em.emit("error", err)
    assert seen == [err]
