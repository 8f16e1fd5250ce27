# tests/tests_registry/test_dispatcher.py
import asyncio
import logging

import pytest

import _providers

from mcp_playwright_server.cancellation import CancellationToken
from mcp_playwright_server.registry import Dispatcher, build_catalog
import mcp_playwright_server.registry.dispatcher as dispatcher_module


@pytest.fixture(autouse=True)
def _reset_calls():
    _providers.CALLS.clear()
    yield
    _providers.CALLS.clear()


@pytest.fixture
def dispatcher():
    return Dispatcher(build_catalog([_providers.THIS_MODULE]), session="SESSION")


def test_success_wraps_payload_unchanged(event_loop, dispatcher):
    result = event_loop.run_until_complete(
        dispatcher.invoke("echo", {"flag": "true", "count": "800", "ratio": 1, "name": "x"})
    )
    assert result == {
        "ok": True,
        "payload": {"flag": True, "count": 800, "ratio": 1.0, "name": "x", "extra": None},
    }


def test_unknown_operation(event_loop, dispatcher):
    result = event_loop.run_until_complete(dispatcher.invoke("nope", {}))
    assert result == {"ok": False, "message": "nope not found"}


def test_coercion_failure_does_not_invoke(event_loop, dispatcher):
    result = event_loop.run_until_complete(dispatcher.invoke("echo", {"flag": True}))
    assert result == {"ok": False, "message": 'Missing required argument "count"'}
    assert _providers.CALLS == []

    result = event_loop.run_until_complete(
        dispatcher.invoke("echo", {"flag": True, "count": "abc", "ratio": 1, "name": "x"})
    )
    assert result == {"ok": False, "message": "count must be an integer"}
    assert _providers.CALLS == []


def test_non_object_arguments(event_loop, dispatcher):
    result = event_loop.run_until_complete(dispatcher.invoke("echo", [1, 2]))
    assert result == {"ok": False, "message": "arguments must be an object"}


def test_operation_exception_becomes_failure(event_loop, dispatcher, caplog):
    with caplog.at_level(logging.WARNING):
        result = event_loop.run_until_complete(dispatcher.invoke("explode"))
    assert result == {"ok": False, "message": "boom"}
    assert any("explode failed: RuntimeError" in r.getMessage() for r in caplog.records)


def test_empty_exception_message_falls_back_to_class_name(event_loop, dispatcher):
    result = event_loop.run_until_complete(dispatcher.invoke("explode_silently"))
    assert result == {"ok": False, "message": "KeyError"}


def test_task_cancellation_propagates(event_loop, dispatcher):
    with pytest.raises(asyncio.CancelledError):
        event_loop.run_until_complete(dispatcher.invoke("cancelled_op"))


def test_session_is_injected(event_loop, dispatcher):
    result = event_loop.run_until_complete(
        dispatcher.invoke("resize_window", {"size": {"width": 3, "height": 4}})
    )
    assert result["ok"] is True
    assert _providers.CALLS[0][2] == "SESSION"


def test_cancellation_token_is_passed_through_or_created(event_loop, dispatcher):
    token = CancellationToken()
    event_loop.run_until_complete(dispatcher.invoke("optional_things", {}, cancellation=token))
    assert _providers.CALLS[-1][2] is token

    event_loop.run_until_complete(dispatcher.invoke("optional_things", {}))
    created = _providers.CALLS[-1][2]
    assert isinstance(created, CancellationToken)
    assert created is not token


def test_global_session_is_resolved_lazily(event_loop, monkeypatch):
    calls = []

    def fake_get_session():
        calls.append(1)
        return "GLOBAL"

    monkeypatch.setattr(dispatcher_module, "get_session", fake_get_session)
    dispatcher = Dispatcher(build_catalog([_providers.THIS_MODULE]))

    event_loop.run_until_complete(dispatcher.invoke("explode"))
    assert calls == []

    event_loop.run_until_complete(dispatcher.invoke("resize_window", {"size": {"width": 1, "height": 1}}))
    event_loop.run_until_complete(dispatcher.invoke("resize_window", {"size": {"width": 1, "height": 1}}))
    assert calls == [1]
    assert _providers.CALLS[-1][2] == "GLOBAL"
