# tests/tests_decorators/test_envelope.py
import asyncio
import json

import pytest

from mcp_playwright_server.decorators import (
    failure_envelope,
    get_operation_marker,
    operation,
    success_envelope,
    tool_envelope,
)
from mcp_playwright_server.decorators.envelope import error_message, payload_to_text


# ------------------------------
# tool_envelope tests
# ------------------------------

def test_tool_envelope_wraps_async_success(event_loop):
    @tool_envelope
    async def ok():
        return {"a": 1}

    assert event_loop.run_until_complete(ok()) == {"ok": True, "payload": {"a": 1}}


def test_tool_envelope_keeps_none_payload(event_loop):
    @tool_envelope
    async def nothing():
        return None

    assert event_loop.run_until_complete(nothing()) == {"ok": True, "payload": None}


def test_tool_envelope_converts_exceptions(event_loop, monkeypatch):
    monkeypatch.setenv("MCP_PLAYWRIGHT_LOG_TRACEBACKS", "0")

    @tool_envelope
    async def boom():
        raise ValueError("bad things")

    assert event_loop.run_until_complete(boom()) == {"ok": False, "message": "bad things"}


def test_tool_envelope_reraises_cancelled_error(event_loop):
    @tool_envelope
    async def cancelled():
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        event_loop.run_until_complete(cancelled())


def test_tool_envelope_rejects_sync_functions():
    def sync():
        return 1

    with pytest.raises(TypeError):
        tool_envelope(sync)


def test_tool_envelope_labels_failures_with_name(event_loop, caplog):
    async def inner():
        raise RuntimeError("nope")

    wrapped = tool_envelope(inner, name="click")
    event_loop.run_until_complete(wrapped())
    assert any(r.getMessage().startswith("click failed: RuntimeError") for r in caplog.records)


def test_envelope_helpers():
    assert success_envelope([1]) == {"ok": True, "payload": [1]}
    assert failure_envelope("x") == {"ok": False, "message": "x"}
    assert error_message(RuntimeError("m")) == "m"
    assert error_message(TimeoutError()) == "TimeoutError"


def test_payload_to_text():
    assert payload_to_text(None) == "null"
    assert payload_to_text("plain") == "plain"
    assert payload_to_text(b"bytes") == "bytes"
    assert json.loads(payload_to_text({"a": [1, "ü"]})) == {"a": [1, "ü"]}

    class Opaque:
        def __init__(self):
            self.x = 1

    assert json.loads(payload_to_text({"o": Opaque()})) == {"o": {"x": 1}}


# ------------------------------
# operation marker tests
# ------------------------------

def test_operation_marker_bare_and_with_arguments():
    @operation
    async def plain() -> dict:
        return {}

    @operation(name="renamed", description="Does it.", mutates_state=True)
    async def configured() -> dict:
        return {}

    plain_marker = get_operation_marker(plain)
    assert plain_marker.name is None and plain_marker.mutates_state is False

    marker = get_operation_marker(configured)
    assert (marker.name, marker.description, marker.mutates_state) == ("renamed", "Does it.", True)


def test_operation_marker_leaves_function_callable(event_loop):
    @operation
    async def direct() -> dict:
        return {"direct": True}

    assert event_loop.run_until_complete(direct()) == {"direct": True}
    assert get_operation_marker(lambda: None) is None
