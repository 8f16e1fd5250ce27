# tests/tests_operations/test_operations.py
import asyncio
from pathlib import Path
from types import SimpleNamespace

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from _fakes import FakeConsoleMessage, FakeDialog, FakeRequest, FakeResponse

from mcp_playwright_server.cancellation import CancellationToken
from mcp_playwright_server.operations import PROVIDER_MODULES
from mcp_playwright_server.registry import Dispatcher, build_catalog
from mcp_playwright_server.session import SessionState


@pytest.fixture(scope="module")
def catalog():
    return build_catalog(PROVIDER_MODULES)


@pytest.fixture
def env(catalog, session_and_engine, event_loop):
    session, engine = session_and_engine
    dispatcher = Dispatcher(catalog, session=session)

    def call(name, arguments=None, **kwargs):
        return event_loop.run_until_complete(dispatcher.invoke(name, arguments, **kwargs))

    def page():
        return event_loop.run_until_complete(session.acquire_page())

    return SimpleNamespace(session=session, engine=engine, dispatcher=dispatcher, call=call, page=page)


def ok(result):
    assert result["ok"] is True, result
    return result["payload"]


def failed(result):
    assert result["ok"] is False, result
    return result["message"]


# ------------------------------
# Lazy launch and coercion through the dispatcher
# ------------------------------

def test_first_click_launches_the_browser(env):
    assert env.engine.starts == 0
    result = env.call("click", {"selector": "#go"})
    assert result == {"ok": True, "payload": {"clicked": "#go"}}
    assert len(env.engine.launches) == 1
    assert ("click", "#go", 10000) in env.page().calls


def test_resize_accepts_string_numbers(env):
    assert ok(env.call("resize", {"width": "800", "height": 600})) == {"width": 800, "height": 600}
    assert ("set_viewport_size", {"width": 800, "height": 600}) in env.page().calls


def test_bad_argument_never_launches(env):
    assert failed(env.call("resize", {"width": "abc", "height": 600})) == "width must be an integer"
    assert failed(env.call("click", {})) == 'Missing required argument "selector"'
    assert env.engine.starts == 0


# ------------------------------
# Navigation and tabs
# ------------------------------

def test_goto_reports_response(env):
    payload = ok(env.call("goto", {"url": "https://example.test/page"}))
    assert payload == {
        "url": "https://example.test/page",
        "status": 200,
        "ok": True,
        "request_url": "https://example.test/page",
    }
    assert ("goto", "https://example.test/page", 30000, "load") in env.page().calls


def test_go_back_without_history(env):
    assert ok(env.call("go_back")) == {"url": "about:blank", "status": None, "ok": None}
    assert ("go_back", 15000, "load") in env.page().calls


def test_get_url(env):
    env.page().url = "https://example.test/here"
    assert ok(env.call("get_url")) == {"url": "https://example.test/here"}


def test_tabs_actions(env):
    listed = ok(env.call("tabs", {"action": "list"}))
    assert listed == {"tabs": [{"index": 0, "url": "about:blank", "is_closed": False, "is_active": True}]}

    assert ok(env.call("tabs", {"action": "NEW"})) == {"created": 2, "active_index": 1}
    assert ok(env.call("tabs", {"action": "switch", "index": "0"})) == {"active_index": 0, "url": "about:blank"}
    assert ok(env.call("tabs", {"action": "close", "index": 0})) == {"closed": 0, "active_index": 0}
    assert len(env.session.context.pages) == 1


def test_tabs_errors(env):
    assert failed(env.call("tabs", {"action": "explode"})) == "Unsupported action 'explode'."
    assert failed(env.call("tabs", {"action": "switch"})) == "Index required for switch action."
    assert failed(env.call("tabs", {"action": "close", "index": 9})) == "Tab index 9 out of range (open tabs: 1)"
    assert failed(env.call("tabs", {})) == 'Missing required argument "action"'


# ------------------------------
# Interaction
# ------------------------------

def test_hover_and_drag(env):
    assert ok(env.call("hover", {"selector": "#menu"})) == {"hovered": "#menu"}
    assert ok(env.call("drag_and_drop", {"source_selector": "#a", "target_selector": "#b"})) == {
        "dragged": "#a",
        "dropped_on": "#b",
    }
    assert ("drag_and_drop", "#a", "#b", 15000) in env.page().calls


def test_fill_waits_for_the_element(env):
    assert ok(env.call("fill", {"selector": "#name", "text": "Ada"})) == {"filled": "#name", "length": 3}
    calls = env.page().calls
    assert calls.index(("locator.wait_for", "#name", 10000)) < calls.index(("locator.fill", "#name", "Ada"))


def test_type_with_submit(env):
    payload = ok(env.call("type", {"selector": "#q", "text": "hello", "submit": "true", "delay_ms": 5}))
    assert payload == {"typed": "#q", "length": 5, "submit": True}
    calls = env.page().calls
    assert ("locator.press_sequentially", "#q", "hello", 5.0) in calls
    assert calls[-1] == ("locator.press", "#q", "Enter")


def test_press_key(env):
    assert ok(env.call("press_key", {"key": "Control+S"})) == {"pressed": "Control+S", "delay_ms": None}
    assert ("keyboard.press", "Control+S", None) in env.page().calls


def test_select_option(env):
    assert ok(env.call("select_option", {"selector": "#s", "values": ["a", "b"]})) == {
        "selector": "#s",
        "selected": ["a", "b"],
    }
    assert ok(env.call("select_option", {"selector": "#s", "values": "only"}))["selected"] == ["only"]
    assert failed(env.call("select_option", {"selector": "#s", "values": [1]})) == "values must be a list of strings"
    assert failed(env.call("select_option", {"selector": "#s", "values": []})) == (
        "At least one entry must be provided in values."
    )


def test_upload_files(env, tmp_path):
    existing = tmp_path / "doc.txt"
    existing.write_text("x")

    payload = ok(env.call("upload_files", {"selector": "#f", "paths": [str(existing)]}))
    assert payload == {"selector": "#f", "count": 1}
    assert ("locator.set_input_files", "#f", [str(existing.resolve())]) in env.page().calls

    message = failed(env.call("upload_files", {"selector": "#f", "paths": [str(tmp_path / "missing.txt")]}))
    assert message.startswith("File not found: ")


def test_fill_form(env):
    fields = [
        {"selector": "#first", "value": "Ada"},
        {"selector": "#country", "action": "select", "values": ["uk"]},
        {"selector": "#empty"},
    ]
    payload = ok(env.call("fill_form", {"fields": fields}))
    assert payload == {
        "count": 3,
        "results": [
            {"selector": "#first", "action": "fill", "length": 3},
            {"selector": "#country", "action": "select", "selected": ["uk"]},
            {"selector": "#empty", "action": "fill", "length": 0},
        ],
    }
    assert failed(env.call("fill_form", {"fields": []})) == "At least one field must be provided."
    assert failed(env.call("fill_form", {"fields": [{"value": "x"}]})) == (
        "fields[0].selector must be a non-empty string"
    )


def test_mouse_operations(env):
    assert ok(env.call("mouse_move", {"x": "10.5", "y": 20})) == {"x": 10.5, "y": 20.0, "steps": None}
    assert ok(env.call("mouse_click", {"x": 1, "y": 2, "button": "bogus"})) == {
        "x": 1.0, "y": 2.0, "button": "bogus", "click_count": 1,
    }
    assert ("mouse.click", 1.0, 2.0, "left", 1) in env.page().calls

    payload = ok(env.call("mouse_drag", {"start_x": 0, "start_y": 0, "end_x": 5, "end_y": 6}))
    assert payload == {"start_x": 0.0, "start_y": 0.0, "end_x": 5.0, "end_y": 6.0, "steps": 25}
    assert env.page().calls[-4:] == [
        ("mouse.move", 0.0, 0.0, None),
        ("mouse.down",),
        ("mouse.move", 5.0, 6.0, 25),
        ("mouse.up",),
    ]


# ------------------------------
# Information
# ------------------------------

def test_inner_text_and_eval(env):
    page = env.page()
    page.texts["h1"] = "Title"
    page.evaluate_result = {"answer": 42}

    assert ok(env.call("inner_text", {"selector": "h1"})) == {"selector": "h1", "text": "Title"}
    assert ok(env.call("eval", {"js_expression": "() => ({answer: 42})"})) == {"result": {"answer": 42}}


def test_console_and_network_operations(env):
    page = env.page()
    request = FakeRequest("https://example.test/api", "POST", "fetch")
    page.emit("console", FakeConsoleMessage("info", "ready"))
    page.emit("request", request)
    page.emit("response", FakeResponse(request, status=201))

    messages = ok(env.call("console_messages"))["messages"]
    assert [(m["type"], m["text"]) for m in messages] == [("info", "ready")]

    requests = ok(env.call("network_requests"))["requests"]
    assert [(r["method"], r["url"], r["status"]) for r in requests] == [
        ("POST", "https://example.test/api", 201),
    ]


def test_snapshot(env):
    assert ok(env.call("snapshot"))["snapshot"].startswith("- document")


# ------------------------------
# Media
# ------------------------------

def test_screenshot_relative_path_lands_in_shots_dir(env, tmp_path):
    payload = ok(env.call("screenshot", {"output_path": "sub/a.png", "full_page": "true"}))
    expected = str((tmp_path / "shots" / "sub" / "a.png").resolve())
    assert payload == {"path": expected, "bytes": len(b"page-png"), "full_page": True, "selector": None}
    assert Path(expected).exists()


def test_screenshot_of_element_and_clip(env, tmp_path):
    payload = ok(env.call("screenshot", {"output_path": "el.png", "selector": "#logo"}))
    assert payload["bytes"] == len(b"element-png")
    assert payload["selector"] == "#logo"

    clip = {"x": 0, "y": "0", "width": 100, "height": 50}
    ok(env.call("screenshot", {"output_path": str(tmp_path / "clip.png"), "clip": clip}))
    last = env.page().calls[-1]
    assert last[0] == "screenshot"
    assert last[4] == {"x": 0.0, "y": 0.0, "width": 100.0, "height": 50.0}


def test_pdf(env):
    payload = ok(env.call("pdf", {"output_path": "page.pdf"}))
    assert payload["format"] == "A4"
    assert payload["print_background"] is True
    assert payload["bytes"] == len(b"%PDF-1.4")

    env.session.is_chromium = False
    assert failed(env.call("pdf", {"output_path": "page.pdf"})) == "PDF export is only supported in Chromium."


# ------------------------------
# Waits and dialogs
# ------------------------------

def test_wait_for_selector_states(env):
    assert ok(env.call("wait_for_selector", {"selector": "#x", "state": "HIDDEN"})) == {
        "waited": "#x",
        "state": "hidden",
    }
    assert ok(env.call("wait_for_selector", {"selector": "#x", "state": "sideways"}))["state"] == "visible"


def test_wait_for_selector_timeout_is_a_result(env):
    env.page().wait_error = PlaywrightTimeoutError("Timeout 10ms exceeded.")
    assert ok(env.call("wait_for_selector", {"selector": "#x", "timeout_ms": 10})) == {
        "waited": False,
        "selector": "#x",
        "state": "visible",
        "timeout": True,
    }


def test_wait_for_text_and_delay(env):
    payload = ok(env.call("wait_for", {"text": "Welcome", "text_gone": "Loading", "time_ms": 1}))
    assert payload == {"waited": True, "appeared": "Welcome", "disappeared": "Loading", "time_ms": 1}


def test_wait_for_cancelled_is_a_result(env, event_loop):
    env.page().wait_forever = True
    token = CancellationToken()
    event_loop.call_later(0.01, token.cancel)

    payload = ok(env.call("wait_for", {"text": "never"}, cancellation=token))
    assert payload["waited"] is False
    assert payload["cancelled"] is True
    assert payload["appeared"] is None


def test_handle_dialog_accepts_next_dialog(env, event_loop):
    page = env.page()
    dialog = FakeDialog("prompt", "Name?", "anon")

    async def scenario():
        async def fire():
            while page.listener_count("dialog") == 0:
                await asyncio.sleep(0)
            page.emit("dialog", dialog)

        firing = asyncio.ensure_future(fire())
        result = await env.dispatcher.invoke("handle_dialog", {"prompt_text": "Bob"})
        await firing
        return result

    payload = ok(event_loop.run_until_complete(scenario()))
    assert payload == {
        "handled": True,
        "accepted": True,
        "type": "prompt",
        "message": "Name?",
        "default_value": "anon",
    }
    assert dialog.accepted_with == "Bob"
    assert page.listener_count("dialog") == 0


def test_handle_dialog_timeout_and_cancel(env, event_loop):
    page = env.page()
    assert ok(env.call("handle_dialog", {"timeout_ms": 10})) == {"handled": False, "timeout": True}
    assert page.listener_count("dialog") == 0

    token = CancellationToken()
    event_loop.call_later(0.01, token.cancel)
    assert ok(env.call("handle_dialog", {"accept": False}, cancellation=token)) == {
        "handled": False,
        "cancelled": True,
    }
    assert page.listener_count("dialog") == 0


# ------------------------------
# Browser lifecycle, tracing, install, diagnostics
# ------------------------------

def test_tracing_round_trip(env, tmp_path):
    assert ok(env.call("stop_tracing")) == {"tracing": False, "already_stopped": True}
    assert ok(env.call("start_tracing")) == {"tracing": True}
    assert ok(env.call("start_tracing")) == {"tracing": True, "already_started": True}
    assert env.session.context.tracing.started == [{"screenshots": True, "snapshots": True, "sources": True}]

    payload = ok(env.call("stop_tracing", {"output_path": "run.zip"}))
    expected = str((tmp_path / "traces" / "run.zip").resolve())
    assert payload == {"tracing": False, "path": expected}
    assert Path(expected).exists()
    assert env.session.tracing_active is False


def test_tracing_can_restart_after_context_replacement(env):
    ok(env.call("start_tracing"))
    page = env.page()
    old_context = env.session.context

    async def refuse_new_page():
        raise RuntimeError("Target page, context or browser has been closed")

    env.session.browser.connected = False
    page._closed = True
    old_context.new_page = refuse_new_page

    assert ok(env.call("start_tracing")) == {"tracing": True}
    assert env.session.context is not old_context
    assert len(env.session.context.tracing.started) == 1
    assert ok(env.call("stop_tracing", {"output_path": "after.zip"}))["tracing"] is False


def test_stop_tracing_default_path(env, tmp_path):
    ok(env.call("start_tracing"))
    path = Path(ok(env.call("stop_tracing"))["path"])
    assert path.parent == (tmp_path / "traces").resolve()
    assert path.name.startswith("trace-") and path.suffix == ".zip"


def test_close_and_relaunch(env):
    env.page()
    assert ok(env.call("close")) == {"closed": True}
    assert env.session.state is SessionState.UNINITIALIZED

    assert ok(env.call("relaunch")) == {"relaunched": True, "headless": True, "engine": "chromium"}
    assert env.session.state is SessionState.READY
    assert len(env.engine.launches) == 2


def test_get_debug_info_does_not_launch(env):
    payload = ok(env.call("get_debug_info"))
    assert payload["session_state"] == "uninitialized"
    assert payload["launch_count"] == 0
    assert "Session state     : uninitialized" in payload["summary"]
    assert env.engine.starts == 0


def test_install_runs_the_playwright_cli(env, monkeypatch):
    captured = []

    class FakeProcess:
        returncode = 0

        async def communicate(self):
            return b"Downloading Chromium...", None

    async def fake_exec(*args, **kwargs):
        captured.append((args, kwargs))
        return FakeProcess()

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)

    payload = ok(env.call("install", {"browser": "chromium"}))
    assert payload == {"success": True, "exit_code": 0, "browser": "chromium"}
    args, kwargs = captured[0]
    assert args[1:] == ("-m", "playwright", "install", "chromium")
    assert kwargs["stdout"] is asyncio.subprocess.PIPE
    assert env.engine.starts == 0
