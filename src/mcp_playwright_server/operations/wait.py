"""
Waiting operations: selectors, text, fixed delays and dialogs.

A timeout or a caller cancellation is an expected outcome for these
operations, so both are reported as result fields rather than failures.
"""

import asyncio
import logging
from typing import Annotated, Any, Dict, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..cancellation import CancellationToken, run_cancellable
from ..constants import DEFAULT_WAIT_TIMEOUT_MS
from ..decorators.operation import operation
from ..errors import OperationCancelled
from ..session.manager import SessionManager

logger = logging.getLogger(__name__)


_SELECTOR_STATES = ("attached", "visible", "hidden", "detached")

_TEXT_PRESENT_JS = "(expected) => !!document.body && document.body.innerText.includes(expected)"
_TEXT_ABSENT_JS = "(expected) => !document.body || !document.body.innerText.includes(expected)"


@operation(description="Wait for selector to be attached/visible/hidden/detached.")
async def wait_for_selector(
    session: SessionManager,
    cancellation: CancellationToken,
    selector: Annotated[str, "Selector"],
    state: Annotated[Optional[str], "State: attached|visible|hidden|detached"] = "visible",
    timeout_ms: Annotated[Optional[int], "Timeout ms (default 15000)"] = DEFAULT_WAIT_TIMEOUT_MS,
) -> Dict[str, Any]:
    target_state = (state or "").lower()
    if target_state not in _SELECTOR_STATES:
        target_state = "visible"

    page = await session.acquire_page()
    try:
        await run_cancellable(
            page.wait_for_selector(selector, state=target_state, timeout=timeout_ms),
            cancellation,
        )
    except PlaywrightTimeoutError:
        return {"waited": False, "selector": selector, "state": target_state, "timeout": True}
    except OperationCancelled:
        return {"waited": False, "selector": selector, "state": target_state, "cancelled": True}

    return {"waited": selector, "state": target_state}


@operation(description="Wait for text to appear/disappear or for a specific time.")
async def wait_for(
    session: SessionManager,
    cancellation: CancellationToken,
    text: Annotated[Optional[str], "Text to appear"] = None,
    text_gone: Annotated[Optional[str], "Text to disappear"] = None,
    time_ms: Annotated[Optional[int], "Wait this many ms regardless of text"] = None,
    timeout_ms: Annotated[Optional[int], "Timeout ms for text waits (default 15000)"] = DEFAULT_WAIT_TIMEOUT_MS,
) -> Dict[str, Any]:
    """
    Steps run in order: fixed delay, then text appearing, then text
    disappearing. The first step that times out or is cancelled ends the wait.
    """
    page = await session.acquire_page()
    result: Dict[str, Any] = {"waited": True, "appeared": None, "disappeared": None, "time_ms": time_ms}

    try:
        if time_ms and time_ms > 0:
            await run_cancellable(asyncio.sleep(time_ms / 1000), cancellation)

        if text and text.strip():
            await run_cancellable(
                page.wait_for_function(_TEXT_PRESENT_JS, arg=text, timeout=timeout_ms),
                cancellation,
            )
            result["appeared"] = text

        if text_gone and text_gone.strip():
            await run_cancellable(
                page.wait_for_function(_TEXT_ABSENT_JS, arg=text_gone, timeout=timeout_ms),
                cancellation,
            )
            result["disappeared"] = text_gone
    except PlaywrightTimeoutError:
        result.update(waited=False, timeout=True)
    except OperationCancelled:
        result.update(waited=False, cancelled=True)

    return result


@operation(description="Handle the next dialog by accepting or dismissing it.", mutates_state=True)
async def handle_dialog(
    session: SessionManager,
    cancellation: CancellationToken,
    accept: Annotated[bool, "Accept dialog (true) or dismiss (false)"] = True,
    prompt_text: Annotated[Optional[str], "Prompt text when accepting"] = None,
    timeout_ms: Annotated[Optional[int], "Timeout ms (default 15000)"] = DEFAULT_WAIT_TIMEOUT_MS,
) -> Dict[str, Any]:
    """
    Resolve the next dialog raised by the active page.

    Only the first dialog after the call is handled; the listener is removed
    as soon as it fires and again on exit, whatever the outcome.
    """
    page = await session.acquire_page()
    outcome = asyncio.get_running_loop().create_future()

    async def on_dialog(dialog):
        page.remove_listener("dialog", on_dialog)
        try:
            if accept:
                await dialog.accept(prompt_text)
            else:
                await dialog.dismiss()
        except Exception as e:
            if not outcome.done():
                outcome.set_exception(e)
            return
        if not outcome.done():
            outcome.set_result({
                "type": dialog.type,
                "message": dialog.message,
                "default_value": dialog.default_value,
            })

    page.on("dialog", on_dialog)
    timeout = timeout_ms / 1000 if timeout_ms and timeout_ms > 0 else None
    try:
        details = await run_cancellable(outcome, cancellation, timeout=timeout)
    except asyncio.TimeoutError:
        return {"handled": False, "timeout": True}
    except OperationCancelled:
        return {"handled": False, "cancelled": True}
    finally:
        try:
            page.remove_listener("dialog", on_dialog)
        except Exception as e:
            logger.debug("Dialog listener already removed: %s", e)

    return {"handled": True, "accepted": accept, **details}


__all__ = ["wait_for_selector", "wait_for", "handle_dialog"]
