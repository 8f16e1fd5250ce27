"""Page information operations: text, script evaluation, event logs, viewport and accessibility."""

from typing import Annotated, Any, Dict, Optional

from ..constants import DEFAULT_ACTION_TIMEOUT_MS
from ..decorators.operation import operation
from ..session.manager import SessionManager
from .helpers import wait_for_locator


@operation(description="Get innerText from the first matched element.")
async def inner_text(
    session: SessionManager,
    selector: Annotated[str, "Selector"],
    timeout_ms: Annotated[Optional[int], "Timeout ms (default 10000)"] = DEFAULT_ACTION_TIMEOUT_MS,
) -> Dict[str, Any]:
    locator = await wait_for_locator(session, selector, timeout_ms)
    return {"selector": selector, "text": await locator.inner_text()}


@operation(
    name="eval",
    description="Evaluate JavaScript in page and return JSON-serializable result.",
    mutates_state=True,
)
async def evaluate(
    session: SessionManager,
    js_expression: Annotated[str, "JS expression: must return JSON-serializable value"],
) -> Dict[str, Any]:
    page = await session.acquire_page()
    return {"result": await page.evaluate(js_expression)}


@operation(description="Get captured console messages since the current page was opened/switch.")
async def console_messages(session: SessionManager) -> Dict[str, Any]:
    return {"messages": await session.console_messages()}


@operation(description="List captured network requests since the current page was opened/switch.")
async def network_requests(session: SessionManager) -> Dict[str, Any]:
    return {"requests": await session.network_requests()}


@operation(description="Resize browser viewport.", mutates_state=True)
async def resize(
    session: SessionManager,
    width: Annotated[int, "Viewport width"],
    height: Annotated[int, "Viewport height"],
) -> Dict[str, Any]:
    page = await session.acquire_page()
    await page.set_viewport_size({"width": width, "height": height})
    return {"width": width, "height": height}


@operation(description="Capture an accessibility snapshot of the page.")
async def snapshot(session: SessionManager) -> Dict[str, Any]:
    """The ARIA tree of the whole document, as Playwright's YAML rendering."""
    page = await session.acquire_page()
    return {"snapshot": await page.locator(":root").aria_snapshot()}


__all__ = [
    "inner_text",
    "evaluate",
    "console_messages",
    "network_requests",
    "resize",
    "snapshot",
]
