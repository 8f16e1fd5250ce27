"""Navigation and tab management operations."""

from typing import Annotated, Any, Dict, Optional

from ..constants import DEFAULT_HISTORY_TIMEOUT_MS, DEFAULT_NAVIGATION_TIMEOUT_MS
from ..decorators.operation import operation
from ..session.manager import SessionManager


def _response_summary(page, response) -> Dict[str, Any]:
    return {
        "url": page.url,
        "status": response.status if response is not None else None,
        "ok": response.ok if response is not None else None,
    }


@operation(description="Navigate to a URL and wait for 'load' state.", mutates_state=True)
async def goto(
    session: SessionManager,
    url: Annotated[str, "URL to navigate to"],
    timeout_ms: Annotated[Optional[int], "Timeout ms (default 30000)"] = DEFAULT_NAVIGATION_TIMEOUT_MS,
) -> Dict[str, Any]:
    page = await session.acquire_page()
    response = await page.goto(url, timeout=timeout_ms, wait_until="load")
    result = _response_summary(page, response)
    result["request_url"] = response.request.url if response is not None else None
    return result


@operation(description="Go back in browser history if possible.", mutates_state=True)
async def go_back(
    session: SessionManager,
    timeout_ms: Annotated[Optional[int], "Timeout ms (default 15000)"] = DEFAULT_HISTORY_TIMEOUT_MS,
) -> Dict[str, Any]:
    page = await session.acquire_page()
    response = await page.go_back(timeout=timeout_ms, wait_until="load")
    return _response_summary(page, response)


@operation(description="Get current page URL.")
async def get_url(session: SessionManager) -> Dict[str, Any]:
    page = await session.acquire_page()
    return {"url": page.url}


@operation(description="Manage tabs: list, create, close or switch.", mutates_state=True)
async def tabs(
    session: SessionManager,
    action: Annotated[str, "Action: list|new|close|switch"],
    index: Annotated[Optional[int], "Zero-based tab index (for close/switch)"] = None,
) -> Dict[str, Any]:
    """
    list   -> {"tabs": [{index, url, is_closed, is_active}, ...]}
    new    -> {"created": <tab count>, "active_index": ...}
    switch -> {"active_index": ..., "url": ...}
    close  -> {"closed": <index>, "active_index": ...}
    """
    verb = (action or "").strip().lower()

    if verb == "list":
        return {"tabs": await session.list_tabs()}
    if verb == "new":
        return await session.new_tab()
    if verb in ("switch", "close"):
        if index is None:
            raise ValueError(f"Index required for {verb} action.")
        if verb == "switch":
            return await session.switch_tab(index)
        return await session.close_tab(index)

    raise ValueError(f"Unsupported action '{action}'.")


__all__ = ["goto", "go_back", "get_url", "tabs"]
