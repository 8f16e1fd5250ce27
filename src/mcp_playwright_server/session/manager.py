"""
Lifecycle owner of the single shared Playwright session.

State machine:

    UNINITIALIZED -> LAUNCHING -> READY -> CLOSING -> UNINITIALIZED

The session is created lazily by the first operation that needs a page or a
context (acquire_page / acquire_context) and destroyed only by close().
Operations never keep their own page references across awaits; they ask the
manager again.

Known race:
    Only the launch path is serialized. Business operations (click, fill,
    goto, ...) are not, so an operation that already fetched the active page
    keeps acting on it even if a concurrent tabs switch/close replaces the
    active page in the meantime. Callers are expected to serialize their own
    calls against one session, exactly as with direct Playwright usage.
"""

import asyncio
import enum
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..config import ensure_directories, get_env_config
from ..constants import (
    CONSOLE_BUFFER_LIMIT,
    DEFAULT_GEOLOCATION,
    DEFAULT_PERMISSIONS,
    DEFAULT_VIEWPORT,
    NETWORK_BUFFER_LIMIT,
)
from ..errors import InvalidTabStateError, SessionNotReadyError, TabIndexError
from .events import ConsoleLog, ConsoleMessageEntry, NetworkLog, NetworkRequestEntry

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    LAUNCHING = "launching"
    READY = "ready"
    CLOSING = "closing"


async def start_playwright():
    """Default engine starter: a fresh async Playwright driver."""
    from playwright.async_api import async_playwright

    return await async_playwright().start()


class SessionManager:
    """
    Owns the Playwright driver, browser, context, active page and event logs.

    Attributes:
        config: Launch configuration dict (see config.get_env_config)
        state: Current SessionState
        launch_count: Number of browser processes launched by this manager
        is_chromium: True once a Chromium-family browser has been launched
        tracing_active: Whether context tracing has been started
        console: Console messages captured from the active page
        network: Network requests captured from the active page
    """

    def __init__(
        self,
        config: Optional[dict] = None,
        engine_starter: Optional[Callable[[], Awaitable[Any]]] = None,
        console_limit: int = CONSOLE_BUFFER_LIMIT,
        network_limit: int = NETWORK_BUFFER_LIMIT,
    ):
        self.config = config if config is not None else get_env_config()
        self._engine_starter = engine_starter or start_playwright

        self.state = SessionState.UNINITIALIZED
        self.playwright = None
        self.browser = None
        self.context = None
        self._page = None

        self.is_chromium = False
        self.tracing_active = False
        self.launch_count = 0

        self.console = ConsoleLog(limit=console_limit)
        self.network = NetworkLog(limit=network_limit)

        self._launch_lock: Optional[asyncio.Lock] = None
        self._handlers = {
            "console": self._on_console,
            "request": self._on_request,
            "response": self._on_response,
            "requestfailed": self._on_request_failed,
        }

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def active_page(self):
        return self._page

    @property
    def headless(self) -> bool:
        return bool(self.config.get("headless"))

    def is_ready(self) -> bool:
        return (
            self.state is SessionState.READY
            and self._page is not None
            and not self._page.is_closed()
        )

    def _get_launch_lock(self) -> asyncio.Lock:
        if self._launch_lock is None:
            self._launch_lock = asyncio.Lock()
        return self._launch_lock

    # ------------------------------------------------------------------
    # Acquisition
    # ------------------------------------------------------------------

    async def ensure_ready(self) -> None:
        """
        Make sure a browser, a context and an open active page exist.

        Concurrent callers share one launch: the first one launches under the
        lock, the others wait and then take the fast path.
        """
        if self.is_ready():
            return

        async with self._get_launch_lock():
            if self.is_ready():
                return

            if self.state is SessionState.READY and self.context is not None:
                # The active page went away underneath us (closed by the site
                # or by the user). Reopen under the same context.
                try:
                    page = await self.context.new_page()
                except Exception as e:
                    logger.warning("Could not reopen a page in the existing context (%s); relaunching", e)
                else:
                    logger.info("Active page was closed; opened a replacement page")
                    self.set_active_page(page)
                    return

            self.state = SessionState.LAUNCHING
            try:
                await self._launch()
            except Exception:
                self.state = SessionState.UNINITIALIZED
                logger.exception("Browser launch failed")
                raise
            self.state = SessionState.READY

    async def acquire_page(self):
        await self.ensure_ready()
        if self._page is None:
            raise SessionNotReadyError("Active page not initialized.")
        return self._page

    async def acquire_context(self):
        await self.ensure_ready()
        if self.context is None:
            raise SessionNotReadyError("Browser context not initialized.")
        return self.context

    async def _launch(self) -> None:
        ensure_directories(self.config)

        if self.playwright is None:
            self.playwright = await self._engine_starter()

        if self.browser is None or not self.browser.is_connected():
            launch_options = {"headless": self.headless}
            if self.config.get("channel"):
                launch_options["channel"] = self.config["channel"]
            logger.info("Launching Chromium (%s)", launch_options)
            self.browser = await self.playwright.chromium.launch(**launch_options)
            self.is_chromium = True
            self.launch_count += 1

        if self.context is not None:
            try:
                await self.context.close()
            except Exception as e:
                logger.debug("Ignoring error while closing previous context: %s", e)
            self.context = None
            # Tracing belonged to the discarded context.
            self.tracing_active = False

        if self._page is not None:
            self._detach(self._page)
            self._page = None

        context_options = {
            "accept_downloads": True,
            "viewport": dict(DEFAULT_VIEWPORT),
            "geolocation": dict(DEFAULT_GEOLOCATION),
        }
        if self.config.get("videos_dir"):
            context_options["record_video_dir"] = self.config["videos_dir"]
        self.context = await self.browser.new_context(**context_options)
        await self._grant_default_permissions(self.context)

        page = await self.context.new_page()
        self.set_active_page(page)
        logger.info("Browser session ready (headless=%s)", self.headless)

    async def _grant_default_permissions(self, context) -> None:
        try:
            await context.grant_permissions(list(DEFAULT_PERMISSIONS))
            return
        except Exception as e:
            logger.debug("Bulk permission grant failed (%s); granting one by one", e)

        for permission in DEFAULT_PERMISSIONS:
            try:
                await context.grant_permissions([permission])
            except Exception:
                logger.debug("Permission %r not supported by this browser", permission)

    # ------------------------------------------------------------------
    # Active page and event capture
    # ------------------------------------------------------------------

    def set_active_page(self, page) -> None:
        """
        Make `page` the active page.

        Event logs are scoped to "since this page became active", so both are
        cleared whenever the active page actually changes.
        """
        if page is self._page:
            return

        if self._page is not None:
            self._detach(self._page)

        self.console.clear()
        self.network.clear()

        self._attach(page)
        self._page = page

    def _attach(self, page) -> None:
        for event, handler in self._handlers.items():
            page.on(event, handler)

    def _detach(self, page) -> None:
        for event, handler in self._handlers.items():
            try:
                page.remove_listener(event, handler)
            except Exception as e:
                logger.debug("Could not detach %s listener: %s", event, e)

    def _on_console(self, message) -> None:
        self.console.append(ConsoleMessageEntry.from_message(message))

    def _on_request(self, request) -> None:
        self.network.record_request(request, NetworkRequestEntry.from_request(request))

    def _on_response(self, response) -> None:
        self.network.record_response(response.request, response.status)

    def _on_request_failed(self, request) -> None:
        self.network.record_failure(request, request.failure)

    async def console_messages(self) -> List[Dict[str, Any]]:
        await self.ensure_ready()
        return self.console.snapshot()

    async def network_requests(self) -> List[Dict[str, Any]]:
        await self.ensure_ready()
        return self.network.snapshot()

    # ------------------------------------------------------------------
    # Tabs
    # ------------------------------------------------------------------

    def page_index(self, page) -> int:
        if self.context is None or page is None:
            return -1
        for index, candidate in enumerate(self.context.pages):
            if candidate is page:
                return index
        return -1

    def _tab_at(self, context, index: Optional[int]):
        pages = list(context.pages)
        if index is None or index < 0 or index >= len(pages):
            raise TabIndexError(index, len(pages))
        return pages[index]

    async def list_tabs(self) -> List[Dict[str, Any]]:
        context = await self.acquire_context()
        return [
            {
                "index": index,
                "url": page.url,
                "is_closed": page.is_closed(),
                "is_active": page is self._page,
            }
            for index, page in enumerate(context.pages)
        ]

    async def new_tab(self) -> Dict[str, Any]:
        context = await self.acquire_context()
        page = await context.new_page()
        self.set_active_page(page)
        return {"created": len(context.pages), "active_index": self.page_index(page)}

    async def switch_tab(self, index: Optional[int]) -> Dict[str, Any]:
        context = await self.acquire_context()
        target = self._tab_at(context, index)
        if target.is_closed():
            raise InvalidTabStateError("Cannot switch to a closed tab.")
        self.set_active_page(target)
        logger.info("Switched active tab to index %s", index)
        return {"active_index": index, "url": target.url}

    async def close_tab(self, index: Optional[int]) -> Dict[str, Any]:
        """
        Close the tab at `index`.

        The session never ends up with zero pages: closing the last open tab
        opens a replacement and makes it active. Closing the active tab while
        others remain activates one of the remaining open tabs.
        """
        context = await self.acquire_context()
        target = self._tab_at(context, index)
        was_active = target is self._page
        await target.close()

        remaining = next((page for page in context.pages if not page.is_closed()), None)
        if remaining is None:
            replacement = await context.new_page()
            self.set_active_page(replacement)
            return {"closed": index, "active_index": self.page_index(replacement)}

        if was_active:
            self.set_active_page(remaining)

        return {"closed": index, "active_index": self.page_index(self._page)}

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """
        Best-effort teardown: page, context, browser, then the driver.

        A failure closing one resource is logged and does not stop the rest
        from being released. Always ends in UNINITIALIZED.
        """
        async with self._get_launch_lock():
            self.state = SessionState.CLOSING

            page, self._page = self._page, None
            if page is not None:
                self._detach(page)
                await _close_quietly("page", page.close)

            context, self.context = self.context, None
            if context is not None:
                await _close_quietly("context", context.close)

            browser, self.browser = self.browser, None
            if browser is not None:
                await _close_quietly("browser", browser.close)

            playwright, self.playwright = self.playwright, None
            if playwright is not None:
                await _close_quietly("playwright", playwright.stop)

            self.console.clear()
            self.network.clear()
            self.is_chromium = False
            self.tracing_active = False
            self.state = SessionState.UNINITIALIZED
            logger.info("Browser session closed")

    async def relaunch(self) -> None:
        await self.close()
        await self.ensure_ready()


async def _close_quietly(label: str, closer: Callable[[], Awaitable[Any]]) -> None:
    try:
        await closer()
    except Exception as e:
        logger.warning("Ignoring error while closing %s: %s", label, e)


__all__ = [
    "SessionManager",
    "SessionState",
    "start_playwright",
]
