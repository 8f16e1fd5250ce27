"""Diagnostics and debugging information utility functions."""

import os
import sys
import platform
from typing import Any, Dict, List, Optional

import psutil

from ..context import get_session


_BROWSER_PROCESS_HINTS = ("chrome", "chromium", "msedge", "headless_shell", "node", "playwright")


def _playwright_version() -> str:
    try:
        from importlib.metadata import version

        return version("playwright")
    except Exception:
        return "<unknown>"


def _child_processes() -> List[Dict[str, Any]]:
    """Browser and driver processes spawned by this server."""
    children = []
    try:
        descendants = psutil.Process(os.getpid()).children(recursive=True)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return children

    for p in descendants:
        try:
            name = p.name()
            if not any(hint in name.lower() for hint in _BROWSER_PROCESS_HINTS):
                continue
            children.append({
                "pid": p.pid,
                "name": name,
                "rss_mb": round(p.memory_info().rss / (1024 * 1024), 1),
            })
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    return children


def collect_diagnostics(session=None, exc: Optional[Exception] = None) -> Dict[str, Any]:
    """
    Collect diagnostic information about the session, the engine and the host.

    Args:
        session: SessionManager to inspect (if None, uses the global session)
        exc: Exception that occurred (can be None)

    Returns:
        dict with a human-readable "summary" plus structured fields
    """
    if session is None:
        session = get_session()

    config = session.config
    page = session.active_page
    browser_version = "<not launched>"
    if session.browser is not None:
        try:
            browser_version = session.browser.version
        except Exception:
            browser_version = "<unknown>"

    process = psutil.Process(os.getpid())
    memory_mb = round(process.memory_info().rss / (1024 * 1024), 1)

    parts = [
        f"OS                : {platform.system()} {platform.release()}",
        f"Python            : {sys.version.split()[0]}",
        f"Playwright        : {_playwright_version()}",
        f"Channel           : {config.get('channel') or '<bundled chromium>'}",
        f"Headless          : {session.headless}",
        f"Session state     : {session.state.value}",
        f"Browser version   : {browser_version}",
        f"Launch count      : {session.launch_count}",
        f"Tracing active    : {session.tracing_active}",
        f"Server RSS (MB)   : {memory_mb}",
    ]

    if exc:
        parts += [
            "---- ERROR ----",
            f"Error type        : {type(exc).__name__}",
            f"Error message     : {exc}",
        ]

    return {
        "summary": "\n".join(parts),
        "session_state": session.state.value,
        "launch_count": session.launch_count,
        "tracing_active": session.tracing_active,
        "is_chromium": session.is_chromium,
        "active_url": page.url if page is not None and not page.is_closed() else None,
        "console_entries": len(session.console),
        "network_entries": len(session.network),
        "config": {key: config.get(key) for key in sorted(config)},
        "server_process": {"pid": process.pid, "rss_mb": memory_mb},
        "browser_processes": _child_processes(),
    }


__all__ = ["collect_diagnostics"]
