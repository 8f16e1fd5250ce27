"""
Process-wide session handle.

Exactly one SessionManager exists per process. The Dispatcher receives it by
reference and injects it into every operation that declares a
SessionManager parameter, so tests can hand the Dispatcher a manager built on
a fake engine instead.

Usage:
    from mcp_playwright_server.context import get_session

    session = get_session()
    page = await session.acquire_page()
"""

from typing import Optional

from .session.manager import SessionManager


# ============================================================================
# Global Session Management
# ============================================================================

_global_session: Optional[SessionManager] = None


def get_session() -> SessionManager:
    """
    Get or create the global session manager.

    This is a singleton pattern - all calls return the same instance.
    Creating it does not launch anything; the browser starts on the first
    operation that needs a page. Use reset_session() to drop the singleton
    (mainly for testing).
    """
    global _global_session

    if _global_session is None:
        _global_session = SessionManager()

    return _global_session


def set_session(session: SessionManager) -> SessionManager:
    """Install an explicitly configured manager as the process singleton."""
    global _global_session
    _global_session = session
    return session


def reset_session() -> None:
    """
    Forget the global session manager.

    WARNING: This does not close the browser. In production code, run the
    `close` operation instead of resetting.
    """
    global _global_session
    _global_session = None


__all__ = [
    "get_session",
    "set_session",
    "reset_session",
]
