"""Shared automation session: lifecycle, tabs and page event logs."""

from .events import ConsoleLog, ConsoleMessageEntry, NetworkLog, NetworkRequestEntry
from .manager import SessionManager, SessionState, start_playwright

__all__ = [
    "SessionManager",
    "SessionState",
    "start_playwright",
    "ConsoleLog",
    "ConsoleMessageEntry",
    "NetworkLog",
    "NetworkRequestEntry",
]
