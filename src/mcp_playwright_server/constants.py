"""
Global constants and configuration defaults.
No dependencies - safe to import from anywhere.
"""

import os

# ============================================================================
# Event Log Configuration
# ============================================================================

CONSOLE_BUFFER_LIMIT = int(os.getenv("MCP_CONSOLE_BUFFER_LIMIT", "200"))
"""Maximum console messages kept for the active page (oldest evicted first)."""

NETWORK_BUFFER_LIMIT = int(os.getenv("MCP_NETWORK_BUFFER_LIMIT", "500"))
"""Maximum network requests kept for the active page (oldest evicted first)."""


# ============================================================================
# Browser Context Defaults
# ============================================================================

DEFAULT_VIEWPORT = {"width": 1280, "height": 800}
"""Viewport applied to every fresh browser context."""

DEFAULT_GEOLOCATION = {"latitude": 0, "longitude": 0}
"""Geolocation reported by the context (requires the geolocation permission)."""

DEFAULT_PERMISSIONS = (
    "geolocation",
    "notifications",
    "camera",
    "microphone",
    "clipboard-read",
    "clipboard-write",
    "midi",
    "midi-sysex",
    "background-sync",
    "ambient-light-sensor",
    "accelerometer",
    "gyroscope",
    "magnetometer",
    "payment-handler",
    "storage-access",
    "local-fonts",
)
"""Permissions granted to every fresh context. Unsupported ones are skipped."""

DEFAULT_CHANNEL = "msedge"
"""Chromium distribution channel used when launching."""


# ============================================================================
# Operation Timeouts (milliseconds)
# ============================================================================

DEFAULT_NAVIGATION_TIMEOUT_MS = 30_000
DEFAULT_HISTORY_TIMEOUT_MS = 15_000
DEFAULT_ACTION_TIMEOUT_MS = 10_000
DEFAULT_DRAG_TIMEOUT_MS = 15_000
DEFAULT_WAIT_TIMEOUT_MS = 15_000
DEFAULT_ELEMENT_SCREENSHOT_TIMEOUT_MS = 15_000


__all__ = [
    "CONSOLE_BUFFER_LIMIT",
    "NETWORK_BUFFER_LIMIT",
    "DEFAULT_VIEWPORT",
    "DEFAULT_GEOLOCATION",
    "DEFAULT_PERMISSIONS",
    "DEFAULT_CHANNEL",
    "DEFAULT_NAVIGATION_TIMEOUT_MS",
    "DEFAULT_HISTORY_TIMEOUT_MS",
    "DEFAULT_ACTION_TIMEOUT_MS",
    "DEFAULT_DRAG_TIMEOUT_MS",
    "DEFAULT_WAIT_TIMEOUT_MS",
    "DEFAULT_ELEMENT_SCREENSHOT_TIMEOUT_MS",
]
