"""Environment configuration and validation."""

import os
from pathlib import Path
from typing import Optional

from ..constants import DEFAULT_CHANNEL

import logging
logger = logging.getLogger(__name__)


_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(name: str, default: bool = False) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in _TRUTHY


def _env_dir(name: str, fallback: str) -> str:
    raw = (os.getenv(name) or "").strip() or fallback
    return str(Path(raw).expanduser().resolve())


def get_env_config(
    headless: Optional[bool] = None,
    channel: Optional[str] = None,
) -> dict:
    """
    Read environment variables into the launch configuration dict.

    Optional:   MCP_PLAYWRIGHT_HEADLESS (default false)
                MCP_PLAYWRIGHT_CHANNEL (default 'msedge'; empty = bundled Chromium)
                MCP_PLAYWRIGHT_DOWNLOADS_DIR (default ./downloads)
                MCP_PLAYWRIGHT_VIDEOS_DIR (default ./videos)
                MCP_PLAYWRIGHT_SHOTS_DIR (default ./shots)
                MCP_PLAYWRIGHT_TRACES_DIR (default ./traces)

    Explicit headless/channel arguments (from the command line) win over the
    environment. Directories are resolved to absolute paths but not created;
    the session creates them when it launches.
    """
    if headless is None:
        headless = _env_flag("MCP_PLAYWRIGHT_HEADLESS", False)

    if channel is None:
        env_channel = os.getenv("MCP_PLAYWRIGHT_CHANNEL")
        channel = DEFAULT_CHANNEL if env_channel is None else env_channel.strip()
    channel = channel or None

    return {
        "headless": bool(headless),
        "channel": channel,
        "downloads_dir": _env_dir("MCP_PLAYWRIGHT_DOWNLOADS_DIR", "./downloads"),
        "videos_dir": _env_dir("MCP_PLAYWRIGHT_VIDEOS_DIR", "./videos"),
        "shots_dir": _env_dir("MCP_PLAYWRIGHT_SHOTS_DIR", "./shots"),
        "traces_dir": _env_dir("MCP_PLAYWRIGHT_TRACES_DIR", "./traces"),
    }


def get_logging_config() -> dict:
    """Logging level and optional log file, read from the environment."""
    level = (os.getenv("MCP_PLAYWRIGHT_LOG_LEVEL") or "INFO").strip().upper()
    log_file = (os.getenv("MCP_PLAYWRIGHT_LOG_FILE") or "").strip() or None
    return {"level": level, "log_file": log_file}
