# mcp_playwright_server/decorators/envelope.py

import os
import json
import asyncio
import inspect
import logging
import functools
from typing import Any, Callable, Dict, Optional


__all__ = [
    "tool_envelope",
    "success_envelope",
    "failure_envelope",
    "error_message",
    "payload_to_text",
]


logger = logging.getLogger(__name__)


def success_envelope(payload: Any) -> Dict[str, Any]:
    return {"ok": True, "payload": payload}


def failure_envelope(message: str) -> Dict[str, Any]:
    return {"ok": False, "message": message}


def error_message(err: BaseException) -> str:
    """The exception's message, or its class name when the message is empty."""
    message = str(err)
    return message if message else err.__class__.__name__


def payload_to_text(value: Any) -> str:
    """
    Serialize a payload for a text transport.

    Strings pass through unchanged, bytes are decoded, everything else goes
    through json.dumps with a best-effort fallback for engine objects.
    """
    if value is None:
        return "null"
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value.decode("utf-8", "replace")
    return json.dumps(value, ensure_ascii=False, default=lambda o: getattr(o, "__dict__", repr(o)))


def tool_envelope(func: Callable, name: Optional[str] = None):
    """
    Convert the outcome of an async callable into a response envelope.

      - On success: {"ok": True, "payload": <return value, unchanged>}.
      - On error: {"ok": False, "message": <exception message>}. Never a traceback.
      - asyncio.CancelledError is re-raised to keep cooperative cancellation intact.
    `name` labels failures in the log; defaults to the function name.
    Environment:
      - Set MCP_PLAYWRIGHT_LOG_TRACEBACKS=0 to log failures without exc_info.
    """
    if not inspect.iscoroutinefunction(func):
        raise TypeError(f"tool_envelope expects an async function, got {func!r}")

    label = name or func.__name__
    log_tb = os.getenv("MCP_PLAYWRIGHT_LOG_TRACEBACKS", "1") not in ("0", "false", "False")

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            result = await func(*args, **kwargs)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                "%s failed: %s: %s", label, e.__class__.__name__, e,
                exc_info=log_tb,
            )
            return failure_envelope(error_message(e))
        return success_envelope(result)

    return wrapper
