"""Browser lifecycle, installation, tracing and diagnostics operations."""

import asyncio
import logging
import sys
from typing import Annotated, Any, Dict, Optional

from ..config import default_trace_path, resolve_output_path
from ..decorators.operation import operation
from ..session.manager import SessionManager
from ..utils.diagnostics import collect_diagnostics

logger = logging.getLogger(__name__)


@operation(description="Close and dispose Playwright browser resources.", mutates_state=True)
async def close(session: SessionManager) -> Dict[str, Any]:
    await session.close()
    return {"closed": True}


@operation(description="(Re)launch browser and open a fresh page.", mutates_state=True)
async def relaunch(session: SessionManager) -> Dict[str, Any]:
    await session.relaunch()
    return {
        "relaunched": True,
        "headless": session.headless,
        "engine": "chromium" if session.is_chromium else "unknown",
    }


@operation(description="Install Playwright browsers using bundled CLI.", mutates_state=True)
async def install(
    browser: Annotated[Optional[str], "Optional browser name, e.g. chromium"] = None,
) -> Dict[str, Any]:
    """
    Run `python -m playwright install [browser]` in a subprocess.

    The CLI output is captured and logged; stdout belongs to the MCP stream.
    """
    args = [sys.executable, "-m", "playwright", "install"]
    if browser and browser.strip():
        args.append(browser.strip())

    logger.info("Running %s", " ".join(args[1:]))
    proc = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    output, _ = await proc.communicate()
    if output:
        logger.info("playwright install output:\n%s", output.decode("utf-8", "replace").rstrip())

    return {"success": proc.returncode == 0, "exit_code": proc.returncode, "browser": browser}


@operation(description="Start Playwright tracing (snapshots, screenshots, sources).", mutates_state=True)
async def start_tracing(session: SessionManager) -> Dict[str, Any]:
    context = await session.acquire_context()
    if session.tracing_active:
        return {"tracing": True, "already_started": True}

    await context.tracing.start(screenshots=True, snapshots=True, sources=True)
    session.tracing_active = True
    return {"tracing": True}


@operation(description="Stop tracing and save to a .zip file.", mutates_state=True)
async def stop_tracing(
    session: SessionManager,
    output_path: Annotated[
        Optional[str],
        "Output path for trace .zip (default ./traces/trace-<timestamp>.zip)",
    ] = None,
) -> Dict[str, Any]:
    context = await session.acquire_context()
    if not session.tracing_active:
        return {"tracing": False, "already_stopped": True}

    traces_dir = session.config["traces_dir"]
    if output_path and output_path.strip():
        path = resolve_output_path(output_path, traces_dir)
    else:
        path = resolve_output_path(default_trace_path(traces_dir), traces_dir)

    await context.tracing.stop(path=path)
    session.tracing_active = False
    return {"tracing": False, "path": path}


@operation(description="Collect session, engine and host diagnostics.")
async def get_debug_info(session: SessionManager) -> Dict[str, Any]:
    """Does not launch the browser; reports whatever state the session is in."""
    return collect_diagnostics(session)


__all__ = [
    "close",
    "relaunch",
    "install",
    "start_tracing",
    "stop_tracing",
    "get_debug_info",
]
