"""Screenshot and PDF capture operations."""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Annotated, Any, Dict, Optional

from ..config import resolve_output_path
from ..constants import DEFAULT_ELEMENT_SCREENSHOT_TIMEOUT_MS
from ..decorators.operation import operation
from ..errors import EngineOperationError
from ..session.manager import SessionManager
from .helpers import wait_for_locator


@dataclass
class ClipRegion:
    """Page area to capture, in CSS pixels."""
    x: float
    y: float
    width: float
    height: float


def _file_size(path: str) -> int:
    target = Path(path)
    return target.stat().st_size if target.exists() else 0


@operation(description="Take a screenshot of the page or a selector.")
async def screenshot(
    session: SessionManager,
    output_path: Annotated[str, "Output path (PNG/JPEG). If relative, saved under ./shots"],
    selector: Annotated[Optional[str], "Optional selector to clip to element"] = None,
    full_page: Annotated[bool, "Full page (ignored when selector provided)"] = False,
    quality: Annotated[Optional[int], "Quality 0-100 for JPEG"] = None,
    clip: Annotated[Optional[ClipRegion], "Page region {x, y, width, height} (ignored when selector provided)"] = None,
) -> Dict[str, Any]:
    page = await session.acquire_page()
    path = resolve_output_path(output_path, session.config["shots_dir"])

    if selector and selector.strip():
        locator = await wait_for_locator(session, selector, DEFAULT_ELEMENT_SCREENSHOT_TIMEOUT_MS)
        await locator.screenshot(path=path, timeout=DEFAULT_ELEMENT_SCREENSHOT_TIMEOUT_MS, quality=quality)
    else:
        options: Dict[str, Any] = {"path": path, "full_page": full_page, "quality": quality}
        if clip is not None:
            options["clip"] = asdict(clip)
        await page.screenshot(**options)

    return {"path": path, "bytes": _file_size(path), "full_page": full_page, "selector": selector}


@operation(description="Export current page as PDF (Chromium only).")
async def pdf(
    session: SessionManager,
    output_path: Annotated[str, "Output path (*.pdf). If relative, saved under ./shots"],
    format: Annotated[Optional[str], "Paper format: A4/Letter... (optional)"] = "A4",
    print_background: Annotated[bool, "Print background"] = True,
) -> Dict[str, Any]:
    page = await session.acquire_page()
    if not session.is_chromium:
        raise EngineOperationError("PDF export is only supported in Chromium.")

    path = resolve_output_path(output_path, session.config["shots_dir"])
    await page.pdf(path=path, format=format, print_background=print_background)
    return {"path": path, "bytes": _file_size(path), "format": format, "print_background": print_background}


__all__ = ["ClipRegion", "screenshot", "pdf"]
