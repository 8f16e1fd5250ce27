"""Shared helpers for operation implementations."""

from typing import Any, List, Optional

from ..session.manager import SessionManager


async def wait_for_locator(session: SessionManager, selector: str, timeout_ms: Optional[int]):
    """First element matching `selector` on the active page, once it is attached and visible."""
    page = await session.acquire_page()
    locator = page.locator(selector).first
    await locator.wait_for(timeout=timeout_ms)
    return locator


def string_list(value: Any, name: str) -> List[str]:
    """
    Validate a JSON list of strings.

    A single string is accepted as a one-element list. Empty lists are
    rejected.
    """
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{name} must be a list of strings")
    if not value:
        raise ValueError(f"At least one entry must be provided in {name}.")
    return value


__all__ = ["wait_for_locator", "string_list"]
