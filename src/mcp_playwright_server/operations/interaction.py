"""Element, keyboard and mouse interaction operations."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional

from ..constants import DEFAULT_ACTION_TIMEOUT_MS, DEFAULT_DRAG_TIMEOUT_MS
from ..decorators.operation import operation
from ..registry.catalog import JsonValue
from ..session.manager import SessionManager
from .helpers import string_list, wait_for_locator


_MOUSE_BUTTONS = ("left", "middle", "right")


@dataclass
class FormField:
    selector: str
    value: Optional[str] = None
    action: Optional[str] = None
    values: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, position: int) -> "FormField":
        if not isinstance(data, dict):
            raise ValueError(f"fields[{position}] must be an object")
        selector = data.get("selector")
        if not isinstance(selector, str) or not selector:
            raise ValueError(f"fields[{position}].selector must be a non-empty string")
        values = data.get("values") or []
        if not isinstance(values, list):
            raise ValueError(f"fields[{position}].values must be a list of strings")
        value = data.get("value")
        return cls(
            selector=selector,
            value=None if value is None else str(value),
            action=data.get("action"),
            values=[str(v) for v in values],
        )


@operation(description="Click an element by CSS/XPath/text selector.", mutates_state=True)
async def click(
    session: SessionManager,
    selector: Annotated[str, "Selector (CSS default; prefix with xpath= for XPath, text= for text)"],
    timeout_ms: Annotated[Optional[int], "Timeout ms (default 10000)"] = DEFAULT_ACTION_TIMEOUT_MS,
) -> Dict[str, Any]:
    page = await session.acquire_page()
    await page.click(selector, timeout=timeout_ms)
    return {"clicked": selector}


@operation(description="Hover over an element by selector.", mutates_state=True)
async def hover(
    session: SessionManager,
    selector: Annotated[str, "Selector"],
    timeout_ms: Annotated[Optional[int], "Timeout ms (default 10000)"] = DEFAULT_ACTION_TIMEOUT_MS,
) -> Dict[str, Any]:
    page = await session.acquire_page()
    await page.hover(selector, timeout=timeout_ms)
    return {"hovered": selector}


@operation(description="Drag an element onto another selector.", mutates_state=True)
async def drag_and_drop(
    session: SessionManager,
    source_selector: Annotated[str, "Source selector"],
    target_selector: Annotated[str, "Target selector"],
    timeout_ms: Annotated[Optional[int], "Timeout ms (default 15000)"] = DEFAULT_DRAG_TIMEOUT_MS,
) -> Dict[str, Any]:
    page = await session.acquire_page()
    await page.drag_and_drop(source_selector, target_selector, timeout=timeout_ms)
    return {"dragged": source_selector, "dropped_on": target_selector}


@operation(description="Fill input/textarea by selector with given text.", mutates_state=True)
async def fill(
    session: SessionManager,
    selector: Annotated[str, "Selector"],
    text: Annotated[str, "Text to fill"],
    timeout_ms: Annotated[Optional[int], "Timeout ms (default 10000)"] = DEFAULT_ACTION_TIMEOUT_MS,
) -> Dict[str, Any]:
    locator = await wait_for_locator(session, selector, timeout_ms)
    await locator.fill(text, timeout=timeout_ms)
    return {"filled": selector, "length": len(text)}


@operation(name="type", description="Type text into an element, optionally pressing Enter.", mutates_state=True)
async def type_text(
    session: SessionManager,
    selector: Annotated[str, "Selector"],
    text: Annotated[str, "Text to type"],
    submit: Annotated[bool, "Submit (press Enter) after typing"] = False,
    delay_ms: Annotated[Optional[float], "Delay between keystrokes in ms"] = None,
    timeout_ms: Annotated[Optional[int], "Timeout ms (default 10000)"] = DEFAULT_ACTION_TIMEOUT_MS,
) -> Dict[str, Any]:
    locator = await wait_for_locator(session, selector, timeout_ms)
    await locator.press_sequentially(text, delay=delay_ms, timeout=timeout_ms)
    if submit:
        await locator.press("Enter")
    return {"typed": selector, "length": len(text), "submit": submit}


@operation(description="Press a single keyboard key on the active page.", mutates_state=True)
async def press_key(
    session: SessionManager,
    key: Annotated[str, "Key, e.g. Enter or Control+S"],
    delay_ms: Annotated[Optional[float], "Delay between keydown and keyup in ms"] = None,
) -> Dict[str, Any]:
    page = await session.acquire_page()
    await page.keyboard.press(key, delay=delay_ms)
    return {"pressed": key, "delay_ms": delay_ms}


@operation(description="Select one or more option values in a select element.", mutates_state=True)
async def select_option(
    session: SessionManager,
    selector: Annotated[str, "Selector for the <select> element"],
    values: Annotated[JsonValue, "Values to select (list of strings)"],
    timeout_ms: Annotated[Optional[int], "Timeout ms (default 10000)"] = DEFAULT_ACTION_TIMEOUT_MS,
) -> Dict[str, Any]:
    values = string_list(values, "values")
    locator = await wait_for_locator(session, selector, timeout_ms)
    selected = await locator.select_option(value=values, timeout=timeout_ms)
    return {"selector": selector, "selected": selected}


@operation(description='Upload local files to an <input type="file"> element.', mutates_state=True)
async def upload_files(
    session: SessionManager,
    selector: Annotated[str, "Selector for file input"],
    paths: Annotated[JsonValue, "Absolute or relative file paths"],
    timeout_ms: Annotated[Optional[int], "Timeout ms (default 10000)"] = DEFAULT_ACTION_TIMEOUT_MS,
) -> Dict[str, Any]:
    absolute_paths = [str(Path(p).expanduser().resolve()) for p in string_list(paths, "paths")]
    for file_path in absolute_paths:
        if not Path(file_path).is_file():
            raise FileNotFoundError(f"File not found: {file_path}")

    locator = await wait_for_locator(session, selector, timeout_ms)
    await locator.set_input_files(absolute_paths, timeout=timeout_ms)
    return {"selector": selector, "count": len(absolute_paths)}


@operation(description="Fill multiple form fields by selector.", mutates_state=True)
async def fill_form(
    session: SessionManager,
    fields: Annotated[JsonValue, "Fields to fill: [{selector, value?, action?: fill|select, values?}]"],
    timeout_ms: Annotated[Optional[int], "Timeout ms per field (default 10000)"] = DEFAULT_ACTION_TIMEOUT_MS,
) -> Dict[str, Any]:
    """
    Fields are processed in order. A field with action "select" selects its
    `values`; every other field is filled with `value` (empty when absent).
    """
    if not isinstance(fields, list) or not fields:
        raise ValueError("At least one field must be provided.")
    form_fields = [FormField.from_dict(data, position) for position, data in enumerate(fields)]

    results = []
    for form_field in form_fields:
        locator = await wait_for_locator(session, form_field.selector, timeout_ms)
        if (form_field.action or "").lower() == "select":
            selected = await locator.select_option(value=form_field.values, timeout=timeout_ms)
            results.append({"selector": form_field.selector, "action": "select", "selected": selected})
        else:
            value = form_field.value or ""
            await locator.fill(value, timeout=timeout_ms)
            results.append({"selector": form_field.selector, "action": "fill", "length": len(value)})

    return {"count": len(results), "results": results}


@operation(description="Move mouse to coordinates relative to page viewport.", mutates_state=True)
async def mouse_move(
    session: SessionManager,
    x: Annotated[float, "X coordinate"],
    y: Annotated[float, "Y coordinate"],
    steps: Annotated[Optional[int], "Number of move steps"] = None,
) -> Dict[str, Any]:
    page = await session.acquire_page()
    await page.mouse.move(x, y, steps=steps)
    return {"x": x, "y": y, "steps": steps}


@operation(description="Click mouse at coordinates relative to page viewport.", mutates_state=True)
async def mouse_click(
    session: SessionManager,
    x: Annotated[float, "X coordinate"],
    y: Annotated[float, "Y coordinate"],
    button: Annotated[Optional[str], "Button: left|middle|right"] = "left",
    click_count: Annotated[int, "Number of clicks"] = 1,
) -> Dict[str, Any]:
    resolved = button if button in _MOUSE_BUTTONS else "left"
    page = await session.acquire_page()
    await page.mouse.click(x, y, button=resolved, click_count=click_count)
    return {"x": x, "y": y, "button": button, "click_count": click_count}


@operation(description="Drag mouse between coordinates relative to viewport.", mutates_state=True)
async def mouse_drag(
    session: SessionManager,
    start_x: Annotated[float, "Start X"],
    start_y: Annotated[float, "Start Y"],
    end_x: Annotated[float, "End X"],
    end_y: Annotated[float, "End Y"],
    steps: Annotated[Optional[int], "Steps for the move"] = 25,
) -> Dict[str, Any]:
    page = await session.acquire_page()
    await page.mouse.move(start_x, start_y)
    await page.mouse.down()
    await page.mouse.move(end_x, end_y, steps=steps)
    await page.mouse.up()
    return {"start_x": start_x, "start_y": start_y, "end_x": end_x, "end_y": end_y, "steps": steps}


__all__ = [
    "FormField",
    "click",
    "hover",
    "drag_and_drop",
    "fill",
    "type_text",
    "press_key",
    "select_option",
    "upload_files",
    "fill_form",
    "mouse_move",
    "mouse_click",
    "mouse_drag",
]
