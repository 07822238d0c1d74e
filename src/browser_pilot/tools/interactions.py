"""
Browser Interaction Tools

Click, type and scroll. Click and type use a short bounded wait; when the
element never becomes actionable the model gets a description of the
failure instead of an exception, so it can try a different selector.
"""

import logging

from pydantic import BaseModel, Field

from ..browser.controller import BrowserHandle
from ..errors import ToolExecutionFault
from ..events import EventSink
from .base import ToolKind, format_number, tool

logger = logging.getLogger(__name__)

DEFAULT_SCROLL_AMOUNT = 500


class ClickArgs(BaseModel):
    selector: str = Field(description="CSS selector of the element to click")


class TypeArgs(BaseModel):
    selector: str = Field(description="CSS selector of the input field")
    text: str = Field(description="Text to type")


class ScrollArgs(BaseModel):
    amount: float = Field(
        default=DEFAULT_SCROLL_AMOUNT,
        description="Amount to scroll in pixels (default: 500)",
    )


@tool(
    ToolKind.CLICK,
    description="Click on an element by its selector (CSS selector)",
    args_model=ClickArgs,
)
async def click(args: ClickArgs, handle: BrowserHandle, sink: EventSink) -> str:
    await sink.log(f"Clicking {args.selector}...")
    try:
        await handle.click(args.selector)
    except ToolExecutionFault as e:
        logger.info("Click on %s failed: %s", args.selector, e)
        return f"Failed to click {args.selector}: {e}"
    return f"Clicked on element: {args.selector}"


@tool(
    ToolKind.TYPE,
    description="Type text into an input field",
    args_model=TypeArgs,
)
async def type_text(args: TypeArgs, handle: BrowserHandle, sink: EventSink) -> str:
    """
    Fill an input field, replacing its current value.

    Args:
        args: Selector of the field and the text to enter
        handle: Live browser page
        sink: Progress event sink

    Returns:
        Confirmation text, or a failure description when the field is not found
    """
    await sink.log(f'Typing "{args.text}"...')
    try:
        await handle.fill(args.selector, args.text)
    except ToolExecutionFault as e:
        logger.info("Typing into %s failed: %s", args.selector, e)
        return f"Failed to type into {args.selector}: {e}"
    return f'Typed "{args.text}" into {args.selector}'


@tool(
    ToolKind.SCROLL,
    description="Scroll down the page",
    args_model=ScrollArgs,
)
async def scroll(args: ScrollArgs, handle: BrowserHandle, sink: EventSink) -> str:
    # Best effort; a failed page evaluation still counts as scrolled
    await sink.log("Scrolling down...")
    try:
        await handle.scroll_by(args.amount)
    except ToolExecutionFault as e:
        logger.warning("Scroll by %spx failed: %s", args.amount, e)
    return f"Scrolled down {format_number(args.amount)}px"
