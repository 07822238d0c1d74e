"""
Wait Tools

Waits either for an element to appear (bounded by the action timeout) or
for a fixed duration.
"""

from typing import Optional

from pydantic import BaseModel, Field

from ..browser.controller import BrowserHandle
from ..errors import ToolExecutionFault
from ..events import EventSink
from .base import ToolKind, format_number, tool

DEFAULT_WAIT_MS = 1000

# Upper bound for fixed-duration waits
MAX_WAIT_MS = 30000


class WaitArgs(BaseModel):
    selector: Optional[str] = Field(default=None, description="CSS selector to wait for")
    duration: float = Field(
        default=DEFAULT_WAIT_MS,
        ge=0,
        description="Duration to wait in milliseconds (default: 1000)",
    )


@tool(
    ToolKind.WAIT,
    description="Wait for an element to appear or for a specific duration",
    args_model=WaitArgs,
)
async def wait(args: WaitArgs, handle: BrowserHandle, sink: EventSink) -> str:
    """
    Wait for a selector or sleep.

    Args:
        args: Selector to wait for, or a duration in ms
        handle: Live browser page
        sink: Progress event sink

    Returns:
        Confirmation text, or a failure description when the element never appears
    """
    if args.selector:
        await sink.log(f"Waiting for {args.selector}...")
        try:
            await handle.wait_for_selector(args.selector)
        except ToolExecutionFault:
            return f"Element {args.selector} did not appear within timeout"
        return f"Element {args.selector} appeared"

    duration = min(args.duration, MAX_WAIT_MS)
    await sink.log(f"Waiting {format_number(duration)}ms...")
    await handle.wait_for(duration)
    return f"Waited {format_number(duration)}ms"
