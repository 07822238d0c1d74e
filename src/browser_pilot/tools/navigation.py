"""
Navigation Tools

Navigation failures are not fatal: the error is reported on the stream and
the model is told the navigation happened, so it can inspect the page and
decide what to do next.
"""

import logging

from pydantic import BaseModel, Field

from ..browser.controller import BrowserHandle
from ..errors import ToolExecutionFault
from ..events import EventSink
from .base import ToolKind, tool

logger = logging.getLogger(__name__)


class NavigateArgs(BaseModel):
    url: str = Field(description="The URL to navigate to")


@tool(
    ToolKind.NAVIGATE,
    description="Navigate to a URL in the browser",
    args_model=NavigateArgs,
)
async def navigate(args: NavigateArgs, handle: BrowserHandle, sink: EventSink) -> str:
    """
    Navigate to a URL, waiting for the network to go idle.

    Args:
        args: Validated arguments
        handle: Live browser page
        sink: Progress event sink

    Returns:
        Confirmation text (also on timeout or navigation error)
    """
    await sink.log(f"Navigating to {args.url}...")
    try:
        await handle.navigate(args.url)
    except ToolExecutionFault as e:
        logger.warning("Navigation to %s failed: %s", args.url, e)
        await sink.log(f"Navigation timeout/error: {e}. Continuing...")
    return f"Navigated to {args.url}"
