"""
Text Extraction Tools

Reads the text content of an element or of the whole page body.
"""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from ..browser.controller import BrowserHandle
from ..errors import ToolExecutionFault
from ..events import EventSink
from .base import ToolKind, tool

logger = logging.getLogger(__name__)

NO_TEXT_FOUND = "No text found"


class ExtractTextArgs(BaseModel):
    selector: Optional[str] = Field(
        default=None,
        description="CSS selector of the element (optional, extracts from body if not provided)",
    )


@tool(
    ToolKind.EXTRACT_TEXT,
    description="Extract text content from an element or the entire page",
    args_model=ExtractTextArgs,
)
async def extract_text(args: ExtractTextArgs, handle: BrowserHandle, sink: EventSink) -> str:
    await sink.log("Extracting text...")
    try:
        text = await handle.text_content(args.selector)
    except ToolExecutionFault as e:
        logger.info("Text extraction from %s failed: %s", args.selector or "body", e)
        return NO_TEXT_FOUND
    return text or NO_TEXT_FOUND
