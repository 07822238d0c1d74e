"""
Browser Tools

The fixed catalogue of browser tools available to the model:
- navigate
- click, type, scroll
- wait
- extract_text
"""

from .base import Tool, ToolKind, ToolRegistry, format_number, tool
from .navigation import NavigateArgs, navigate
from .interactions import ClickArgs, ScrollArgs, TypeArgs, click, scroll, type_text
from .wait import WaitArgs, wait
from .extraction import NO_TEXT_FOUND, ExtractTextArgs, extract_text


def create_default_registry() -> ToolRegistry:
    """Build the registry holding every tool in the catalogue."""
    return ToolRegistry()


__all__ = [
    # Base
    "Tool",
    "ToolKind",
    "ToolRegistry",
    "tool",
    "format_number",
    "create_default_registry",
    # Navigation
    "NavigateArgs",
    "navigate",
    # Interactions
    "ClickArgs",
    "TypeArgs",
    "ScrollArgs",
    "click",
    "type_text",
    "scroll",
    # Wait
    "WaitArgs",
    "wait",
    # Extraction
    "ExtractTextArgs",
    "NO_TEXT_FOUND",
    "extract_text",
]
