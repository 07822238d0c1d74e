"""
ACTION display for progress logs.

Each log event from the agent loop ("Navigating to ...", "Clicking ...")
is shown as a compact line, or a full panel in verbose mode.
"""

from typing import Optional

from rich.text import Text

from ..events import EventType
from .console import AgentConsole, get_console


def print_action(
    message: str,
    *,
    verbose: bool = False,
    console: Optional[AgentConsole] = None,
) -> None:
    """
    Print a progress log.

    Args:
        message: Log text emitted by a tool
        verbose: Render as a full panel instead of a single line
        console: Console to use (defaults to global console)
    """
    console = console or get_console()

    if verbose:
        console.event_panel(Text(message), EventType.LOG)
        return

    line = Text()
    stamp = console.timestamp()
    if stamp:
        line.append(f"{stamp} ", style="timestamp")
    line.append("> ", style="event.log")
    line.append(message)
    console.print(line)


def print_screenshot_notice(size: int, *, console: Optional[AgentConsole] = None) -> None:
    # Terminals cannot show the image itself
    console = console or get_console()
    console.print(Text(f"[screenshot: {size} bytes base64]", style="dim"))
