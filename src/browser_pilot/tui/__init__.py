"""
Rich TUI Interface Module

Renders a task's event stream in the terminal using the Rich library.

Components:
- AgentConsole: Console wrapper with per-event styling
- TUIConfig: Colors and display options
- render_event: Display one stream event
"""

from typing import Optional

from ..events import EventType, StreamEvent
from .console import AgentConsole, TUIConfig, get_console
from .action import print_action, print_screenshot_notice
from .result import print_error, print_result


def render_event(
    event: StreamEvent,
    *,
    verbose: bool = False,
    console: Optional[AgentConsole] = None,
) -> None:
    """
    Display one event from the agent loop.

    Args:
        event: Stream event
        verbose: Show progress logs as full panels
        console: Console to use (defaults to global console)
    """
    if event.type is EventType.LOG:
        print_action(event.data, verbose=verbose, console=console)
    elif event.type is EventType.RESPONSE:
        print_result(event.data, console=console)
    elif event.type is EventType.ERROR:
        print_error(event.data, error_type="TaskError", console=console)
    elif event.type is EventType.EXHAUSTED:
        print_error(
            event.data,
            error_type="IterationLimit",
            suggestion="Try a more specific instruction or raise --max-iterations.",
            event_type=EventType.EXHAUSTED,
            console=console,
        )
    elif event.type is EventType.SCREENSHOT:
        print_screenshot_notice(len(event.data), console=console)


__all__ = [
    "AgentConsole",
    "TUIConfig",
    "get_console",
    "print_action",
    "print_screenshot_notice",
    "print_result",
    "print_error",
    "render_event",
]
