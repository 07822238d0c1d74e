"""
RESULT display for the end of a task.

A task ends with exactly one of: the model's answer, an error, or the
iteration limit notice.
"""

from typing import Optional

from rich.markdown import Markdown
from rich.text import Text

from ..events import EventType
from .console import AgentConsole, get_console


def print_result(
    content: str,
    *,
    title: Optional[str] = None,
    console: Optional[AgentConsole] = None,
) -> None:
    """
    Print the model's final answer.

    Args:
        content: Answer text (rendered as Markdown)
        title: Custom title (overrides default "[RESULT]")
        console: Console to use (defaults to global console)
    """
    console = console or get_console()
    console.event_panel(Markdown(content or "(empty answer)"), EventType.RESPONSE, title)


def print_error(
    error_message: str,
    *,
    error_type: Optional[str] = None,
    suggestion: Optional[str] = None,
    event_type: EventType = EventType.ERROR,
    console: Optional[AgentConsole] = None,
) -> None:
    """
    Print a task failure.

    Args:
        error_message: The error message
        error_type: Type/category of error
        suggestion: Hint for the user
        event_type: ERROR, or EXHAUSTED for the iteration limit
        console: Console to use (defaults to global console)
    """
    console = console or get_console()

    content = Text()
    content.append("Error", style=f"event.{event_type.value}")
    if error_type:
        content.append(f" ({error_type})", style="dim")
    content.append("\n\n")
    content.append(error_message)

    if suggestion:
        content.append("\n\n")
        content.append(suggestion, style="italic")

    console.event_panel(content, event_type)
