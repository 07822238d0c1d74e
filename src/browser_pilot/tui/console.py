"""
Rich TUI Console Setup

Console shared by the CLI renderers. Each stream event type has its own
color and block label; colors come from environment variables.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from rich.console import Console, RenderableType
from rich.panel import Panel
from rich.rule import Rule
from rich.style import Style
from rich.text import Text
from rich.theme import Theme

from ..config import env_flag
from ..events import EventType

# Panel labels per event type
BLOCK_LABELS = {
    EventType.LOG: "ACTION",
    EventType.RESPONSE: "RESULT",
    EventType.ERROR: "ERROR",
    EventType.EXHAUSTED: "LIMIT",
    EventType.SCREENSHOT: "SCREENSHOT",
}


@dataclass
class TUIConfig:
    """
    Terminal appearance.

    Attributes:
        color_log: Color of progress lines
        color_response: Color of the final answer panel
        color_error: Color of error panels
        color_exhausted: Color of the iteration-limit panel
        show_timestamps: Prefix output with the wall-clock time
    """

    color_log: str = "green"
    color_response: str = "yellow"
    color_error: str = "red"
    color_exhausted: str = "magenta"
    show_timestamps: bool = True

    @classmethod
    def from_env(cls) -> "TUIConfig":
        """
        Load configuration from environment variables.

        Environment variables:
            COLOR_LOG, COLOR_RESPONSE, COLOR_ERROR, COLOR_EXHAUSTED: Rich color names
            SHOW_TIMESTAMPS: true/false (default: true)
        """
        return cls(
            color_log=os.getenv("COLOR_LOG", "green"),
            color_response=os.getenv("COLOR_RESPONSE", "yellow"),
            color_error=os.getenv("COLOR_ERROR", "red"),
            color_exhausted=os.getenv("COLOR_EXHAUSTED", "magenta"),
            show_timestamps=env_flag("SHOW_TIMESTAMPS", default=True),
        )

    def color_for(self, event_type: EventType) -> str:
        return {
            EventType.LOG: self.color_log,
            EventType.RESPONSE: self.color_response,
            EventType.ERROR: self.color_error,
            EventType.EXHAUSTED: self.color_exhausted,
        }.get(event_type, "white")


def create_theme(config: TUIConfig) -> Theme:
    """Named styles ``event.<type>`` for every event type, plus helpers."""
    styles = {
        f"event.{event_type.value}": Style(color=config.color_for(event_type), bold=True)
        for event_type in EventType
    }
    styles["timestamp"] = Style(dim=True)
    styles["task"] = Style(bold=True)
    return Theme(styles)


class AgentConsole:
    """Rich console wrapper that knows how to style stream events."""

    def __init__(self, config: Optional[TUIConfig] = None, console: Optional[Console] = None):
        """
        Initialize the agent console.

        Args:
            config: TUI configuration. If None, loads from environment.
            console: Underlying Rich console (a new one if None)
        """
        self.config = config or TUIConfig.from_env()
        theme = create_theme(self.config)
        if console is None:
            console = Console(theme=theme)
        else:
            console.push_theme(theme)
        self.console = console

    def timestamp(self) -> str:
        if self.config.show_timestamps:
            return datetime.now().strftime("%H:%M:%S")
        return ""

    def event_panel(
        self,
        content: RenderableType,
        event_type: EventType,
        title: Optional[str] = None,
    ) -> None:
        """
        Print content in a panel colored for ``event_type``.

        Args:
            content: Text or renderable to display
            event_type: Event the panel belongs to
            title: Optional title replacing the default label
        """
        label = title or f"[{BLOCK_LABELS[event_type]}]"
        stamp = self.timestamp()
        if stamp:
            label = f"{stamp} {label}"

        self.console.print(
            Panel(
                content,
                title=label,
                title_align="left",
                border_style=self.config.color_for(event_type),
                padding=(0, 1),
            )
        )

    def task_header(self, task: str) -> None:
        """Separator shown before a task's events."""
        self.console.print(Rule(Text(task.strip()), style="task", align="left"))

    def print(self, *args, **kwargs) -> None:
        """Passthrough to underlying Rich console."""
        self.console.print(*args, **kwargs)


# Global console instance
_console: Optional[AgentConsole] = None


def get_console() -> AgentConsole:
    """Get or create the global console instance."""
    global _console
    if _console is None:
        _console = AgentConsole()
    return _console
