"""
Error Taxonomy

Exceptions raised across the browser pilot:
- SessionInitError: the browser session could not be established
- ToolExecutionFault: a browser operation failed inside a tool
- ModelInferenceFault: the model call failed or returned an unusable decision

Tool faults are recovered inside the tools and fed back to the model as text.
The others propagate to the task boundary and end the task with an error event.
"""

from typing import Optional


class BrowserPilotError(Exception):
    """Base class for browser pilot errors."""


class SessionInitError(BrowserPilotError):
    """Raised when a new browser session cannot be established."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage


class ToolExecutionFault(BrowserPilotError):
    """Browser-level failure inside a tool, tagged with the page operation that failed."""

    def __init__(self, operation: str, message: str):
        super().__init__(message)
        self.operation = operation


class ModelInferenceFault(BrowserPilotError):
    """The model collaborator failed or returned an unparsable decision."""
