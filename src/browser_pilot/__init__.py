"""
Browser Pilot

Lets a natural-language instruction drive a real web browser through an
LLM that picks browser tools, streaming progress and a final answer.
"""

from .agents import AgentLoop, LoopOutcome, TerminationReason, run_task, stream_task
from .browser import BrowserConfig, BrowserHandle, SessionManager, create_session_manager
from .config import AgentConfig, configure_logging
from .errors import ModelInferenceFault, SessionInitError, ToolExecutionFault
from .events import EventSink, EventType, StreamEvent

__version__ = "0.1.0"

__all__ = [
    "AgentLoop",
    "LoopOutcome",
    "TerminationReason",
    "run_task",
    "stream_task",
    "BrowserConfig",
    "BrowserHandle",
    "SessionManager",
    "create_session_manager",
    "AgentConfig",
    "configure_logging",
    "ModelInferenceFault",
    "SessionInitError",
    "ToolExecutionFault",
    "EventSink",
    "EventType",
    "StreamEvent",
]
