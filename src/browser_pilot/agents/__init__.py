"""
Agent Loop Module

Runs natural-language browsing tasks: the model picks browser tools, the
loop executes them in order and streams progress until a final answer.
"""

from .loop import (
    AgentLoop,
    LoopOutcome,
    LoopState,
    TerminationReason,
    run_task,
    stream_task,
)

__all__ = [
    "AgentLoop",
    "LoopOutcome",
    "LoopState",
    "TerminationReason",
    "run_task",
    "stream_task",
]
