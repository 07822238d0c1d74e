"""
Agent Loop

Drives one task: the model decides, tools act on the browser, results are
fed back, until the model answers or the iteration ceiling is reached.

States:
    INIT -> DECIDE -> ACT -> DECIDE ... -> RESPOND -> TERMINATED
                   \\-> TERMINATED (iteration ceiling reached)

Tool faults are recovered inside the loop and returned to the model as
text. Any other fault (model call, session acquisition) ends the task with
a single error event. The event stream is closed on every exit path by
run_task().
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Optional

from ..browser.controller import BrowserHandle
from ..browser.session import SessionManager
from ..config import AgentConfig
from ..conversation import ConversationState, DecisionTurn, ToolCall
from ..errors import ToolExecutionFault
from ..events import EventSink, EventType, StreamEvent
from ..llm.provider import LLMProvider
from ..tools import ToolRegistry, create_default_registry

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    INIT = "init"
    DECIDE = "decide"
    ACT = "act"
    RESPOND = "respond"
    TERMINATED = "terminated"


class TerminationReason(str, Enum):
    SUCCESS = "success"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


@dataclass
class LoopOutcome:
    """
    How a task ended.

    Attributes:
        reason: Terminal reason
        iterations: Number of model decisions requested
        conversation: Full turn history of the task
        answer: Final answer on success
        error: Error message on failure
    """

    reason: TerminationReason
    iterations: int
    conversation: ConversationState
    answer: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.reason is TerminationReason.SUCCESS


class AgentLoop:
    """
    Model-decides / tool-executes / observe cycle for one task at a time.

    The loop holds the session lease for the whole task, so concurrent tasks
    against the same SessionManager run one after another.

    Usage:
        >>> loop = AgentLoop(provider, session_manager, sink)
        >>> outcome = await loop.run("Find the title of example.com")
    """

    def __init__(
        self,
        provider: LLMProvider,
        session_manager: SessionManager,
        sink: EventSink,
        registry: Optional[ToolRegistry] = None,
        config: Optional[AgentConfig] = None,
    ):
        """
        Initialize the agent loop.

        Args:
            provider: Model collaborator
            session_manager: Owner of the shared browser session
            sink: Event stream for progress and the final answer
            registry: Tool catalogue (default: all browser tools)
            config: Loop settings (uses env if None)
        """
        self.provider = provider
        self.session_manager = session_manager
        self.sink = sink
        self.registry = registry or create_default_registry()
        self.config = config or AgentConfig.from_env()
        self.state = LoopState.INIT

    @property
    def max_iterations(self) -> int:
        return self.config.max_iterations

    async def run(self, task: str) -> LoopOutcome:
        """
        Execute a task to completion.

        Args:
            task: Natural language instruction

        Returns:
            LoopOutcome describing how the task ended
        """
        self.state = LoopState.INIT
        conversation = ConversationState()
        iterations = 0

        try:
            async with self.session_manager.lease() as handle:
                conversation.add_instruction(task)
                logger.info("Starting task: %s", task)

                turn: Optional[DecisionTurn] = None
                self.state = LoopState.DECIDE

                while True:
                    if self.state is LoopState.DECIDE:
                        if iterations >= self.max_iterations:
                            return await self._exhausted(conversation, iterations)

                        iterations += 1
                        decision = await self.provider.decide(
                            conversation, self.registry.schemas()
                        )
                        turn = conversation.add_decision(
                            decision.content, decision.requested_calls()
                        )
                        logger.debug(
                            "Iteration %d: %d tool call(s)", iterations, len(turn.tool_calls)
                        )
                        self.state = LoopState.RESPOND if decision.is_final else LoopState.ACT

                    elif self.state is LoopState.ACT:
                        for call in turn.tool_calls:
                            await self._execute(call, handle, conversation)
                        self.state = LoopState.DECIDE

                    elif self.state is LoopState.RESPOND:
                        await self.sink.emit(EventType.RESPONSE, turn.content)
                        self.state = LoopState.TERMINATED
                        logger.info("Task finished after %d iteration(s)", iterations)
                        return LoopOutcome(
                            reason=TerminationReason.SUCCESS,
                            iterations=iterations,
                            conversation=conversation,
                            answer=turn.content,
                        )

        except Exception as e:
            logger.error("Task failed: %s", e, exc_info=logger.isEnabledFor(logging.DEBUG))
            self.state = LoopState.TERMINATED
            message = str(e) or type(e).__name__
            await self.sink.emit(EventType.ERROR, message)
            return LoopOutcome(
                reason=TerminationReason.FAILED,
                iterations=iterations,
                conversation=conversation,
                error=message,
            )

    async def _exhausted(self, conversation: ConversationState, iterations: int) -> LoopOutcome:
        self.state = LoopState.TERMINATED
        logger.warning("Iteration limit (%d) reached without a final answer", self.max_iterations)
        await self.sink.emit(
            EventType.EXHAUSTED,
            f"Reached iteration limit ({self.max_iterations}) without a final answer",
        )
        return LoopOutcome(
            reason=TerminationReason.EXHAUSTED,
            iterations=iterations,
            conversation=conversation,
        )

    async def _execute(
        self,
        call: ToolCall,
        handle: BrowserHandle,
        conversation: ConversationState,
    ) -> None:
        tool = self.registry.get(call.name)

        if tool is None:
            # Unknown tools are skipped, but answered so the call id stays correlated
            logger.warning("Model requested unknown tool %r, skipping", call.name)
            await self.sink.log(f"Skipping unknown tool: {call.name}")
            conversation.add_tool_result(call.id, f"Error: unknown tool '{call.name}'")
            return

        try:
            result = await tool.invoke(call.arguments, handle, self.sink)
        except Exception as e:
            logger.warning("Tool %s raised: %s", call.name, e)
            result = f"Error: {e}"

        conversation.add_tool_result(call.id, result)

        if self.config.stream_screenshots:
            await self._emit_screenshot(handle)

    async def _emit_screenshot(self, handle: BrowserHandle) -> None:
        try:
            image = await handle.screenshot_base64()
        except ToolExecutionFault as e:
            logger.debug("Skipping screenshot: %s", e)
            return
        await self.sink.emit(EventType.SCREENSHOT, image)


async def run_task(
    task: str,
    provider: LLMProvider,
    session_manager: SessionManager,
    sink: EventSink,
    registry: Optional[ToolRegistry] = None,
    config: Optional[AgentConfig] = None,
) -> LoopOutcome:
    """Run one task and close the event stream afterwards, whatever happens."""
    try:
        loop = AgentLoop(provider, session_manager, sink, registry=registry, config=config)
        return await loop.run(task)
    finally:
        await sink.close()


async def stream_task(
    task: str,
    provider: LLMProvider,
    session_manager: SessionManager,
    registry: Optional[ToolRegistry] = None,
    config: Optional[AgentConfig] = None,
) -> AsyncIterator[StreamEvent]:
    """
    Run a task in the background and yield its events as they occur.

    If the consumer stops early (e.g. the HTTP client disconnects), the task
    is cancelled so the session lease is released.
    """
    config = config or AgentConfig.from_env()
    sink = EventSink(maxsize=config.event_queue_size)
    runner = asyncio.create_task(
        run_task(task, provider, session_manager, sink, registry=registry, config=config)
    )

    try:
        async for event in sink:
            yield event
        await runner
    finally:
        if not runner.done():
            logger.info("Event consumer went away, cancelling task")
            runner.cancel()
            try:
                await runner
            except asyncio.CancelledError:
                pass
