"""
Conversation State

Per-task history fed back to the model as causal context. Turns are a
tagged union: the user instruction, model decisions (optionally requesting
tool invocations), and tool results tied to a requested invocation by its
correlation id. History is append-only.
"""

from dataclasses import dataclass, field
from typing import Any, Union

INSTRUCTION_TEMPLATE = (
    "You are a web browsing assistant. Use the available tools to complete this task: {task}"
)


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model."""

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class InstructionTurn:
    text: str


@dataclass(frozen=True)
class DecisionTurn:
    content: str
    tool_calls: tuple[ToolCall, ...] = ()


@dataclass(frozen=True)
class ToolResultTurn:
    call_id: str
    name: str
    content: str


Turn = Union[InstructionTurn, DecisionTurn, ToolResultTurn]


class ConversationState:
    """
    Ordered turn history for one task.

    Every tool result must answer exactly one invocation requested by an
    earlier decision, and each invocation can be answered only once.
    """

    def __init__(self) -> None:
        self._turns: list[Turn] = []
        self._requested: dict[str, ToolCall] = {}
        self._answered: set[str] = set()

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def add_instruction(self, task: str) -> InstructionTurn:
        """Frame the user's task as a directive to use the tools."""
        turn = InstructionTurn(text=INSTRUCTION_TEMPLATE.format(task=task))
        self._turns.append(turn)
        return turn

    def add_decision(self, content: str, tool_calls: tuple[ToolCall, ...] = ()) -> DecisionTurn:
        for call in tool_calls:
            if call.id in self._requested:
                raise ValueError(f"Duplicate tool call id: {call.id}")
        turn = DecisionTurn(content=content, tool_calls=tuple(tool_calls))
        self._turns.append(turn)
        for call in turn.tool_calls:
            self._requested[call.id] = call
        return turn

    def add_tool_result(self, call_id: str, content: str) -> ToolResultTurn:
        """
        Record the result of a requested invocation.

        Raises:
            ValueError: If no earlier decision requested ``call_id`` or it was already answered
        """
        call = self._requested.get(call_id)
        if call is None:
            raise ValueError(f"No tool call requested with id {call_id}")
        if call_id in self._answered:
            raise ValueError(f"Tool call {call_id} already has a result")

        turn = ToolResultTurn(call_id=call_id, name=call.name, content=content)
        self._turns.append(turn)
        self._answered.add(call_id)
        return turn

    def pending_calls(self) -> list[ToolCall]:
        """Requested invocations that have no result yet, in request order."""
        return [call for call_id, call in self._requested.items() if call_id not in self._answered]

    def tool_results(self) -> list[ToolResultTurn]:
        return [turn for turn in self._turns if isinstance(turn, ToolResultTurn)]
