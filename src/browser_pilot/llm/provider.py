"""
Base LLM Provider Interface and Configuration

Defines the model collaborator used by the agent loop: given the
conversation so far and the available tools, return a Decision.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..conversation import ConversationState, ToolCall


@dataclass
class LLMConfig:
    """
    Configuration for LLM provider connection.

    Supports both OpenAI-compatible APIs (DeepSeek by default) and Anthropic.
    """

    # API configuration
    api_key: Optional[str]
    base_url: Optional[str] = None
    model: str = "deepseek-chat"

    # Request parameters
    max_tokens: int = 4096
    temperature: float = 0.0
    timeout: int = 60

    # Provider type
    provider_type: str = "openai-compatible"  # or "anthropic"


class ToolCallRequest(BaseModel):
    """Tool invocation as returned by the model."""

    id: str
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)

    def to_tool_call(self) -> ToolCall:
        return ToolCall(id=self.id, name=self.name, arguments=dict(self.arguments))


class Decision(BaseModel):
    """
    One model output.

    Either a final textual answer (no tool calls) or an ordered list of
    requested tool invocations.
    """

    content: str = ""
    tool_calls: list[ToolCallRequest] = Field(default_factory=list)
    model: Optional[str] = None
    usage: dict[str, int] = Field(default_factory=dict)
    stop_reason: Optional[str] = None

    @property
    def is_final(self) -> bool:
        return not self.tool_calls

    def requested_calls(self) -> tuple[ToolCall, ...]:
        return tuple(call.to_tool_call() for call in self.tool_calls)


class LLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    All providers must implement this interface.
    """

    def __init__(self, config: LLMConfig):
        self.config = config
        self._client = None

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the provider client."""
        pass

    @abstractmethod
    async def decide(
        self,
        conversation: ConversationState,
        tools: list[dict[str, Any]],
    ) -> Decision:
        """
        Ask the model for the next step.

        Args:
            conversation: Full task history
            tools: Tool definitions (name, description, parameters)

        Returns:
            Decision with a final answer or tool invocations

        Raises:
            ModelInferenceFault: If the call fails or the reply cannot be parsed
        """
        pass

    async def close(self) -> None:
        """Close the provider connection."""
        if self._client:
            await self._client.close()
            self._client = None
