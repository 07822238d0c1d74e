"""
Anthropic Claude LLM Provider

Native implementation for Anthropic's Claude API using tool_use blocks.
Uses the Anthropic Python SDK for optimal integration.
"""

import logging
from typing import Any, Optional

from anthropic import APIError, AsyncAnthropic

from ..conversation import ConversationState, DecisionTurn, InstructionTurn, ToolResultTurn
from ..errors import ModelInferenceFault
from .provider import Decision, LLMConfig, LLMProvider, ToolCallRequest

logger = logging.getLogger(__name__)


def to_anthropic_messages(conversation: ConversationState) -> list[dict[str, Any]]:
    """
    Convert conversation turns to Anthropic messages.

    Consecutive tool results are grouped into one user message, as the API
    requires results to follow the assistant turn that requested them.
    """
    messages: list[dict[str, Any]] = []

    for turn in conversation.turns:
        if isinstance(turn, InstructionTurn):
            messages.append({"role": "user", "content": turn.text})
        elif isinstance(turn, DecisionTurn):
            blocks: list[dict[str, Any]] = []
            if turn.content:
                blocks.append({"type": "text", "text": turn.content})
            for call in turn.tool_calls:
                blocks.append(
                    {"type": "tool_use", "id": call.id, "name": call.name, "input": call.arguments}
                )
            messages.append({"role": "assistant", "content": blocks})
        elif isinstance(turn, ToolResultTurn):
            block = {"type": "tool_result", "tool_use_id": turn.call_id, "content": turn.content}
            previous = messages[-1] if messages else None
            if (
                previous
                and previous["role"] == "user"
                and isinstance(previous["content"], list)
            ):
                previous["content"].append(block)
            else:
                messages.append({"role": "user", "content": [block]})

    return messages


def to_anthropic_tools(tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {"name": t["name"], "description": t["description"], "input_schema": t["parameters"]}
        for t in tools
    ]


class AnthropicProvider(LLMProvider):
    """
    Anthropic Claude API provider.

    Provides native integration with Anthropic's Claude models
    using the official Anthropic Python SDK.
    """

    def __init__(self, config: LLMConfig):
        super().__init__(config)
        self._client: Optional[AsyncAnthropic] = None

    async def initialize(self) -> None:
        """Initialize the Anthropic async client."""
        if self._client is None:
            self._client = AsyncAnthropic(
                api_key=self.config.api_key,
                base_url=self.config.base_url,  # Can override for proxy
                timeout=self.config.timeout,
            )

    async def decide(
        self,
        conversation: ConversationState,
        tools: list[dict[str, Any]],
    ) -> Decision:
        """
        Request the next decision using Anthropic's messages API.

        Args:
            conversation: Full task history
            tools: Tool definitions

        Returns:
            Parsed Decision
        """
        await self.initialize()

        params: dict[str, Any] = {
            "model": self.config.model,
            "messages": to_anthropic_messages(conversation),
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }
        if tools:
            params["tools"] = to_anthropic_tools(tools)

        try:
            response = await self._client.messages.create(**params)
        except APIError as e:
            raise ModelInferenceFault(f"LLM API error: {e}") from e

        text_parts = []
        calls = []
        for block in response.content:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                if not isinstance(block.input, dict):
                    raise ModelInferenceFault(f"Tool call input must be an object: {block.input!r}")
                calls.append(ToolCallRequest(id=block.id, name=block.name, arguments=block.input))

        return Decision(
            content="".join(text_parts),
            tool_calls=calls,
            model=response.model,
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.input_tokens + response.usage.output_tokens,
            },
            stop_reason=response.stop_reason,
        )

    async def close(self) -> None:
        """Close the Anthropic client."""
        if self._client:
            await self._client.close()
            self._client = None
