"""
OpenAI-Compatible LLM Provider

Universal provider for any API that follows the OpenAI chat completion
format with function calling: DeepSeek (default), OpenAI, OpenRouter and
local servers.
"""

import json
import logging
from typing import Any, Optional

import httpx

from ..conversation import ConversationState, DecisionTurn, InstructionTurn, ToolResultTurn
from ..errors import ModelInferenceFault
from .provider import Decision, LLMConfig, LLMProvider, ToolCallRequest

logger = logging.getLogger(__name__)


def to_openai_messages(conversation: ConversationState) -> list[dict[str, Any]]:
    """Convert conversation turns to chat completion messages."""
    messages: list[dict[str, Any]] = []

    for turn in conversation.turns:
        if isinstance(turn, InstructionTurn):
            messages.append({"role": "user", "content": turn.text})
        elif isinstance(turn, DecisionTurn):
            message: dict[str, Any] = {"role": "assistant", "content": turn.content or None}
            if turn.tool_calls:
                message["tool_calls"] = [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {
                            "name": call.name,
                            "arguments": json.dumps(call.arguments),
                        },
                    }
                    for call in turn.tool_calls
                ]
            messages.append(message)
        elif isinstance(turn, ToolResultTurn):
            messages.append(
                {"role": "tool", "tool_call_id": turn.call_id, "content": turn.content}
            )

    return messages


def to_openai_tools(tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "type": "function",
            "function": {
                "name": t["name"],
                "description": t["description"],
                "parameters": t["parameters"],
            },
        }
        for t in tools
    ]


def parse_decision(data: dict[str, Any], default_model: str) -> Decision:
    """
    Parse a chat completion payload into a Decision.

    Raises:
        ModelInferenceFault: If the payload is missing fields or has invalid arguments
    """
    try:
        choice = data["choices"][0]
        message = choice["message"]
    except (KeyError, IndexError, TypeError) as e:
        raise ModelInferenceFault(f"Malformed completion payload: {e!r}") from e

    calls = []
    for raw in message.get("tool_calls") or []:
        try:
            call_id = raw["id"]
            function = raw["function"]
            name = function["name"]
            raw_args = function.get("arguments") or "{}"
            arguments = json.loads(raw_args) if isinstance(raw_args, str) else raw_args
        except (KeyError, TypeError, json.JSONDecodeError) as e:
            raise ModelInferenceFault(f"Invalid tool call in model reply: {e!r}") from e
        if not isinstance(arguments, dict):
            raise ModelInferenceFault(f"Tool call arguments must be an object, got {arguments!r}")
        calls.append(ToolCallRequest(id=call_id, name=name, arguments=arguments))

    usage = data.get("usage") or {}
    return Decision(
        content=message.get("content") or "",
        tool_calls=calls,
        model=data.get("model", default_model),
        usage={
            "prompt_tokens": usage.get("prompt_tokens", 0),
            "completion_tokens": usage.get("completion_tokens", 0),
            "total_tokens": usage.get("total_tokens", 0),
        },
        stop_reason=choice.get("finish_reason"),
    )


class OpenAICompatibleProvider(LLMProvider):
    """
    OpenAI-compatible API provider.

    Works with any API that follows the OpenAI chat completion format:
    - DeepSeek (https://api.deepseek.com/v1)
    - OpenAI, OpenRouter
    - Local models (Ollama, LM Studio)
    """

    def __init__(self, config: LLMConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(config)
        self._client: Optional[httpx.AsyncClient] = None
        self._transport = transport

    async def initialize(self) -> None:
        """Initialize the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.config.timeout,
                transport=self._transport,
            )

    async def decide(
        self,
        conversation: ConversationState,
        tools: list[dict[str, Any]],
    ) -> Decision:
        """
        Request the next decision using the chat completions endpoint.

        Args:
            conversation: Full task history
            tools: Tool definitions

        Returns:
            Parsed Decision
        """
        await self.initialize()

        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": to_openai_messages(conversation),
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }
        if tools:
            payload["tools"] = to_openai_tools(tools)

        try:
            response = await self._client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise ModelInferenceFault(
                f"LLM request timed out after {self.config.timeout}s"
            ) from e
        except httpx.HTTPStatusError as e:
            raise ModelInferenceFault(
                f"LLM API error: {e.response.status_code} - {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise ModelInferenceFault(f"LLM request failed: {e}") from e
        except ValueError as e:
            raise ModelInferenceFault(f"LLM returned invalid JSON: {e}") from e

        decision = parse_decision(data, self.config.model)
        logger.debug(
            "Decision: %d tool call(s), %s tokens",
            len(decision.tool_calls),
            decision.usage.get("total_tokens"),
        )
        return decision

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
