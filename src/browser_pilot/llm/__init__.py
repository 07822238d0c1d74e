"""
LLM Provider Abstraction

Supports multiple LLM providers through a unified tool-calling interface:
- OpenAI-compatible APIs (DeepSeek, OpenAI, OpenRouter, local models)
- Anthropic Claude (native)
"""

from .provider import Decision, LLMConfig, LLMProvider, ToolCallRequest
from .anthropic_provider import AnthropicProvider
from .openai_compatible_provider import OpenAICompatibleProvider
from .factory import create_provider, create_provider_from_env

__all__ = [
    "Decision",
    "LLMConfig",
    "LLMProvider",
    "ToolCallRequest",
    "AnthropicProvider",
    "OpenAICompatibleProvider",
    "create_provider_from_env",
    "create_provider",
]
