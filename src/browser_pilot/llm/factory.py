"""
LLM Provider Factory

Factory functions for creating LLM provider instances based on configuration.
"""

import os
from typing import Optional

from dotenv import load_dotenv

from .anthropic_provider import AnthropicProvider
from .openai_compatible_provider import OpenAICompatibleProvider
from .provider import LLMConfig, LLMProvider

# Load environment variables
load_dotenv()

DEFAULT_BASE_URL = "https://api.deepseek.com/v1"
DEFAULT_MODEL = "deepseek-chat"
DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"


def create_provider_from_env() -> LLMProvider:
    """
    Create an LLM provider instance from environment variables.

    Reads configuration from the environment (or a .env file):
    - DEEPSEEK_API_KEY or OPENAI_API_KEY: key for the OpenAI-compatible endpoint
    - DEEPSEEK_BASE_URL or OPENAI_API_BASE: alternate inference base URL
      (default: https://api.deepseek.com/v1)
    - ANTHROPIC_API_KEY: used when no OpenAI-compatible key is set
    - LLM_MODEL: model name

    Returns:
        Configured LLM provider instance

    Raises:
        ValueError: If no provider is configured
    """
    api_key = os.getenv("DEEPSEEK_API_KEY") or os.getenv("OPENAI_API_KEY")
    if api_key:
        config = LLMConfig(
            api_key=api_key,
            base_url=(
                os.getenv("DEEPSEEK_BASE_URL") or os.getenv("OPENAI_API_BASE") or DEFAULT_BASE_URL
            ),
            model=os.getenv("LLM_MODEL", DEFAULT_MODEL),
            provider_type="openai-compatible",
        )
        return OpenAICompatibleProvider(config)

    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise ValueError(
            "No LLM provider configured. Set either:\n"
            "  - DEEPSEEK_API_KEY (or OPENAI_API_KEY) for an OpenAI-compatible endpoint\n"
            "  - ANTHROPIC_API_KEY for Anthropic Claude"
        )

    config = LLMConfig(
        api_key=api_key,
        base_url=os.getenv("ANTHROPIC_BASE_URL"),  # Optional, for proxy
        model=os.getenv("LLM_MODEL", DEFAULT_ANTHROPIC_MODEL),
        provider_type="anthropic",
    )
    return AnthropicProvider(config)


def create_provider(
    provider_type: str = "openai-compatible",
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    model: Optional[str] = None,
    **kwargs,
) -> LLMProvider:
    """
    Create an LLM provider with explicit configuration.

    Args:
        provider_type: "openai-compatible" or "anthropic"
        api_key: API key for the provider
        base_url: Base URL (endpoint for OpenAI-compatible, proxy for Anthropic)
        model: Model name
        **kwargs: Additional LLMConfig parameters

    Returns:
        Configured LLM provider instance
    """
    if provider_type == "anthropic":
        config = LLMConfig(
            api_key=api_key,
            base_url=base_url,
            model=model or DEFAULT_ANTHROPIC_MODEL,
            provider_type=provider_type,
            **kwargs,
        )
        return AnthropicProvider(config)

    config = LLMConfig(
        api_key=api_key,
        base_url=base_url or DEFAULT_BASE_URL,
        model=model or DEFAULT_MODEL,
        provider_type=provider_type,
        **kwargs,
    )
    return OpenAICompatibleProvider(config)
