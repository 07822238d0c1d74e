#!/usr/bin/env python
"""
Simple Navigation Example

Demonstrates basic browser automation: navigate to a website and read its
content using a natural language instruction.

Usage:
    python examples/simple_navigation.py

Requirements:
    - DEEPSEEK_API_KEY (or OPENAI_API_KEY / ANTHROPIC_API_KEY) environment variable set
    - Browser pilot installed: pip install -e .
"""

import asyncio

from browser_pilot import AgentConfig, BrowserConfig, create_session_manager, stream_task
from browser_pilot.llm import create_provider_from_env


async def main():
    """Run simple navigation task."""
    provider = create_provider_from_env()

    # Show the browser window
    session_manager = create_session_manager(BrowserConfig(headless=False))

    # Task description in natural language
    task = "Navigate to https://example.com and tell me the page title"

    print(f"Task: {task}\n")

    try:
        async with session_manager:
            async for event in stream_task(
                task, provider, session_manager, config=AgentConfig(max_iterations=10)
            ):
                # Simple output - main.py has better formatting
                print(f"[{event.type.value}] {event.data}")
    finally:
        await provider.close()


if __name__ == "__main__":
    asyncio.run(main())
