#!/usr/bin/env python
"""
Multi-Step Task Example

Demonstrates a task needing several tool rounds (navigate, type, click,
extract) and a follow-up task that reuses the same browser page.

Usage:
    python examples/multi_step_task.py

Requirements:
    - DEEPSEEK_API_KEY (or OPENAI_API_KEY / ANTHROPIC_API_KEY) environment variable set
    - Browser pilot installed: pip install -e .
"""

import asyncio

from browser_pilot import AgentConfig, BrowserConfig, create_session_manager, stream_task
from browser_pilot.llm import create_provider_from_env
from browser_pilot.tui import render_event


async def main():
    """Run two tasks against one browser session."""
    provider = create_provider_from_env()
    session_manager = create_session_manager(BrowserConfig(headless=False))

    # Allow more iterations for complex tasks
    config = AgentConfig(max_iterations=20)

    tasks = [
        """
        Navigate to Wikipedia (https://www.wikipedia.org), search for "Python programming language",
        and tell me when the language was first released and who designed it.
        """,
        # The page from the previous task is still open
        "Scroll down the current page and summarize the 'History' section.",
    ]

    try:
        async with session_manager:
            for task in tasks:
                print(f"Task: {task.strip()}\n")
                print("=" * 60)

                async for event in stream_task(task, provider, session_manager, config=config):
                    render_event(event, verbose=True)
                print()
    finally:
        await provider.close()


if __name__ == "__main__":
    asyncio.run(main())
