"""
Browser Pilot CLI Entry Point

Provides the command-line interface for running browsing tasks.

Usage:
    browser-pilot "Your task description"
    browser-pilot "Your task" --verbose --headful
    browser-pilot --json "Your task"      # raw NDJSON event stream
    browser-pilot --serve                 # HTTP server
    browser-pilot                         # interactive session
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from dotenv import load_dotenv

from .agents.loop import stream_task
from .browser.controller import BrowserConfig
from .browser.session import SessionManager, create_session_manager
from .config import AgentConfig, configure_logging
from .events import EventType
from .llm import LLMProvider, create_provider_from_env
from .tui import get_console, print_error, render_event

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="browser-pilot",
        description="Drive a web browser with natural-language instructions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    browser-pilot "Navigate to example.com and tell me the page title"
    browser-pilot "Search Wikipedia for Python" --headful --verbose
    browser-pilot --serve --port 8000
        """,
    )

    parser.add_argument(
        "task",
        nargs="?",
        help="Natural language task description",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show progress logs as full panels",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the raw NDJSON event stream instead of formatted output",
    )

    parser.add_argument(
        "--headful",
        action="store_true",
        help="Show the local browser window",
    )

    parser.add_argument(
        "--start-url", "-u",
        type=str,
        default=None,
        help="Page loaded when the browser session starts",
    )

    parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Maximum model decisions per task (default: 15)",
    )

    parser.add_argument(
        "--serve",
        action="store_true",
        help="Start the HTTP server instead of running a task",
    )

    parser.add_argument("--host", type=str, default=None, help="Server host")
    parser.add_argument("--port", type=int, default=None, help="Server port")

    parser.add_argument(
        "--dev",
        action="store_true",
        help="Development mode with debug output",
    )

    return parser.parse_args(argv)


def build_configs(args: argparse.Namespace) -> tuple[BrowserConfig, AgentConfig]:
    """Apply command line overrides on top of environment configuration."""
    browser_config = BrowserConfig.from_env()
    if args.headful:
        browser_config.headless = False
    if args.start_url:
        browser_config.start_url = args.start_url

    agent_config = AgentConfig.from_env()
    if args.max_iterations is not None:
        agent_config.max_iterations = args.max_iterations

    return browser_config, agent_config


async def run_task(
    task: str,
    provider: LLMProvider,
    session_manager: SessionManager,
    agent_config: AgentConfig,
    verbose: bool = False,
    as_json: bool = False,
) -> bool:
    """
    Run one task and display its events as they arrive.

    Returns:
        True if the task ended with a final answer
    """
    succeeded = False

    async for event in stream_task(task, provider, session_manager, config=agent_config):
        if as_json:
            sys.stdout.write(event.to_ndjson())
            sys.stdout.flush()
        else:
            render_event(event, verbose=verbose)
        if event.type is EventType.RESPONSE:
            succeeded = True

    return succeeded


async def run_interactive_session(
    provider: LLMProvider,
    session_manager: SessionManager,
    agent_config: AgentConfig,
    verbose: bool = False,
) -> None:
    """
    Run tasks one after another against the same browser session.

    The browser page carries over between tasks; the conversation does not.
    """
    console = get_console()

    console.print("[bold]Browser Pilot[/bold] (interactive session)")
    console.print("Enter tasks to run. The browser stays open between tasks.")
    console.print("Commands: 'quit' to exit\n")

    while True:
        try:
            task = (await asyncio.to_thread(console.console.input, "[bold green]>[/bold green] ")).strip()
        except (EOFError, KeyboardInterrupt):
            console.print("\n[dim]Goodbye![/dim]")
            return

        if not task:
            continue
        if task.lower() in ("quit", "exit", "q"):
            return

        console.task_header(task)
        await run_task(task, provider, session_manager, agent_config, verbose=verbose)
        console.print()


async def run(args: argparse.Namespace) -> int:
    """Run the CLI command described by ``args``."""
    browser_config, agent_config = build_configs(args)

    try:
        provider = create_provider_from_env()
    except ValueError as e:
        print_error(str(e), error_type="ConfigError")
        return 2

    session_manager = create_session_manager(browser_config=browser_config)

    try:
        async with session_manager:
            if args.task:
                ok = await run_task(
                    args.task,
                    provider,
                    session_manager,
                    agent_config,
                    verbose=args.verbose,
                    as_json=args.json,
                )
                return 0 if ok else 1

            await run_interactive_session(
                provider, session_manager, agent_config, verbose=args.verbose
            )
            return 0
    finally:
        await provider.close()


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.dev:
        configure_logging(level=logging.DEBUG, verbose=True)
    else:
        configure_logging()

    if args.serve:
        from .server import serve

        serve(host=args.host, port=args.port)
        return 0

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        get_console().print("\n[yellow]Task interrupted by user[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
