"""
Configuration and Logging Setup

Provides centralized configuration and logging for the browser pilot.
Reads LOG_LEVEL and AGENT_* settings from environment variables.

Usage:
    from browser_pilot.config import AgentConfig, configure_logging

    # Configure at application startup
    configure_logging()

    # Loop settings
    config = AgentConfig.from_env()
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Default configuration
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s: %(message)s"

# Valid log levels
VALID_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Third-party loggers quieted outside debug mode
NOISY_LOGGERS = ("playwright", "asyncio", "httpx", "httpcore", "e2b", "uvicorn.access")


def env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean flag from the environment."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes")


@dataclass
class AgentConfig:
    """
    Agent loop configuration.

    Attributes:
        max_iterations: Hard ceiling on Decide/Act cycles per task
        stream_screenshots: Emit a screenshot event after every tool call
        event_queue_size: Capacity of the bounded event channel
    """

    max_iterations: int = 15
    stream_screenshots: bool = False
    event_queue_size: int = 100

    @classmethod
    def from_env(cls) -> "AgentConfig":
        """
        Create AgentConfig from environment variables.

        Environment variables:
            AGENT_MAX_ITERATIONS: int (default: 15)
            AGENT_STREAM_SCREENSHOTS: true/false (default: false)
            AGENT_EVENT_QUEUE_SIZE: int (default: 100)
        """
        return cls(
            max_iterations=int(os.getenv("AGENT_MAX_ITERATIONS", "15")),
            stream_screenshots=env_flag("AGENT_STREAM_SCREENSHOTS"),
            event_queue_size=int(os.getenv("AGENT_EVENT_QUEUE_SIZE", "100")),
        )


def get_log_level() -> int:
    """
    Get the log level from LOG_LEVEL environment variable.

    Returns:
        Logging level constant (e.g., logging.INFO)

    Supported values:
        DEBUG, INFO, WARNING, ERROR, CRITICAL
    """
    level_str = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    if level_str not in VALID_LEVELS:
        print(
            f"Warning: Invalid LOG_LEVEL '{level_str}'. "
            f"Valid values: {', '.join(VALID_LEVELS.keys())}. "
            f"Using {DEFAULT_LOG_LEVEL}.",
            file=sys.stderr,
        )
        return VALID_LEVELS[DEFAULT_LOG_LEVEL]

    return VALID_LEVELS[level_str]


def configure_logging(
    level: Optional[int] = None,
    verbose: bool = False,
) -> None:
    """
    Configure logging for the browser pilot.

    Should be called once at application startup.

    Args:
        level: Override log level (default: from LOG_LEVEL env var)
        verbose: Use detailed format with timestamps (default: simple format)
    """
    if level is None:
        level = get_log_level()

    log_format = LOG_FORMAT if verbose else LOG_FORMAT_SIMPLE

    logging.basicConfig(
        level=level,
        format=log_format,
        stream=sys.stderr,
        force=True,
    )

    logging.getLogger("browser_pilot").setLevel(level)

    if level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
