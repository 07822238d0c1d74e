"""
Remote Sandbox

Runs the browser inside an E2B desktop sandbox and connects to it over the
Chrome DevTools Protocol. The sandbox owns the browser process; the local
side only ever holds a CDP connection.

Readiness is detected by polling the exposed /json/version endpoint rather
than sleeping for a fixed delay.
"""

import asyncio
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlsplit, urlunsplit

import httpx
from dotenv import load_dotenv
from e2b_desktop import Sandbox

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


@dataclass
class SandboxConfig:
    """
    Remote sandbox configuration.

    The sandbox backend is active only when api_key is set.
    """

    api_key: Optional[str] = None

    # Remote debugging port the sandbox browser listens on
    cdp_port: int = 9222

    # Readiness polling (seconds)
    ready_timeout: float = 30.0
    poll_interval: float = 0.5

    # Command used to start the remotely-debuggable browser
    browser_command: str = (
        "google-chrome --remote-debugging-port={port} --remote-debugging-address=0.0.0.0 "
        "--no-first-run --no-default-browser-check --user-data-dir=/tmp/chrome-profile "
        "about:blank"
    )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "SandboxConfig":
        """
        Create SandboxConfig from environment variables.

        Environment variables:
            E2B_API_KEY: sandbox API key (enables the sandbox backend)
            SANDBOX_CDP_PORT: int (default: 9222)
            SANDBOX_READY_TIMEOUT: seconds (default: 30)
            SANDBOX_POLL_INTERVAL: seconds (default: 0.5)
        """
        return cls(
            api_key=os.getenv("E2B_API_KEY") or None,
            cdp_port=int(os.getenv("SANDBOX_CDP_PORT", "9222")),
            ready_timeout=float(os.getenv("SANDBOX_READY_TIMEOUT", "30")),
            poll_interval=float(os.getenv("SANDBOX_POLL_INTERVAL", "0.5")),
        )


class RemoteSandbox:
    """
    Handle to a running E2B desktop sandbox.

    The E2B SDK is synchronous; calls run in worker threads so the event
    loop keeps flushing queued stream events meanwhile.
    """

    def __init__(self, sandbox: Any):
        self._sandbox = sandbox
        self._viewer_url: Optional[str] = None

    @property
    def sandbox_id(self) -> str:
        return getattr(self._sandbox, "sandbox_id", "unknown")

    @classmethod
    async def create(cls, api_key: str) -> "RemoteSandbox":
        """Provision a new desktop sandbox."""
        sandbox = await asyncio.to_thread(Sandbox.create, api_key=api_key)
        remote = cls(sandbox)
        logger.info("Created sandbox %s", remote.sandbox_id)
        return remote

    async def run_command(self, command: str) -> None:
        """Start a command without waiting for it to finish."""
        logger.debug("Sandbox %s: %s", self.sandbox_id, command)
        await asyncio.to_thread(self._sandbox.commands.run, command, background=True)

    def get_exposed_host(self, port: int) -> str:
        """Public hostname forwarding to ``port`` inside the sandbox."""
        return self._sandbox.get_host(port)

    async def viewer_url(self) -> str:
        """URL of the remote desktop stream, started on first use."""
        if self._viewer_url is None:
            await asyncio.to_thread(self._sandbox.stream.start)
            self._viewer_url = self._sandbox.stream.get_url()
        return self._viewer_url

    async def kill(self) -> None:
        logger.info("Destroying sandbox %s", self.sandbox_id)
        await asyncio.to_thread(self._sandbox.kill)


def rewrite_ws_endpoint(ws_url: str, host: str) -> str:
    """
    Point a DevTools websocket URL at the sandbox's public host.

    The browser reports its own bind address (e.g. ws://0.0.0.0:9222/...),
    which is unreachable from outside the sandbox.
    """
    parts = urlsplit(ws_url)
    return urlunsplit(("wss", host, parts.path, parts.query, parts.fragment))


async def wait_for_cdp(
    host: str,
    timeout: float = 30.0,
    poll_interval: float = 0.5,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Poll the DevTools endpoint until the browser answers.

    Args:
        host: Public host forwarding to the remote debugging port
        timeout: Maximum time to wait in seconds
        poll_interval: Delay between attempts in seconds
        client: Optional HTTP client (a temporary one is created otherwise)

    Returns:
        Websocket endpoint to pass to connect_over_cdp

    Raises:
        TimeoutError: If the endpoint does not answer within ``timeout``
    """
    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=5.0)
    url = f"https://{host}/json/version"
    deadline = time.monotonic() + timeout
    last_error: Optional[str] = None

    try:
        while True:
            try:
                response = await client.get(url)
                response.raise_for_status()
                ws_url = response.json()["webSocketDebuggerUrl"]
                return rewrite_ws_endpoint(ws_url, host)
            except (httpx.HTTPError, KeyError, ValueError) as e:
                last_error = str(e) or type(e).__name__

            if time.monotonic() >= deadline:
                raise TimeoutError(
                    f"Browser DevTools endpoint not ready after {timeout}s: {last_error}"
                )
            await asyncio.sleep(poll_interval)
    finally:
        if owns_client:
            await client.aclose()
