"""
Session Manager

Owns the live browser session (browser, context, page and, in the sandbox
variant, the remote sandbox) and hands out BrowserHandles to agent tasks.

- Lazy creation on first acquire()
- Self-healing: a closed page is replaced without restarting the browser
- Ordered teardown: page -> context -> browser -> sandbox
- No partial sessions: a failed initialization releases everything it created
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from pydantic import BaseModel

from ..errors import SessionInitError
from .controller import BrowserConfig, BrowserHandle
from .sandbox import RemoteSandbox, SandboxConfig, wait_for_cdp

logger = logging.getLogger(__name__)


PlaywrightFactory = Callable[[], Awaitable[Playwright]]


async def _start_playwright() -> Playwright:
    return await async_playwright().start()


@dataclass
class Session:
    """
    Live browser resources.

    Fields are filled in dependency order and released in reverse.
    """

    playwright: Optional[Playwright] = None
    sandbox: Optional[RemoteSandbox] = None
    browser: Optional[Browser] = None
    context: Optional[BrowserContext] = None
    page: Optional[Page] = None

    @property
    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.playwright, self.sandbox, self.browser, self.context, self.page)
        )


class BootstrapResult(BaseModel):
    """What a client needs to show the live browser."""

    success: bool = True
    screenshot: Optional[str] = None
    viewer_url: Optional[str] = None


class BrowserBackend(ABC):
    """Strategy for obtaining the browser process or connection."""

    name: str = "base"

    def __init__(self, browser_config: BrowserConfig):
        self.browser_config = browser_config

    async def create_sandbox(self) -> Optional[RemoteSandbox]:
        """Provision the remote environment, if this backend uses one."""
        return None

    @abstractmethod
    async def start_browser(
        self, playwright: Playwright, sandbox: Optional[RemoteSandbox]
    ) -> Browser:
        """Launch or connect to the browser."""

    async def open_context(self, browser: Browser) -> BrowserContext:
        return await browser.new_context(viewport=self.browser_config.viewport)

    @abstractmethod
    async def describe(
        self, handle: BrowserHandle, sandbox: Optional[RemoteSandbox]
    ) -> BootstrapResult:
        """Build the bootstrap payload for a live session."""


class LocalBrowserBackend(BrowserBackend):
    """Launches a browser process on this machine."""

    name = "local"

    async def start_browser(
        self, playwright: Playwright, sandbox: Optional[RemoteSandbox]
    ) -> Browser:
        launcher = getattr(playwright, self.browser_config.browser_type, playwright.chromium)
        return await launcher.launch(headless=self.browser_config.headless)

    async def describe(
        self, handle: BrowserHandle, sandbox: Optional[RemoteSandbox]
    ) -> BootstrapResult:
        return BootstrapResult(screenshot=await handle.screenshot_base64())


class SandboxBrowserBackend(BrowserBackend):
    """
    Runs the browser inside a remote sandbox and connects over CDP.

    The sandbox owns the browser process; this side holds only a connection.
    """

    name = "sandbox"

    def __init__(self, browser_config: BrowserConfig, sandbox_config: SandboxConfig):
        super().__init__(browser_config)
        self.sandbox_config = sandbox_config

    async def create_sandbox(self) -> Optional[RemoteSandbox]:
        return await RemoteSandbox.create(self.sandbox_config.api_key)

    async def start_browser(
        self, playwright: Playwright, sandbox: Optional[RemoteSandbox]
    ) -> Browser:
        if sandbox is None:
            raise RuntimeError("Sandbox backend requires a running sandbox")

        port = self.sandbox_config.cdp_port
        await sandbox.run_command(self.sandbox_config.browser_command.format(port=port))

        host = sandbox.get_exposed_host(port)
        endpoint = await wait_for_cdp(
            host,
            timeout=self.sandbox_config.ready_timeout,
            poll_interval=self.sandbox_config.poll_interval,
        )
        logger.info("Connecting to sandbox browser at %s", host)
        return await playwright.chromium.connect_over_cdp(endpoint)

    async def open_context(self, browser: Browser) -> BrowserContext:
        # Reuse the browser's default context so pages show on the remote desktop
        if browser.contexts:
            return browser.contexts[0]
        return await super().open_context(browser)

    async def describe(
        self, handle: BrowserHandle, sandbox: Optional[RemoteSandbox]
    ) -> BootstrapResult:
        if sandbox is None:
            raise RuntimeError("Sandbox session has no sandbox")
        return BootstrapResult(viewer_url=await sandbox.viewer_url())


class SessionManager:
    """
    Lazily creates, heals and tears down the shared browser session.

    One instance is created by the application and passed to the agent loop.
    acquire() and shutdown() are serialized on an internal lock; lease()
    additionally reserves the session for a whole task.

    Usage:
        >>> manager = create_session_manager()
        >>> async with manager.lease() as handle:
        ...     await handle.navigate("https://example.com")
        >>> await manager.shutdown()
    """

    def __init__(
        self,
        backend: Optional[BrowserBackend] = None,
        browser_config: Optional[BrowserConfig] = None,
        playwright_factory: Optional[PlaywrightFactory] = None,
    ):
        """
        Initialize session manager.

        Args:
            backend: Browser strategy (local launch by default)
            browser_config: Browser configuration (uses env if None)
            playwright_factory: Coroutine factory starting the Playwright driver
        """
        self.browser_config = browser_config or (
            backend.browser_config if backend else BrowserConfig.from_env()
        )
        self.backend = backend or LocalBrowserBackend(self.browser_config)
        self._playwright_factory = playwright_factory or _start_playwright

        self._session = Session()
        self._state_lock = asyncio.Lock()
        self._lease_lock = asyncio.Lock()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def is_active(self) -> bool:
        return not self._session.is_empty

    async def acquire(self) -> BrowserHandle:
        """
        Return a ready-to-use handle, creating or healing the session.

        Raises:
            SessionInitError: If the session cannot be established
        """
        async with self._state_lock:
            session = self._session

            if session.browser is None:
                await self._initialize()
            elif not session.browser.is_connected():
                logger.warning("Browser connection lost, reinitializing session")
                await self._release()
                await self._initialize()
            elif session.page is None or session.page.is_closed():
                await self._heal()

            return BrowserHandle(self._session.page, self.browser_config)

    @asynccontextmanager
    async def lease(self) -> AsyncIterator[BrowserHandle]:
        """Hold the session exclusively for the duration of one task."""
        async with self._lease_lock:
            yield await self.acquire()

    async def snapshot(self) -> BootstrapResult:
        """Ensure the session exists and describe how to view it."""
        handle = await self.acquire()
        return await self.backend.describe(handle, self._session.sandbox)

    async def shutdown(self) -> None:
        """Release every resource. Safe to call with no active session."""
        async with self._state_lock:
            if not self.is_active:
                logger.debug("Shutdown requested with no active session")
                return
            await self._release()
            logger.info("Browser session shut down")

    async def _initialize(self) -> None:
        session = self._session
        stage = "playwright"
        logger.info("Starting %s browser session", self.backend.name)

        try:
            session.playwright = await self._playwright_factory()
            stage = "sandbox"
            session.sandbox = await self.backend.create_sandbox()
            stage = "browser"
            session.browser = await self.backend.start_browser(
                session.playwright, session.sandbox
            )
            stage = "context"
            session.context = await self.backend.open_context(session.browser)
            stage = "page"
            session.page = await session.context.new_page()
            stage = "navigation"
            await self._open_start_page(session.page)
        except Exception as e:
            logger.error("Session initialization failed during %s: %s", stage, e)
            await self._release()
            raise SessionInitError(
                f"Failed to initialize browser session ({stage}): {e}", stage=stage
            ) from e

    async def _heal(self) -> None:
        session = self._session
        logger.info("Page was closed, opening a new one")

        try:
            if session.context is None:
                session.context = await self.backend.open_context(session.browser)
            session.page = await session.context.new_page()
            await self._open_start_page(session.page)
        except Exception as e:
            if session.page is not None:
                await _close_quietly("page", session.page.close)
                session.page = None
            raise SessionInitError(f"Failed to recreate page: {e}", stage="page") from e

    async def _open_start_page(self, page: Page) -> None:
        await page.goto(
            self.browser_config.start_url,
            wait_until="networkidle",
            timeout=self.browser_config.navigation_timeout,
        )

    async def _release(self) -> None:
        session = self._session

        if session.page is not None:
            await _close_quietly("page", session.page.close)
            session.page = None
        if session.context is not None:
            await _close_quietly("context", session.context.close)
            session.context = None
        if session.browser is not None:
            await _close_quietly("browser", session.browser.close)
            session.browser = None
        if session.sandbox is not None:
            await _close_quietly("sandbox", session.sandbox.kill)
            session.sandbox = None
        if session.playwright is not None:
            await _close_quietly("playwright", session.playwright.stop)
            session.playwright = None

    async def __aenter__(self) -> "SessionManager":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.shutdown()


async def _close_quietly(label: str, close: Callable[[], Awaitable[Any]]) -> None:
    try:
        await close()
    except Exception as e:
        logger.warning("Failed to close %s: %s", label, e)


def create_session_manager(
    browser_config: Optional[BrowserConfig] = None,
    sandbox_config: Optional[SandboxConfig] = None,
) -> SessionManager:
    """
    Factory function to create a session manager.

    The sandbox backend is used when a sandbox API key is configured.

    Args:
        browser_config: Browser configuration (uses env if None)
        sandbox_config: Sandbox configuration (uses env if None)

    Returns:
        Configured SessionManager instance
    """
    browser_config = browser_config or BrowserConfig.from_env()
    sandbox_config = sandbox_config or SandboxConfig.from_env()

    if sandbox_config.enabled:
        backend: BrowserBackend = SandboxBrowserBackend(browser_config, sandbox_config)
    else:
        backend = LocalBrowserBackend(browser_config)

    return SessionManager(backend=backend, browser_config=browser_config)
