"""
Browser Controller

Browser configuration and the BrowserHandle wrapper around one live
Playwright page. Every handle operation is atomic and carries its own timeout.
"""

import base64
import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Literal, Optional

from dotenv import load_dotenv
from playwright.async_api import Page

from ..config import env_flag
from ..errors import ToolExecutionFault

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


BrowserType = Literal["chromium", "firefox", "webkit"]


@dataclass
class BrowserConfig:
    """
    Configuration for the browser session.

    Reads from environment variables with sensible defaults.
    """

    # Browser type (chromium is Playwright's Chrome-based browser)
    browser_type: BrowserType = "chromium"

    # Headless by default; the page is shown to users through snapshots
    headless: bool = True

    # Viewport size
    viewport_width: int = 1280
    viewport_height: int = 720

    # Neutral page loaded when a session (or its page) is created
    start_url: str = "https://google.com"

    # Navigation timeout in ms
    navigation_timeout: int = 30000

    # Click / fill / wait-for-selector timeout in ms
    action_timeout: int = 5000

    # JPEG quality for page snapshots
    snapshot_quality: int = 50

    @classmethod
    def from_env(cls) -> "BrowserConfig":
        """
        Create BrowserConfig from environment variables.

        Environment variables:
            BROWSER_TYPE: chromium, firefox, or webkit (default: chromium)
            BROWSER_HEADLESS: true/false (default: true)
            BROWSER_VIEWPORT_WIDTH: int (default: 1280)
            BROWSER_VIEWPORT_HEIGHT: int (default: 720)
            BROWSER_START_URL: url (default: https://google.com)
            NAVIGATION_TIMEOUT: int in ms (default: 30000)
            ACTION_TIMEOUT: int in ms (default: 5000)
        """
        env_type = os.getenv("BROWSER_TYPE", "chromium").lower()
        browser_type_map = {
            "chrome": "chromium",
            "chromium": "chromium",
            "firefox": "firefox",
            "webkit": "webkit",
            "safari": "webkit",
        }

        return cls(
            browser_type=browser_type_map.get(env_type, "chromium"),
            headless=env_flag("BROWSER_HEADLESS", default=True),
            viewport_width=int(os.getenv("BROWSER_VIEWPORT_WIDTH", "1280")),
            viewport_height=int(os.getenv("BROWSER_VIEWPORT_HEIGHT", "720")),
            start_url=os.getenv("BROWSER_START_URL", "https://google.com"),
            navigation_timeout=int(os.getenv("NAVIGATION_TIMEOUT", "30000")),
            action_timeout=int(os.getenv("ACTION_TIMEOUT", "5000")),
            snapshot_quality=int(os.getenv("SNAPSHOT_QUALITY", "50")),
        )

    @property
    def viewport(self) -> dict[str, int]:
        return {"width": self.viewport_width, "height": self.viewport_height}


def normalize_url(url: str) -> str:
    """Prefix a scheme when the model passes a bare host."""
    url = url.strip()
    if not url.startswith(("http://", "https://", "file://", "about:", "data:")):
        return f"https://{url}"
    return url


class BrowserHandle:
    """
    Live, navigable page that tools operate on.

    Low-level automation failures surface as ToolExecutionFault so tools can
    turn them into text for the model.

    Usage:
        >>> handle = await session_manager.acquire()
        >>> await handle.navigate("https://example.com")
        >>> text = await handle.text_content("h1")
    """

    def __init__(self, page: Page, config: Optional[BrowserConfig] = None):
        self.page = page
        self.config = config or BrowserConfig()

    @property
    def url(self) -> str:
        return self.page.url

    def is_closed(self) -> bool:
        return self.page.is_closed()

    @asynccontextmanager
    async def _operation(self, name: str) -> AsyncIterator[None]:
        try:
            yield
        except ToolExecutionFault:
            raise
        except Exception as e:
            logger.debug("Browser operation %s failed: %s", name, e)
            raise ToolExecutionFault(name, str(e)) from e

    async def navigate(self, url: str, timeout: Optional[int] = None) -> None:
        """Navigate and wait until the network is idle."""
        async with self._operation("navigate"):
            await self.page.goto(
                normalize_url(url),
                wait_until="networkidle",
                timeout=timeout or self.config.navigation_timeout,
            )

    async def click(self, selector: str, timeout: Optional[int] = None) -> None:
        async with self._operation("click"):
            await self.page.click(selector, timeout=timeout or self.config.action_timeout)

    async def fill(self, selector: str, text: str, timeout: Optional[int] = None) -> None:
        async with self._operation("fill"):
            await self.page.fill(selector, text, timeout=timeout or self.config.action_timeout)

    async def scroll_by(self, pixels: float) -> None:
        async with self._operation("scroll"):
            await self.page.evaluate("(y) => window.scrollBy(0, y)", pixels)

    async def wait_for_selector(self, selector: str, timeout: Optional[int] = None) -> None:
        async with self._operation("wait_for_selector"):
            await self.page.wait_for_selector(
                selector, timeout=timeout or self.config.action_timeout
            )

    async def wait_for(self, duration_ms: float) -> None:
        async with self._operation("wait"):
            await self.page.wait_for_timeout(duration_ms)

    async def text_content(self, selector: Optional[str] = None) -> Optional[str]:
        """
        Get the text content of an element, or of the page body.

        Returns:
            The element text, or None when no element matches
        """
        async with self._operation("extract_text"):
            element = await self.page.query_selector(selector or "body")
            if element is None:
                return None
            return await element.text_content()

    async def screenshot_base64(self, quality: Optional[int] = None) -> str:
        """Capture a low-quality JPEG of the viewport as base64."""
        async with self._operation("screenshot"):
            data = await self.page.screenshot(
                type="jpeg",
                quality=quality or self.config.snapshot_quality,
            )
        return base64.b64encode(data).decode("ascii")
