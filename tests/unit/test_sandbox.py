"""
Unit tests for the remote sandbox backend.

This module tests:
- DevTools readiness polling
- Websocket endpoint rewriting
- Sandbox backend browser startup and teardown
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from browser_pilot.browser.controller import BrowserConfig
from browser_pilot.browser.sandbox import (
    RemoteSandbox,
    SandboxConfig,
    rewrite_ws_endpoint,
    wait_for_cdp,
)
from browser_pilot.browser.session import SandboxBrowserBackend, SessionManager
from browser_pilot.errors import SessionInitError

from tests.fakes import make_browser, make_context, make_page, make_playwright

HOST = "9222-sbx123.e2b.app"
VERSION = {
    "Browser": "Chrome/126.0",
    "webSocketDebuggerUrl": "ws://0.0.0.0:9222/devtools/browser/abc-123",
}


class TestRewriteWsEndpoint:
    """Test pointing DevTools URLs at the public host."""

    def test_rewrite(self):
        """Test scheme and host are replaced, path is kept."""
        assert (
            rewrite_ws_endpoint(VERSION["webSocketDebuggerUrl"], HOST)
            == f"wss://{HOST}/devtools/browser/abc-123"
        )


class TestWaitForCdp:
    """Test readiness polling."""

    @pytest.mark.asyncio
    async def test_polls_until_ready(self):
        """Test unavailable responses are retried until the browser answers."""
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(str(request.url))
            if len(attempts) < 3:
                return httpx.Response(502, text="Bad Gateway")
            return httpx.Response(200, json=VERSION)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            endpoint = await wait_for_cdp(HOST, timeout=5, poll_interval=0, client=client)

        assert endpoint == f"wss://{HOST}/devtools/browser/abc-123"
        assert len(attempts) == 3
        assert attempts[0] == f"https://{HOST}/json/version"

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Test a browser that never answers raises TimeoutError."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(TimeoutError, match="not ready"):
                await wait_for_cdp(HOST, timeout=0.05, poll_interval=0.01, client=client)

    @pytest.mark.asyncio
    async def test_missing_debugger_url_is_retried(self):
        """Test a reply without a websocket URL counts as not ready."""
        replies = iter([httpx.Response(200, json={}), httpx.Response(200, json=VERSION)])

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: next(replies))
        ) as client:
            endpoint = await wait_for_cdp(HOST, timeout=5, poll_interval=0, client=client)

        assert endpoint.startswith("wss://")


def fake_sdk_sandbox() -> MagicMock:
    sdk = MagicMock(name="e2b_sandbox")
    sdk.sandbox_id = "sbx123"
    sdk.get_host.return_value = HOST
    sdk.stream.get_url.return_value = "https://6080-sbx123.e2b.app/vnc.html"
    return sdk


class TestRemoteSandbox:
    """Test the E2B wrapper."""

    @pytest.mark.asyncio
    async def test_commands_run_in_background(self):
        """Test commands are started without waiting for them."""
        sdk = fake_sdk_sandbox()
        remote = RemoteSandbox(sdk)

        await remote.run_command("google-chrome")

        sdk.commands.run.assert_called_once_with("google-chrome", background=True)

    @pytest.mark.asyncio
    async def test_viewer_url_starts_stream_once(self):
        """Test the desktop stream is started on first use only."""
        sdk = fake_sdk_sandbox()
        remote = RemoteSandbox(sdk)

        first = await remote.viewer_url()
        second = await remote.viewer_url()

        assert first == second == "https://6080-sbx123.e2b.app/vnc.html"
        sdk.stream.start.assert_called_once()

    @pytest.mark.asyncio
    async def test_create(self):
        """Test sandbox creation passes the API key to the SDK."""
        with patch("browser_pilot.browser.sandbox.Sandbox") as sandbox_cls:
            sandbox_cls.create.return_value = fake_sdk_sandbox()
            remote = await RemoteSandbox.create("e2b_key")

        sandbox_cls.create.assert_called_once_with(api_key="e2b_key")
        assert remote.sandbox_id == "sbx123"


class TestSandboxBackend:
    """Test the CDP-connected sandbox browser."""

    @pytest.fixture
    def sdk(self) -> MagicMock:
        return fake_sdk_sandbox()

    @pytest.fixture
    def manager_parts(self, sdk):
        page = make_page()
        context = make_context(page)
        browser = make_browser()
        browser.contexts = [context]
        playwright = make_playwright(browser)

        config = SandboxConfig(api_key="e2b_key", cdp_port=9222)
        backend = SandboxBrowserBackend(BrowserConfig(), config)
        backend.create_sandbox = AsyncMock(return_value=RemoteSandbox(sdk))
        manager = SessionManager(
            backend=backend, playwright_factory=AsyncMock(return_value=playwright)
        )
        return manager, playwright, browser, context, page

    @pytest.mark.asyncio
    async def test_connects_over_cdp(self, sdk, manager_parts):
        """Test the browser is started remotely and reached over CDP."""
        manager, playwright, browser, context, page = manager_parts

        with patch(
            "browser_pilot.browser.session.wait_for_cdp",
            AsyncMock(return_value=f"wss://{HOST}/devtools/browser/abc"),
        ) as waiter:
            handle = await manager.acquire()

        command = sdk.commands.run.call_args.args[0]
        assert "--remote-debugging-port=9222" in command
        sdk.get_host.assert_called_once_with(9222)
        waiter.assert_awaited_once_with(HOST, timeout=30.0, poll_interval=0.5)
        playwright.chromium.connect_over_cdp.assert_awaited_once_with(
            f"wss://{HOST}/devtools/browser/abc"
        )
        # The browser's default context is reused
        browser.new_context.assert_not_awaited()
        assert manager.session.context is context
        assert handle.page is page

    @pytest.mark.asyncio
    async def test_snapshot_returns_viewer_url(self, manager_parts):
        """Test a sandbox session is described by its viewer URL."""
        manager = manager_parts[0]

        with patch(
            "browser_pilot.browser.session.wait_for_cdp",
            AsyncMock(return_value="wss://host/devtools"),
        ):
            result = await manager.snapshot()

        assert result.viewer_url == "https://6080-sbx123.e2b.app/vnc.html"
        assert result.screenshot is None

    @pytest.mark.asyncio
    async def test_shutdown_kills_sandbox(self, sdk, manager_parts):
        """Test the sandbox is destroyed after the browser connection."""
        manager, playwright, browser, context, page = manager_parts

        with patch(
            "browser_pilot.browser.session.wait_for_cdp",
            AsyncMock(return_value="wss://host/devtools"),
        ):
            await manager.acquire()
        await manager.shutdown()

        browser.close.assert_awaited_once()
        sdk.kill.assert_called_once()
        playwright.stop.assert_awaited_once()
        assert manager.session.is_empty

    @pytest.mark.asyncio
    async def test_cdp_timeout_kills_sandbox(self, sdk, manager_parts):
        """Test a browser that never becomes reachable releases the sandbox."""
        manager = manager_parts[0]

        with patch(
            "browser_pilot.browser.session.wait_for_cdp",
            AsyncMock(side_effect=TimeoutError("Browser DevTools endpoint not ready after 30s")),
        ):
            with pytest.raises(SessionInitError) as exc_info:
                await manager.acquire()

        assert exc_info.value.stage == "browser"
        sdk.kill.assert_called_once()
        assert manager.session.is_empty


class TestSandboxConfig:
    """Test sandbox configuration."""

    def test_disabled_without_key(self, monkeypatch):
        """Test the sandbox is off without an API key."""
        monkeypatch.delenv("E2B_API_KEY", raising=False)
        assert not SandboxConfig.from_env().enabled

    def test_from_env(self, monkeypatch):
        """Test settings are read from the environment."""
        monkeypatch.setenv("E2B_API_KEY", "e2b_key")
        monkeypatch.setenv("SANDBOX_CDP_PORT", "9333")
        monkeypatch.setenv("SANDBOX_READY_TIMEOUT", "12.5")

        config = SandboxConfig.from_env()

        assert config.enabled
        assert config.cdp_port == 9333
        assert config.ready_timeout == 12.5
