"""
Unit tests for the browser tools.

This module tests:
- Each tool's success and failure text
- Failure isolation (browser faults become text, never exceptions)
- Argument validation and tool schemas
- Operation tagging of browser faults
- Registry exhaustiveness
"""

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from pydantic import ValidationError

from browser_pilot.errors import ToolExecutionFault
from browser_pilot.events import EventType, RecordingSink
from browser_pilot.tools import (
    NO_TEXT_FOUND,
    Tool,
    ToolKind,
    ToolRegistry,
    create_default_registry,
)


@pytest.fixture
def registry() -> ToolRegistry:
    return create_default_registry()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


async def invoke(registry, name, arguments, handle, sink) -> str:
    return await registry.get(name).invoke(arguments, handle, sink)


class TestNavigate:
    """Test the navigate tool."""

    @pytest.mark.asyncio
    async def test_navigate(self, registry, handle, page, sink):
        """Test navigation waits for network idle and reports the URL."""
        result = await invoke(registry, "navigate", {"url": "https://example.com"}, handle, sink)

        assert result == "Navigated to https://example.com"
        page.goto.assert_awaited_once_with(
            "https://example.com", wait_until="networkidle", timeout=30000
        )
        assert sink.events[0].data == "Navigating to https://example.com..."

    @pytest.mark.asyncio
    async def test_bare_host_gets_scheme(self, registry, handle, page, sink):
        """Test a URL without scheme is opened over https."""
        await invoke(registry, "navigate", {"url": "example.com"}, handle, sink)
        assert page.goto.await_args.args[0] == "https://example.com"

    @pytest.mark.asyncio
    async def test_navigation_timeout_is_not_fatal(self, registry, handle, page, sink):
        """Test a navigation timeout is logged and still reported as navigated."""
        page.goto.side_effect = PlaywrightTimeoutError("Timeout 30000ms exceeded.")

        result = await invoke(registry, "navigate", {"url": "https://slow.example"}, handle, sink)

        assert result == "Navigated to https://slow.example"
        assert sink.types() == [EventType.LOG, EventType.LOG]
        assert sink.events[1].data.startswith("Navigation timeout/error:")
        assert sink.events[1].data.endswith("Continuing...")


class TestClick:
    """Test the click tool."""

    @pytest.mark.asyncio
    async def test_click(self, registry, handle, page, sink):
        """Test clicking uses the short action timeout."""
        result = await invoke(registry, "click", {"selector": "#submit"}, handle, sink)

        assert result == "Clicked on element: #submit"
        page.click.assert_awaited_once_with("#submit", timeout=5000)
        assert sink.events[0].data == "Clicking #submit..."

    @pytest.mark.asyncio
    async def test_missing_element(self, registry, handle, page, sink):
        """Test a selector that never matches yields a failure text."""
        page.click.side_effect = PlaywrightTimeoutError("Timeout 5000ms exceeded.")

        result = await invoke(registry, "click", {"selector": "#missing"}, handle, sink)

        assert result == "Failed to click #missing: Timeout 5000ms exceeded."


class TestTypeText:
    """Test the type tool."""

    @pytest.mark.asyncio
    async def test_type(self, registry, handle, page, sink):
        """Test typing fills the field and echoes the text."""
        result = await invoke(
            registry, "type", {"selector": "input[name=q]", "text": "python"}, handle, sink
        )

        assert result == 'Typed "python" into input[name=q]'
        page.fill.assert_awaited_once_with("input[name=q]", "python", timeout=5000)
        assert sink.events[0].data == 'Typing "python"...'

    @pytest.mark.asyncio
    async def test_type_failure(self, registry, handle, page, sink):
        """Test a missing input yields a failure text."""
        page.fill.side_effect = PlaywrightTimeoutError("Timeout 5000ms exceeded.")

        result = await invoke(
            registry, "type", {"selector": "#nope", "text": "x"}, handle, sink
        )

        assert result == "Failed to type into #nope: Timeout 5000ms exceeded."


class TestScroll:
    """Test the scroll tool."""

    @pytest.mark.asyncio
    async def test_default_amount(self, registry, handle, page, sink):
        """Test scrolling defaults to 500 pixels."""
        result = await invoke(registry, "scroll", {}, handle, sink)

        assert result == "Scrolled down 500px"
        page.evaluate.assert_awaited_once_with("(y) => window.scrollBy(0, y)", 500)
        assert sink.events[0].data == "Scrolling down..."

    @pytest.mark.asyncio
    async def test_scroll_failure_still_reports(self, registry, handle, page, sink):
        """Test a failed page evaluation is logged, not raised."""
        page.evaluate.side_effect = RuntimeError("Execution context was destroyed")

        result = await invoke(registry, "scroll", {"amount": 200}, handle, sink)

        assert result == "Scrolled down 200px"

    @pytest.mark.asyncio
    async def test_fractional_amount(self, registry, handle, page, sink):
        """Test a fractional pixel amount is scrolled rather than rejected."""
        result = await invoke(registry, "scroll", {"amount": 250.5}, handle, sink)

        assert result == "Scrolled down 250.5px"
        page.evaluate.assert_awaited_once_with("(y) => window.scrollBy(0, y)", 250.5)


class TestWait:
    """Test the wait tool."""

    @pytest.mark.asyncio
    async def test_wait_for_selector(self, registry, handle, page, sink):
        """Test waiting for an element that appears."""
        result = await invoke(registry, "wait", {"selector": ".results"}, handle, sink)

        assert result == "Element .results appeared"
        page.wait_for_selector.assert_awaited_once_with(".results", timeout=5000)

    @pytest.mark.asyncio
    async def test_wait_for_selector_timeout(self, registry, handle, page, sink):
        """Test an element that never appears yields a timeout text."""
        page.wait_for_selector.side_effect = PlaywrightTimeoutError("Timeout 5000ms exceeded.")

        result = await invoke(registry, "wait", {"selector": ".never"}, handle, sink)

        assert result == "Element .never did not appear within timeout"

    @pytest.mark.asyncio
    async def test_wait_duration(self, registry, handle, page, sink):
        """Test a fixed wait defaults to 1000ms."""
        result = await invoke(registry, "wait", {}, handle, sink)

        assert result == "Waited 1000ms"
        page.wait_for_timeout.assert_awaited_once_with(1000)

    @pytest.mark.asyncio
    async def test_wait_duration_is_capped(self, registry, handle, page, sink):
        """Test very long waits are bounded."""
        result = await invoke(registry, "wait", {"duration": 10_000_000}, handle, sink)

        assert result == "Waited 30000ms"

    @pytest.mark.asyncio
    async def test_fractional_duration(self, registry, handle, page, sink):
        """Test a fractional duration is waited rather than rejected."""
        result = await invoke(registry, "wait", {"duration": 1500.5}, handle, sink)

        assert result == "Waited 1500.5ms"
        page.wait_for_timeout.assert_awaited_once_with(1500.5)
        assert sink.events[0].data == "Waiting 1500.5ms..."

    @pytest.mark.asyncio
    async def test_whole_float_duration(self, registry, handle, page, sink):
        """Test a whole-number float is reported without a decimal part."""
        result = await invoke(registry, "wait", {"duration": 2000.0}, handle, sink)
        assert result == "Waited 2000ms"

    @pytest.mark.asyncio
    async def test_negative_duration_rejected(self, registry, handle, sink):
        """Test negative durations fail validation."""
        with pytest.raises(ValidationError):
            await invoke(registry, "wait", {"duration": -5}, handle, sink)


class TestExtractText:
    """Test the extract_text tool."""

    @pytest.mark.asyncio
    async def test_defaults_to_body(self, registry, handle, page, sink):
        """Test extraction without a selector reads the page body."""
        result = await invoke(registry, "extract_text", {}, handle, sink)

        assert result == "Example Domain"
        page.query_selector.assert_awaited_once_with("body")
        assert sink.events[0].data == "Extracting text..."

    @pytest.mark.asyncio
    async def test_selector(self, registry, handle, page, sink):
        """Test extraction from a specific element."""
        await invoke(registry, "extract_text", {"selector": "h1"}, handle, sink)
        page.query_selector.assert_awaited_once_with("h1")

    @pytest.mark.asyncio
    async def test_missing_element(self, registry, handle, page, sink):
        """Test a selector matching nothing returns the sentinel."""
        page.query_selector.return_value = None

        result = await invoke(registry, "extract_text", {"selector": "#gone"}, handle, sink)

        assert result == NO_TEXT_FOUND

    @pytest.mark.asyncio
    async def test_empty_text(self, registry, handle, page, sink):
        """Test an element without text returns the sentinel."""
        page.query_selector.return_value.text_content.return_value = ""

        result = await invoke(registry, "extract_text", {}, handle, sink)

        assert result == NO_TEXT_FOUND

    @pytest.mark.asyncio
    async def test_failure(self, registry, handle, page, sink):
        """Test a page error returns the sentinel."""
        page.query_selector.side_effect = RuntimeError("Target page has been closed")

        result = await invoke(registry, "extract_text", {}, handle, sink)

        assert result == NO_TEXT_FOUND


class TestBrowserHandleFaults:
    """Test browser failures are tagged with the page operation."""

    @pytest.mark.asyncio
    async def test_fault_names_operation(self, handle, page):
        """Test a failing fill raises ToolExecutionFault tagged with the operation."""
        page.fill.side_effect = PlaywrightTimeoutError("Timeout 5000ms exceeded.")

        with pytest.raises(ToolExecutionFault) as exc_info:
            await handle.fill("#nope", "x")

        assert exc_info.value.operation == "fill"
        assert str(exc_info.value) == "Timeout 5000ms exceeded."

    @pytest.mark.asyncio
    async def test_screenshot_fault_names_operation(self, handle, page):
        """Test a failing screenshot is tagged as a screenshot."""
        page.screenshot.side_effect = RuntimeError("Target page crashed")

        with pytest.raises(ToolExecutionFault) as exc_info:
            await handle.screenshot_base64()

        assert exc_info.value.operation == "screenshot"


class TestValidation:
    """Test argument validation."""

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, registry, handle, sink):
        """Test a required argument that is absent raises ValidationError."""
        with pytest.raises(ValidationError):
            await invoke(registry, "click", {}, handle, sink)

    @pytest.mark.asyncio
    async def test_none_arguments_use_defaults(self, registry, handle, sink):
        """Test None arguments are treated as empty."""
        result = await registry.get("scroll").invoke(None, handle, sink)
        assert result == "Scrolled down 500px"


class TestRegistry:
    """Test the tool registry."""

    def test_every_kind_registered(self, registry):
        """Test the default registry covers the whole catalogue."""
        assert sorted(registry.names()) == sorted(kind.value for kind in ToolKind)
        assert len(registry) == 6
        for kind in ToolKind:
            assert kind.value in registry

    def test_unknown_tool(self, registry):
        """Test unknown names resolve to None."""
        assert registry.get("delete_everything") is None
        assert "delete_everything" not in registry

    def test_missing_kind_rejected(self, registry):
        """Test a registry without every kind cannot be built."""
        partial = [t for t in registry if t.kind is not ToolKind.WAIT]
        with pytest.raises(ValueError, match="wait"):
            ToolRegistry(partial)

    def test_schemas(self, registry):
        """Test schemas carry name, description and JSON Schema parameters."""
        schemas = {s["name"]: s for s in registry.schemas()}

        navigate = schemas["navigate"]
        assert navigate["description"] == "Navigate to a URL in the browser"
        assert navigate["parameters"]["type"] == "object"
        assert navigate["parameters"]["required"] == ["url"]
        assert "title" not in navigate["parameters"]
        assert "title" not in navigate["parameters"]["properties"]["url"]

        assert schemas["type"]["parameters"]["required"] == ["selector", "text"]
        assert "required" not in schemas["extract_text"]["parameters"]
        assert schemas["scroll"]["parameters"]["properties"]["amount"]["default"] == 500
        assert schemas["scroll"]["parameters"]["properties"]["amount"]["type"] == "number"
        assert schemas["wait"]["parameters"]["properties"]["duration"]["type"] == "number"

    def test_tool_name(self, registry):
        """Test tool names match their kind."""
        tool = registry.get("extract_text")
        assert isinstance(tool, Tool)
        assert tool.name == "extract_text"
        assert tool.kind is ToolKind.EXTRACT_TEXT
