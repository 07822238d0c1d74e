"""Shared fixtures."""

from unittest.mock import MagicMock

import pytest

from browser_pilot.browser.controller import BrowserConfig, BrowserHandle
from browser_pilot.config import AgentConfig

from tests.fakes import FakeBrowserStack, make_page


@pytest.fixture
def stack() -> FakeBrowserStack:
    return FakeBrowserStack()


@pytest.fixture
def page() -> MagicMock:
    return make_page()


@pytest.fixture
def handle(page: MagicMock) -> BrowserHandle:
    return BrowserHandle(page, BrowserConfig())


@pytest.fixture
def agent_config() -> AgentConfig:
    return AgentConfig(max_iterations=15, stream_screenshots=False, event_queue_size=100)
