"""
Browser Session Module

Playwright browser session management for the browser pilot:
local or remote-sandbox browsers, lazy creation and self-healing pages.
"""

from .controller import BrowserConfig, BrowserHandle
from .sandbox import RemoteSandbox, SandboxConfig
from .session import (
    BootstrapResult,
    LocalBrowserBackend,
    SandboxBrowserBackend,
    Session,
    SessionManager,
    create_session_manager,
)

__all__ = [
    "BrowserConfig",
    "BrowserHandle",
    "RemoteSandbox",
    "SandboxConfig",
    "BootstrapResult",
    "LocalBrowserBackend",
    "SandboxBrowserBackend",
    "Session",
    "SessionManager",
    "create_session_manager",
]
