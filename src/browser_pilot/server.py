"""
HTTP Server

Thin FastAPI transport over the agent loop:
- POST /api/agent  stream a task's events as newline-delimited JSON
- GET  /api/init   make sure the browser session exists and show it

Usage:
    browser-pilot --serve
    uvicorn --factory browser_pilot.server:create_app
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from .agents.loop import stream_task
from .browser.session import SessionManager, create_session_manager
from .config import AgentConfig
from .events import EventType, StreamEvent
from .llm import LLMProvider, create_provider_from_env

logger = logging.getLogger(__name__)

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


class AgentRequest(BaseModel):
    message: Optional[str] = None


def create_app(
    session_manager: Optional[SessionManager] = None,
    provider_factory: Callable[[], LLMProvider] = create_provider_from_env,
    config: Optional[AgentConfig] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        session_manager: Shared browser session (created from env if None)
        provider_factory: Creates the model provider on first use
        config: Agent loop settings (uses env if None)

    Returns:
        Configured FastAPI app
    """
    manager = session_manager or create_session_manager()
    agent_config = config or AgentConfig.from_env()
    providers: list[LLMProvider] = []

    def get_provider() -> LLMProvider:
        if not providers:
            providers.append(provider_factory())
        return providers[0]

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        for provider in providers:
            await provider.close()
        await manager.shutdown()

    app = FastAPI(title="Browser Pilot", version="0.1.0", lifespan=lifespan)
    app.state.session_manager = manager

    @app.post("/api/agent")
    async def run_agent(request: AgentRequest):
        """Run a browsing task and stream its events."""
        if not request.message:
            return JSONResponse(status_code=400, content={"error": "Message is required"})

        try:
            provider = get_provider()
        except ValueError as e:
            logger.error("No model provider: %s", e)
            return _single_event_stream(StreamEvent(type=EventType.ERROR, data=str(e)))

        async def body() -> AsyncIterator[str]:
            async for event in stream_task(
                request.message, provider, manager, config=agent_config
            ):
                yield event.to_ndjson()

        return StreamingResponse(body(), media_type="text/event-stream", headers=STREAM_HEADERS)

    @app.get("/api/init")
    async def init_session():
        """Ensure the browser session exists and return a snapshot or viewer URL."""
        try:
            result = await manager.snapshot()
        except Exception as e:
            logger.error("Init error: %s", e)
            return JSONResponse(
                status_code=500,
                content={"error": str(e) or "Failed to initialize browser"},
            )
        return result.model_dump(exclude_none=True)

    return app


def _single_event_stream(event: StreamEvent) -> StreamingResponse:
    async def body() -> AsyncIterator[str]:
        yield event.to_ndjson()

    return StreamingResponse(body(), media_type="text/event-stream", headers=STREAM_HEADERS)


def serve(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Run the HTTP server with uvicorn."""
    uvicorn.run(
        create_app(),
        host=host or os.getenv("HOST", "127.0.0.1"),
        port=port or int(os.getenv("PORT", "8000")),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
