"""Pytest fixtures and shared test configuration.

Fixtures:
    - chat_config: Config pointing at a fake completion endpoint
    - sse_event: Builds one ``data:`` line for a content fragment
    - notifications: Collects notifications emitted by a controller
    - async_client: HTTPX client for the FastAPI host
"""

import json
from collections.abc import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient

from streamchat.api.app import create_app
from streamchat.chat.config import ChatConfig
from streamchat.models.schemas import Notification


@pytest.fixture
def chat_config() -> ChatConfig:
    """Return a config for a fake local endpoint.

    Returns:
        ChatConfig with predictable values for payload assertions.
    """
    return ChatConfig(
        api_url="http://llm.test/v1/chat/completions",
        model_name="test-model",
        temperature=0.5,
        max_tokens=-1,
        request_timeout=5.0,
    )


@pytest.fixture
def sse_event() -> Callable[[str], bytes]:
    """Return a builder for completion-chunk SSE lines."""

    def build(content: str) -> bytes:
        envelope = {"choices": [{"index": 0, "delta": {"content": content}}]}
        return f"data: {json.dumps(envelope, ensure_ascii=False)}\n".encode()

    return build


@pytest.fixture
def notifications() -> list[Notification]:
    """Return a list that a controller can append notifications to."""
    return []


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for the FastAPI host.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
