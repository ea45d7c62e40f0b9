"""Global pytest configuration and fixtures."""

import json
from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
import pytest_asyncio
from pytest_httpserver import HTTPServer

from digest import setup_test_logging
from digest.config import Settings
from digest.credentials import CredentialStore, MemoryStorage
from digest.llm import ProviderRegistry, RequestDispatcher, default_providers
from digest.models import PageDocument
from digest.presentation import InMemoryPage, PresentationStateMachine
from digest.types import Environment


class FakePrompt:
    """Secret prompt answering from a script and recording the questions."""

    def __init__(self, *answers: str | None) -> None:
        self.answers = list(answers)
        self.messages: list[str] = []

    async def __call__(self, message: str) -> str | None:
        self.messages.append(message)
        return self.answers.pop(0) if self.answers else None


def sse_body(*deltas: str, done: bool = True) -> str:
    """Build a chat completion event stream carrying ``deltas``."""
    frames = [
        "data: "
        + json.dumps(
            {
                "id": "chatcmpl-test",
                "object": "chat.completion.chunk",
                "choices": [{"index": 0, "delta": {"content": delta}}],
            }
        )
        + "\n\n"
        for delta in deltas
    ]
    if done:
        frames.append("data: [DONE]\n\n")
    return "".join(frames)


def chat_response(text: str) -> dict[str, Any]:
    return {
        "id": "chatcmpl-test-456",
        "object": "chat.completion",
        "created": 1677652288,
        "model": "gpt-4o-mini",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": text},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 50, "completion_tokens": 20, "total_tokens": 70},
    }


def gemini_response(text: str) -> dict[str, Any]:
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": text}]},
                "finishReason": "STOP",
            }
        ]
    }


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Setup test logging for all tests."""
    setup_test_logging()


@pytest.fixture
def make_prompt() -> type[FakePrompt]:
    return FakePrompt


@pytest.fixture
def make_sse() -> Callable[..., str]:
    return sse_body


@pytest.fixture
def make_chat_response() -> Callable[[str], dict[str, Any]]:
    return chat_response


@pytest.fixture
def make_gemini_response() -> Callable[[str], dict[str, Any]]:
    return gemini_response


@pytest.fixture
def base_url(httpserver: HTTPServer) -> str:
    return httpserver.url_for("/").rstrip("/")


@pytest.fixture
def test_settings(base_url: str) -> Settings:
    """Settings pointing every provider at the mock server."""
    return Settings(
        environment=Environment.TESTING,
        openai_base_url=base_url,
        gemini_base_url=base_url,
        locale="pt-BR",
    )


@pytest.fixture
def registry(base_url: str) -> ProviderRegistry:
    return ProviderRegistry(
        default_providers(openai_base_url=base_url, gemini_base_url=base_url)
    )


@pytest_asyncio.fixture
async def dispatcher(registry: ProviderRegistry) -> AsyncGenerator[RequestDispatcher, None]:
    async with RequestDispatcher(registry, timeout=5.0) as dispatcher:
        yield dispatcher


@pytest.fixture
def page() -> InMemoryPage:
    return InMemoryPage()


@pytest.fixture
def presentation(page: InMemoryPage, registry: ProviderRegistry) -> PresentationStateMachine:
    return PresentationStateMachine(
        page, models=registry.list_models(), selected_model="gpt-4o-mini"
    )


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def credentials(storage: MemoryStorage) -> CredentialStore:
    return CredentialStore(storage, FakePrompt())


@pytest.fixture
def article_document() -> PageDocument:
    return PageDocument(
        url="https://example.com/2024/10/launch",
        html=(
            "<html><head><title>Launch</title></head><body>"
            "<article><h1>Launch day</h1><p>The rocket launched on time.</p></article>"
            "</body></html>"
        ),
    )


@pytest.fixture
def plain_document() -> PageDocument:
    return PageDocument(
        url="https://example.com/settings",
        html="<html><body><form><input name='q'></form><p>Preferences</p></body></html>",
    )
