"""Tests for the session controller."""

import asyncio
import json
from collections.abc import AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from pytest_httpserver import HTTPServer

from digest.classifier import create_classifier
from digest.constants import (
    MSG_BUSY,
    MSG_CANCELLED,
    MSG_KEY_REQUIRED,
    MSG_KEY_UPDATED,
    MSG_NOT_ARTICLE,
)
from digest.credentials import CredentialStore, MemoryStorage
from digest.llm import ProviderRegistry, RequestDispatcher
from digest.models import FocusTarget, KeyEvent, PageDocument
from digest.presentation import InMemoryPage, Overlay, PresentationStateMachine
from digest.services import SessionController
from digest.types import ClassifierMode, NotificationKind, PresentationState

ControllerFactory = Callable[..., SessionController]


class GatedStream:
    """Mock transport body that sends one SSE frame, then waits to be released."""

    def __init__(self, first: str, rest: str) -> None:
        self.first = first
        self.rest = rest
        self.release = asyncio.Event()
        self.requests = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests += 1
        return httpx.Response(200, content=self._body())

    async def _body(self) -> AsyncGenerator[bytes, None]:
        yield self.first.encode()
        await self.release.wait()
        yield self.rest.encode()


class BlockingPrompt:
    """Secret prompt that stays open until released."""

    def __init__(self, answer: str | None) -> None:
        self.answer = answer
        self.release = asyncio.Event()
        self.messages: list[str] = []

    async def __call__(self, message: str) -> str | None:
        self.messages.append(message)
        await self.release.wait()
        return self.answer


async def _wait_for_state(
    presentation: PresentationStateMachine, state: PresentationState
) -> None:
    async def poll() -> None:
        while presentation.state != state:
            await asyncio.sleep(0.001)

    await asyncio.wait_for(poll(), timeout=2.0)


@pytest_asyncio.fixture
async def make_controller(
    registry: ProviderRegistry, page: InMemoryPage, make_prompt
) -> AsyncGenerator[ControllerFactory, None]:
    controllers: list[SessionController] = []

    def factory(
        *answers: str | None,
        storage: MemoryStorage | None = None,
        client: httpx.AsyncClient | None = None,
        stream: bool = True,
    ) -> SessionController:
        controller = SessionController(
            classifier=create_classifier(ClassifierMode.HEURISTIC),
            credentials=CredentialStore(storage or MemoryStorage(), make_prompt(*answers)),
            registry=registry,
            dispatcher=RequestDispatcher(registry, timeout=5.0, client=client),
            presentation=PresentationStateMachine(
                page, models=registry.list_models(), selected_model="gpt-4o-mini"
            ),
            locale="pt-BR",
            stream=stream,
        )
        controllers.append(controller)
        return controller

    yield factory

    for controller in controllers:
        await controller.aclose()


def _with_key(provider_id: str = "openai", key: str = "sk-test") -> MemoryStorage:
    return MemoryStorage({f"{provider_id}_api_key": key})


class TestInitialize:
    @pytest.mark.asyncio
    async def test_article_shows_trigger(
        self, make_controller: ControllerFactory, article_document: PageDocument
    ) -> None:
        controller = make_controller()

        candidate = controller.initialize(article_document)

        assert candidate.is_article is True
        assert controller.presentation.state == PresentationState.TRIGGER_VISIBLE

    @pytest.mark.asyncio
    async def test_plain_page_hides_trigger(
        self, make_controller: ControllerFactory, plain_document: PageDocument
    ) -> None:
        controller = make_controller()

        controller.initialize(plain_document)

        assert controller.presentation.state == PresentationState.HIDDEN


class TestSummarize:
    @pytest.mark.asyncio
    async def test_streamed_summary(
        self,
        httpserver: HTTPServer,
        make_controller: ControllerFactory,
        article_document: PageDocument,
        make_sse,
    ) -> None:
        httpserver.expect_request("/v1/chat/completions", method="POST").respond_with_data(
            make_sse("<p>Hello", " world</p>"), content_type="text/event-stream"
        )
        storage = MemoryStorage()
        controller = make_controller("sk-test", storage=storage)
        controller.initialize(article_document)

        text = await controller.summarize()

        assert text == "<p>Hello world</p>"
        assert controller.presentation.state == PresentationState.DONE
        assert controller.presentation.overlay.content_html == "<p>Hello world</p>"
        assert await storage.get("openai_api_key") == "sk-test"

        sent = httpserver.log[0][0]
        assert sent.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(sent.data)
        assert body["stream"] is True
        assert "<article>" in body["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_complete_response(
        self,
        httpserver: HTTPServer,
        make_controller: ControllerFactory,
        article_document: PageDocument,
        make_chat_response,
    ) -> None:
        httpserver.expect_request("/v1/chat/completions").respond_with_json(
            make_chat_response("<p>Short</p>")
        )
        controller = make_controller(storage=_with_key(), stream=False)
        controller.initialize(article_document)

        assert await controller.summarize() == "<p>Short</p>"
        assert json.loads(httpserver.log[0][0].data)["stream"] is False

    @pytest.mark.asyncio
    async def test_gemini_summary(
        self,
        httpserver: HTTPServer,
        make_controller: ControllerFactory,
        article_document: PageDocument,
        make_gemini_response,
    ) -> None:
        httpserver.expect_request(
            "/v1beta/models/gemini-1.5-flash:generateContent",
            query_string={"key": "g-key"},
        ).respond_with_json(make_gemini_response("<p>Gemini</p>"))
        controller = make_controller("g-key")
        controller.initialize(article_document)
        controller.select_model("gemini-1.5-flash")

        text = await controller.summarize()

        assert text == "<p>Gemini</p>"
        assert controller.credentials.prompt.messages == [
            "Please enter your Gemini API key:"
        ]

    @pytest.mark.asyncio
    async def test_streaming_request_answered_with_json(
        self,
        httpserver: HTTPServer,
        make_controller: ControllerFactory,
        article_document: PageDocument,
        make_chat_response,
    ) -> None:
        httpserver.expect_request("/v1/chat/completions").respond_with_json(
            make_chat_response("<p>Plain</p>")
        )
        controller = make_controller(storage=_with_key())
        controller.initialize(article_document)

        assert await controller.summarize() == "<p>Plain</p>"

    @pytest.mark.asyncio
    async def test_missing_key_aborts_without_request(
        self,
        httpserver: HTTPServer,
        make_controller: ControllerFactory,
        article_document: PageDocument,
    ) -> None:
        controller = make_controller(None)
        controller.initialize(article_document)

        assert await controller.summarize() is None

        presentation = controller.presentation
        assert presentation.state == PresentationState.TRIGGER_VISIBLE
        assert presentation.notification.message == MSG_KEY_REQUIRED
        assert presentation.overlay is None
        assert httpserver.log == []

    @pytest.mark.asyncio
    async def test_invalid_key_message(
        self,
        httpserver: HTTPServer,
        make_controller: ControllerFactory,
        article_document: PageDocument,
    ) -> None:
        httpserver.expect_request("/v1/chat/completions").respond_with_json(
            {"error": {"message": "Incorrect API key provided"}}, status=401
        )
        controller = make_controller(storage=_with_key())
        controller.initialize(article_document)

        assert await controller.summarize() is None

        presentation = controller.presentation
        assert presentation.state == PresentationState.FAILED
        assert "Invalid API key" in presentation.notification.message
        assert "Invalid API key" in presentation.overlay.content_html
        assert presentation.notification.kind == NotificationKind.ERROR

    @pytest.mark.asyncio
    async def test_server_error_message(
        self,
        httpserver: HTTPServer,
        make_controller: ControllerFactory,
        article_document: PageDocument,
    ) -> None:
        httpserver.expect_request("/v1/chat/completions").respond_with_data(
            "oops", status=500
        )
        controller = make_controller(storage=_with_key())
        controller.initialize(article_document)

        await controller.summarize()

        message = controller.presentation.notification.message
        assert message == "Error: Failed to retrieve summary (HTTP 500)."
        assert "Invalid API key" not in message

    @pytest.mark.asyncio
    async def test_malformed_body(
        self,
        httpserver: HTTPServer,
        make_controller: ControllerFactory,
        article_document: PageDocument,
    ) -> None:
        httpserver.expect_request("/v1/chat/completions").respond_with_json({"choices": []})
        controller = make_controller(storage=_with_key(), stream=False)
        controller.initialize(article_document)

        assert await controller.summarize() is None
        assert controller.presentation.state == PresentationState.FAILED
        assert "Unexpected response" in controller.presentation.notification.message

    @pytest.mark.asyncio
    async def test_stream_without_text_fails(
        self,
        httpserver: HTTPServer,
        make_controller: ControllerFactory,
        article_document: PageDocument,
    ) -> None:
        httpserver.expect_request("/v1/chat/completions").respond_with_data(
            "data: [DONE]\n\n", content_type="text/event-stream"
        )
        controller = make_controller(storage=_with_key())
        controller.initialize(article_document)

        assert await controller.summarize() is None

        presentation = controller.presentation
        assert presentation.state == PresentationState.FAILED
        assert presentation.notification.kind == NotificationKind.ERROR
        assert "Unexpected response" in presentation.overlay.content_html

    @pytest.mark.asyncio
    async def test_unknown_model(
        self, make_controller: ControllerFactory, article_document: PageDocument
    ) -> None:
        controller = make_controller()
        controller.initialize(article_document)

        assert await controller.summarize("gpt-2") is None
        assert controller.presentation.state == PresentationState.FAILED
        assert controller.presentation.notification.message == "Error: Unknown AI model."

    @pytest.mark.asyncio
    async def test_retry_after_failure(
        self,
        httpserver: HTTPServer,
        make_controller: ControllerFactory,
        article_document: PageDocument,
        make_chat_response,
    ) -> None:
        httpserver.expect_ordered_request("/v1/chat/completions").respond_with_data(
            "down", status=503
        )
        httpserver.expect_ordered_request("/v1/chat/completions").respond_with_json(
            make_chat_response("<p>Second</p>")
        )
        controller = make_controller(storage=_with_key(), stream=False)
        controller.initialize(article_document)

        assert await controller.summarize() is None
        assert await controller.summarize() == "<p>Second</p>"
        assert controller.presentation.state == PresentationState.DONE


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_second_trigger_rejected(
        self, make_controller: ControllerFactory, article_document: PageDocument, make_sse
    ) -> None:
        gate = GatedStream(make_sse("one", done=False), make_sse("two"))
        controller = make_controller(
            storage=_with_key(),
            client=httpx.AsyncClient(transport=httpx.MockTransport(gate.handler)),
        )
        controller.initialize(article_document)

        first = controller.on_trigger_click()
        await _wait_for_state(controller.presentation, PresentationState.STREAMING)

        assert await controller.summarize() is None
        assert controller.presentation.notification.message == MSG_BUSY
        assert controller.on_key(KeyEvent(key="s")) is None

        gate.release.set()
        assert await first == "onetwo"
        assert gate.requests == 1

    @pytest.mark.asyncio
    async def test_cancel_after_first_chunk(
        self,
        page: InMemoryPage,
        make_controller: ControllerFactory,
        article_document: PageDocument,
        make_sse,
    ) -> None:
        gate = GatedStream(make_sse("first", done=False), make_sse(" second"))
        controller = make_controller(
            storage=_with_key(),
            client=httpx.AsyncClient(transport=httpx.MockTransport(gate.handler)),
        )
        controller.initialize(article_document)

        task = controller.on_trigger_click()
        await _wait_for_state(controller.presentation, PresentationState.STREAMING)

        assert controller.cancel() is True
        gate.release.set()

        assert await task is None
        presentation = controller.presentation
        assert presentation.state == PresentationState.CANCELLED
        assert presentation.overlay.content_html == "first"
        assert presentation.notification.message == MSG_CANCELLED
        assert presentation.notification.kind == NotificationKind.INFO
        assert page.scroll_locked is True
        assert controller.active_handle is None

    @pytest.mark.asyncio
    async def test_closing_overlay_cancels_request(
        self,
        page: InMemoryPage,
        make_controller: ControllerFactory,
        article_document: PageDocument,
        make_sse,
    ) -> None:
        gate = GatedStream(make_sse("partial", done=False), make_sse(" rest"))
        controller = make_controller(
            storage=_with_key(),
            client=httpx.AsyncClient(transport=httpx.MockTransport(gate.handler)),
        )
        controller.initialize(article_document)

        task = controller.on_trigger_click()
        await _wait_for_state(controller.presentation, PresentationState.STREAMING)

        assert controller.on_overlay_close() is True
        gate.release.set()

        assert await task is None
        assert controller.presentation.state == PresentationState.TRIGGER_VISIBLE
        assert page.find_all(Overlay) == []
        assert page.scroll_locked is False

    @pytest.mark.asyncio
    async def test_cancel_without_request(self, make_controller: ControllerFactory) -> None:
        assert make_controller().cancel() is False


class TestCredentialReset:
    @pytest.mark.asyncio
    async def test_reset_stores_new_key(self, make_controller: ControllerFactory) -> None:
        storage = _with_key(key="old")
        controller = make_controller(" new-key ", storage=storage)

        assert await controller.on_trigger_double_click() is True

        assert await storage.get("openai_api_key") == "new-key"
        assert controller.presentation.notification.message == MSG_KEY_UPDATED

    @pytest.mark.asyncio
    async def test_reset_dismissed_keeps_key(self, make_controller: ControllerFactory) -> None:
        storage = _with_key(key="old")
        controller = make_controller(None, storage=storage)

        assert await controller.reset_credential("openai") is False

        assert await storage.get("openai_api_key") == "old"
        assert controller.presentation.notification is None

    @pytest.mark.asyncio
    async def test_reset_follows_selected_model(self, make_controller: ControllerFactory) -> None:
        storage = MemoryStorage()
        controller = make_controller("g-key", storage=storage)
        controller.select_model("gemini-2.0-flash")

        assert await controller.reset_credential() is True

        assert await storage.get("gemini_api_key") == "g-key"

    @pytest.mark.asyncio
    async def test_reset_rejected_while_prompting(
        self, make_controller: ControllerFactory, article_document: PageDocument
    ) -> None:
        storage = MemoryStorage()
        controller = make_controller(storage=storage)
        prompt = BlockingPrompt(None)
        controller.credentials.prompt = prompt
        controller.initialize(article_document)

        summary = controller.on_trigger_click()
        await _wait_for_state(controller.presentation, PresentationState.PROMPTING)
        while not prompt.messages:
            await asyncio.sleep(0.001)

        assert await controller.on_trigger_double_click() is False
        assert controller.presentation.notification.message == MSG_BUSY
        assert len(prompt.messages) == 1

        prompt.release.set()
        assert await summary is None
        assert await storage.get("openai_api_key") is None
        assert controller.presentation.state == PresentationState.TRIGGER_VISIBLE

    @pytest.mark.asyncio
    async def test_reset_unknown_provider(self, make_controller: ControllerFactory) -> None:
        controller = make_controller()

        assert await controller.reset_credential("anthropic") is False
        assert controller.presentation.notification.kind == NotificationKind.ERROR


class TestKeyboard:
    @pytest.mark.asyncio
    async def test_shortcut_ignored_while_editing(
        self, make_controller: ControllerFactory, article_document: PageDocument
    ) -> None:
        controller = make_controller()
        controller.initialize(article_document)
        controller.on_focus_change(FocusTarget(tag="textarea"))

        assert controller.on_key(KeyEvent(key="s")) is None
        assert controller.presentation.state == PresentationState.TRIGGER_VISIBLE

    @pytest.mark.asyncio
    async def test_other_keys_ignored(
        self, make_controller: ControllerFactory, article_document: PageDocument
    ) -> None:
        controller = make_controller()
        controller.initialize(article_document)

        assert controller.on_key(KeyEvent(key="d")) is None
        assert controller.on_key(KeyEvent(key="s", ctrl=True)) is None

    @pytest.mark.asyncio
    async def test_shortcut_on_non_article_warns_then_runs(
        self, make_controller: ControllerFactory, plain_document: PageDocument
    ) -> None:
        controller = make_controller(None)
        controller.initialize(plain_document)

        task = controller.on_key(KeyEvent(key="S", shift=True))
        assert task is not None
        assert controller.presentation.notification.message == MSG_NOT_ARTICLE

        assert await task is None
        assert controller.credentials.prompt.messages == [
            "Please enter your OpenAI API key:"
        ]

    @pytest.mark.asyncio
    async def test_escape_closes_overlay(
        self,
        httpserver: HTTPServer,
        page: InMemoryPage,
        make_controller: ControllerFactory,
        article_document: PageDocument,
        make_chat_response,
    ) -> None:
        httpserver.expect_request("/v1/chat/completions").respond_with_json(
            make_chat_response("<p>Done</p>")
        )
        controller = make_controller(storage=_with_key(), stream=False)
        controller.initialize(article_document)
        await controller.summarize()

        assert controller.on_key(KeyEvent(key="Escape")) is None

        assert page.find_all(Overlay) == []
        assert controller.presentation.state == PresentationState.TRIGGER_VISIBLE

    @pytest.mark.asyncio
    async def test_backdrop_click(
        self,
        httpserver: HTTPServer,
        make_controller: ControllerFactory,
        article_document: PageDocument,
        make_chat_response,
    ) -> None:
        httpserver.expect_request("/v1/chat/completions").respond_with_json(
            make_chat_response("<p>Done</p>")
        )
        controller = make_controller(storage=_with_key(), stream=False)
        controller.initialize(article_document)
        await controller.summarize()

        assert controller.on_backdrop_click(inside_content=True) is False
        assert controller.on_backdrop_click(inside_content=False) is True
        assert controller.presentation.overlay is None
