"""Session controller orchestrating one page's summarization attempts."""

import asyncio
from collections.abc import Coroutine
from typing import Any

from digest.classifier import ContentClassifier
from digest.constants import MSG_BUSY, MSG_KEY_UPDATED, MSG_NOT_ARTICLE
from digest.credentials import CredentialStore
from digest.exceptions import (
    CredentialMissingError,
    DigestError,
    MalformedResponseError,
    RequestCancelledError,
)
from digest.llm import (
    DispatchHandle,
    ProviderRegistry,
    RequestDispatcher,
    StreamAssembler,
    parse_complete_body,
)
from digest.log import get_logger
from digest.models import (
    ArticleCandidate,
    FocusTarget,
    KeyEvent,
    PageDocument,
    ProviderDescriptor,
    RawResponse,
    SummarizationRequest,
)
from digest.presentation import KeyboardShortcut, PresentationStateMachine
from digest.types import NotificationKind, PresentationState

logger = get_logger(__name__)

_IN_FLIGHT = {PresentationState.LOADING, PresentationState.STREAMING}


class SessionController:
    """Owns the page's article candidate, the selected model and at most one
    in-flight request, and routes host UI events to them."""

    def __init__(
        self,
        classifier: ContentClassifier,
        credentials: CredentialStore,
        registry: ProviderRegistry,
        dispatcher: RequestDispatcher,
        presentation: PresentationStateMachine,
        locale: str = "en",
        shortcut: KeyboardShortcut | None = None,
        stream: bool = True,
    ) -> None:
        """Initialize the session controller.

        Args:
            classifier: Decides whether the page is an article
            credentials: API key access
            registry: Provider catalog
            dispatcher: Issues provider requests
            presentation: On-page UI
            locale: User language passed to the prompt
            shortcut: Keyboard shortcut that starts a summary
            stream: Whether to stream from providers that support it
        """
        self.classifier = classifier
        self.credentials = credentials
        self.registry = registry
        self.dispatcher = dispatcher
        self.presentation = presentation
        self.locale = locale
        self.shortcut = shortcut or KeyboardShortcut.parse("S")
        self.stream = stream

        self.document: PageDocument | None = None
        self.candidate = ArticleCandidate.negative()
        self.active_request: SummarizationRequest | None = None
        self.active_handle: DispatchHandle | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def selected_model(self) -> str:
        return self.presentation.trigger.selected_model

    def initialize(self, document: PageDocument) -> ArticleCandidate:
        """Classify the loaded page and show the trigger if it is an article."""
        self.document = document
        self.candidate = self.classifier.classify(document)
        self.presentation.attach(self.candidate.is_article)
        return self.candidate

    def select_model(self, model_id: str) -> None:
        self.registry.resolve(model_id)
        self.presentation.select_model(model_id)
        logger.info(f"Selected model {model_id}")

    async def summarize(self, model_id: str | None = None) -> str | None:
        """Run one summarization attempt end to end.

        A second call while one is prompting, loading or streaming is
        rejected.

        Args:
            model_id: Model to use (defaults to the selected model)

        Returns:
            The summary text, or None if the attempt did not complete
        """
        if self.presentation.is_busy:
            logger.warning(
                f"Ignoring summarize request in state {self.presentation.state.value}"
            )
            self.presentation.notify(MSG_BUSY, NotificationKind.INFO)
            return None

        model_id = model_id or self.selected_model
        self.presentation.begin_prompting()

        try:
            descriptor = self.registry.resolve(model_id)
            secret = await self.credentials.get_secret(
                descriptor.id, descriptor.display_name
            )
        except DigestError as e:
            self._report_failure(e)
            return None

        if not secret:
            error = CredentialMissingError(f"No API key for {descriptor.id}")
            logger.info(str(error))
            self.presentation.abort_prompting(error.user_message)
            return None

        request = SummarizationRequest(
            provider_id=descriptor.id,
            model_id=model_id,
            title=self.candidate.title,
            content=self._summary_input(),
            locale=self.locale,
            stream=self.stream and descriptor.supports_streaming,
        )
        self.presentation.show_loading()

        try:
            text = await self._run(descriptor, request, secret)
        except RequestCancelledError:
            if self.presentation.state in _IN_FLIGHT:
                self.presentation.cancel()
            return None
        except DigestError as e:
            self._report_failure(e)
            return None
        except Exception as e:
            logger.exception(f"Unexpected error while summarizing: {e}")
            self.presentation.fail(DigestError.user_message)
            return None

        self.presentation.complete(text)
        logger.info(f"Summary with {model_id} completed ({len(text)} chars)")
        return text

    async def _run(
        self, descriptor: ProviderDescriptor, request: SummarizationRequest, secret: str
    ) -> str:
        # Owned by this request only; a later attempt gets its own
        assembler = StreamAssembler()
        handle: DispatchHandle | None = None

        def on_progress(chunk: bytes) -> None:
            if handle is None or handle.cancelled or not request.stream:
                return
            if assembler.feed(chunk):
                self.presentation.show_partial(assembler.emitted)

        handle = self.dispatcher.dispatch(request, secret, on_progress)
        self.active_request = request
        self.active_handle = handle
        try:
            response = await handle.result()
        finally:
            if self.active_handle is handle:
                self.active_request = None
                self.active_handle = None

        return self._final_text(descriptor, response, assembler)

    def _final_text(
        self,
        descriptor: ProviderDescriptor,
        response: RawResponse,
        assembler: StreamAssembler,
    ) -> str:
        if not response.streamed:
            return parse_complete_body(descriptor, response.body)

        if assembler.flush():
            self.presentation.show_partial(assembler.emitted)
        if assembler.emitted:
            return assembler.emitted
        if assembler.finished:
            raise MalformedResponseError("Stream finished without any text")

        # Provider answered a streaming request with a plain JSON body
        logger.debug("No stream frames received, parsing body as complete response")
        return parse_complete_body(descriptor, response.body)

    def _summary_input(self) -> str:
        if self.candidate.content:
            return self.candidate.content
        return self.document.html if self.document else ""

    def _report_failure(self, error: DigestError) -> None:
        logger.error(f"Summarization failed: {error}")
        self.presentation.fail(error.user_message)

    def cancel(self) -> bool:
        """Cancel the in-flight request, if any."""
        if self.active_handle is None:
            return False
        self.active_handle.cancel()
        if self.presentation.state in _IN_FLIGHT:
            self.presentation.cancel()
        return True

    async def reset_credential(self, provider_id: str | None = None) -> bool:
        """Prompt for a new API key and overwrite the stored one.

        Rejected while a summary is prompting, loading or streaming.

        Args:
            provider_id: Provider to reset (defaults to the selected model's)

        Returns:
            True if a new key was stored
        """
        if self.presentation.is_busy:
            logger.warning(
                f"Ignoring API key reset in state {self.presentation.state.value}"
            )
            self.presentation.notify(MSG_BUSY, NotificationKind.INFO)
            return False

        try:
            if provider_id is None:
                descriptor = self.registry.resolve(self.selected_model)
            else:
                descriptor = self.registry.get(provider_id)
        except DigestError as e:
            logger.error(f"Cannot reset API key: {e}")
            self.presentation.notify(e.user_message, NotificationKind.ERROR)
            return False

        updated = await self.credentials.reset_secret(
            descriptor.id, descriptor.display_name
        )
        if updated:
            self.presentation.notify(MSG_KEY_UPDATED, NotificationKind.INFO)
        return updated

    # Host UI events

    def on_trigger_click(self) -> asyncio.Task[str | None]:
        return self._spawn(self.summarize())

    def on_trigger_double_click(self) -> asyncio.Task[bool]:
        return self._spawn(self.reset_credential())

    def on_key(self, event: KeyEvent) -> asyncio.Task[str | None] | None:
        """Handle Escape and the summarize shortcut."""
        if event.key == "Escape":
            self.on_overlay_close()
            return None

        if self.presentation.editable_focused or not self.shortcut.matches(event):
            return None

        if self.presentation.is_busy:
            logger.info("Shortcut ignored, a summary is in progress")
            return None

        if not self.candidate.is_article:
            self.presentation.notify(MSG_NOT_ARTICLE, NotificationKind.INFO)
        return self._spawn(self.summarize())

    def on_focus_change(self, target: FocusTarget | None) -> None:
        self.presentation.update_focus(target)

    def on_overlay_close(self) -> bool:
        """Close the overlay; a request still running is cancelled."""
        in_flight = self.presentation.state in _IN_FLIGHT
        closed = self.presentation.close_overlay()
        if in_flight:
            self.cancel()
        return closed

    def on_backdrop_click(self, inside_content: bool) -> bool:
        if inside_content:
            return False
        return self.on_overlay_close()

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def aclose(self) -> None:
        """Cancel pending work and close the HTTP client."""
        self.cancel()
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        await self.dispatcher.close()
