"""Provider request dispatch with cooperative cancellation."""

import asyncio
from typing import Any

import httpx

from digest.exceptions import (
    DigestError,
    HttpStatusError,
    InvalidCredentialError,
    MalformedResponseError,
    RequestCancelledError,
    TransportError,
)
from digest.log import get_logger
from digest.models import AuthParts, ProviderDescriptor, RawResponse, SummarizationRequest
from digest.models.external import (
    ChatCompletionRequest,
    GeminiContent,
    GeminiPart,
    GenerateContentRequest,
    OpenAIMessage,
)
from digest.types import ProgressCallback, ProviderFamily

from .prompt import build_document_prompt, build_system_prompt, build_user_prompt
from .registry import ProviderRegistry

logger = get_logger(__name__)


class DispatchHandle:
    """Cancellable handle to one in-flight provider request.

    After ``cancel()`` no further chunk reaches the progress callback and
    ``result()`` raises RequestCancelledError, even if the response had
    already completed.
    """

    def __init__(self, request: SummarizationRequest) -> None:
        self.request = request
        self._task: asyncio.Task[RawResponse] | None = None
        self._cancelled = False

    def _start(self, task: asyncio.Task[RawResponse]) -> None:
        self._task = task

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        logger.info(f"Cancelled request for {self.request.model_id}")

    async def result(self) -> RawResponse:
        """Wait for the response.

        Raises:
            RequestCancelledError: If the handle was cancelled
            DigestError: Transport, status or body errors from the request
        """
        if self._task is None:
            raise RuntimeError("Request was never started")
        try:
            response = await self._task
        except asyncio.CancelledError:
            if self._cancelled:
                raise RequestCancelledError() from None
            raise
        except DigestError:
            if self._cancelled:
                raise RequestCancelledError() from None
            raise

        if self._cancelled:
            raise RequestCancelledError()
        return response


class RequestDispatcher:
    """Builds provider-specific requests and issues exactly one attempt each."""

    def __init__(
        self,
        registry: ProviderRegistry,
        timeout: float = 60.0,
        max_tokens: int = 500,
        temperature: float = 0.5,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.registry = registry
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def __aenter__(self) -> "RequestDispatcher":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def dispatch(
        self,
        request: SummarizationRequest,
        secret: str,
        on_progress: ProgressCallback | None = None,
    ) -> DispatchHandle:
        """Start the request on the running event loop.

        Args:
            request: Summarization attempt
            secret: API key for the request's provider
            on_progress: Called with each body chunk as it arrives

        Returns:
            Handle to await or cancel the request
        """
        descriptor = self.registry.get(request.provider_id)
        url = self.registry.endpoint_for(descriptor, request.model_id)
        auth = self.registry.build_auth(descriptor, secret)
        body = self.build_body(descriptor, request)

        handle = DispatchHandle(request)
        task = asyncio.get_running_loop().create_task(
            self._send(handle, url, auth, body, on_progress)
        )
        handle._start(task)
        return handle

    def build_body(
        self, descriptor: ProviderDescriptor, request: SummarizationRequest
    ) -> dict[str, Any]:
        """Build the JSON body for the provider's family."""
        if descriptor.family == ProviderFamily.CHAT:
            payload = ChatCompletionRequest(
                model=request.model_id,
                messages=[
                    OpenAIMessage(
                        role="system", content=build_system_prompt(request.locale)
                    ),
                    OpenAIMessage(
                        role="user",
                        content=build_user_prompt(request.title, request.content),
                    ),
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                n=1,
                stream=request.stream and descriptor.supports_streaming,
            )
            return payload.model_dump()

        text = build_document_prompt(request.locale, request.title, request.content)
        document = GenerateContentRequest(
            contents=[GeminiContent(parts=[GeminiPart(text=text)])]
        )
        return document.model_dump(exclude_none=True)

    async def _send(
        self,
        handle: DispatchHandle,
        url: str,
        auth: AuthParts,
        body: dict[str, Any],
        on_progress: ProgressCallback | None,
    ) -> RawResponse:
        streamed = bool(body.get("stream"))
        logger.debug(f"POST {url} model={handle.request.model_id} stream={streamed}")

        parts: list[bytes] = []
        try:
            async with self.client.stream(
                "POST",
                url,
                headers={"Content-Type": "application/json", **auth.headers},
                params=auth.params,
                json=body,
            ) as response:
                if not response.is_success:
                    error_body = (await response.aread()).decode("utf-8", "replace")
                    if response.status_code == 401:
                        raise InvalidCredentialError(401, error_body)
                    raise HttpStatusError(response.status_code, error_body)

                async for chunk in response.aiter_bytes():
                    if handle.cancelled:
                        break
                    parts.append(chunk)
                    if on_progress is not None:
                        on_progress(chunk)
                status_code = response.status_code
        except httpx.HTTPError as e:
            raise TransportError(f"{e.__class__.__name__}: {e}") from e

        if not parts and not handle.cancelled:
            raise MalformedResponseError("Response has no body")

        return RawResponse(
            status_code=status_code,
            body=b"".join(parts).decode("utf-8", "replace"),
            streamed=streamed,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
