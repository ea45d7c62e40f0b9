"""Assembly of provider responses into text."""

import codecs
import json

from pydantic import ValidationError

from digest.constants import SSE_DATA_MARKER, SSE_DONE_SENTINEL
from digest.exceptions import MalformedResponseError, StreamFrameError
from digest.log import get_logger
from digest.models import ProviderDescriptor
from digest.models.external import (
    ChatCompletionChunk,
    GeminiResponse,
    OpenAIChatResponse,
    ProviderResponse,
)
from digest.types import ProviderFamily

logger = get_logger(__name__)


class StreamAssembler:
    """Turns streamed ``data:`` frames into ordered text deltas.

    One instance belongs to exactly one request. Bytes may be split anywhere,
    including inside a UTF-8 sequence or a line; the last incomplete line is
    carried over to the next feed. Processing stops at ``data: [DONE]``.
    """

    def __init__(self) -> None:
        self.pending = ""
        self.emitted = ""
        self.finished = False
        self.skipped_frames = 0
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed(self, chunk: str | bytes) -> list[str]:
        """Consume one delivery and return the deltas it completed."""
        if self.finished:
            return []

        text = self._decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        lines = (self.pending + text).split("\n")
        # The final piece has no newline yet; keep it for the next feed
        self.pending = lines.pop()
        return self._process_lines(lines)

    def flush(self) -> list[str]:
        """Process whatever is buffered once the transport has finished."""
        if self.finished:
            return []
        remainder = self.pending + self._decoder.decode(b"", final=True)
        self.pending = ""
        return self._process_lines(remainder.split("\n"))

    def _process_lines(self, lines: list[str]) -> list[str]:
        deltas: list[str] = []
        for raw_line in lines:
            line = raw_line.rstrip("\r")
            if not line.startswith(SSE_DATA_MARKER):
                continue

            payload = line[len(SSE_DATA_MARKER) :].strip()
            if payload == SSE_DONE_SENTINEL:
                self.finished = True
                self.pending = ""
                break
            if not payload:
                continue

            try:
                delta = self._parse_frame(payload)
            except StreamFrameError as e:
                self.skipped_frames += 1
                logger.warning(f"Skipping malformed stream frame: {e}")
                continue

            if delta:
                self.emitted += delta
                deltas.append(delta)
        return deltas

    @staticmethod
    def _parse_frame(payload: str) -> str:
        try:
            chunk = ChatCompletionChunk.model_validate(json.loads(payload))
        except (json.JSONDecodeError, ValidationError) as e:
            raise StreamFrameError(f"{e.__class__.__name__}: {payload[:80]!r}") from e
        return chunk.delta_text()


_RESPONSE_MODELS: dict[ProviderFamily, type[ProviderResponse]] = {
    ProviderFamily.CHAT: OpenAIChatResponse,
    ProviderFamily.DOCUMENT: GeminiResponse,
}


def parse_provider_response(
    descriptor: ProviderDescriptor, body: str
) -> ProviderResponse:
    """Validate a complete response body against the provider's shape.

    Raises:
        MalformedResponseError: If the body is empty, not JSON, or lacks the
            expected fields
    """
    if not body.strip():
        raise MalformedResponseError("Empty response body")

    response_model = _RESPONSE_MODELS[descriptor.family]
    try:
        return response_model.model_validate_json(body)
    except ValidationError as e:
        raise MalformedResponseError(
            f"Unexpected {descriptor.id} response: {e.error_count()} error(s)"
        ) from e


def parse_complete_body(descriptor: ProviderDescriptor, body: str) -> str:
    """Extract the generated text from a non-streamed response."""
    return parse_provider_response(descriptor, body).text()
