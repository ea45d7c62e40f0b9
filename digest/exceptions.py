"""Exceptions raised while classifying pages and producing summaries."""

from .constants import MSG_CANCELLED, MSG_KEY_REQUIRED


class DigestError(Exception):
    """Base exception for page-digest errors.

    ``user_message`` is the short text shown in the notification and overlay.
    """

    user_message = "Error: Failed to retrieve summary."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)


class ClassificationError(DigestError):
    """Raised when a document cannot be inspected."""

    pass


class CredentialMissingError(DigestError):
    """Raised when the user declines to provide an API key."""

    user_message = MSG_KEY_REQUIRED


class UnknownModelError(DigestError):
    """Raised when no provider offers the requested model."""

    user_message = "Error: Unknown AI model."


class TransportError(DigestError):
    """Raised when the request never produced an HTTP response."""

    user_message = "Error: Network error."


class HttpStatusError(DigestError):
    """Raised for non-2xx responses."""

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Provider returned HTTP {status_code}: {body[:200]}")

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return f"Error: Failed to retrieve summary (HTTP {self.status_code})."


class InvalidCredentialError(HttpStatusError):
    """Raised for HTTP 401, meaning the stored API key was rejected."""

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return "Error: Invalid API key. Double-click the S button to reset it."


class MalformedResponseError(DigestError):
    """Raised when a response body is absent or lacks the expected fields."""

    user_message = "Error: Unexpected response from the AI provider."


class StreamFrameError(DigestError):
    """Raised for a single unparsable streamed frame.

    The assembler logs and skips these; they never reach the caller.
    """

    pass


class RequestCancelledError(DigestError):
    """Raised when the user cancels an in-flight request."""

    user_message = MSG_CANCELLED


class PresentationStateError(RuntimeError):
    """Raised on an illegal presentation state transition."""

    pass
