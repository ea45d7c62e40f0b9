"""Common enums and type aliases for page-digest."""

from enum import Enum
from typing import Awaitable, Callable, TypeAlias


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ClassifierMode(str, Enum):
    """Strategy used to decide whether a page is an article."""

    HEURISTIC = "heuristic"
    EXTRACTOR = "extractor"


class AuthScheme(str, Enum):
    """Where a provider expects the API key."""

    BEARER_HEADER = "bearer-header"
    QUERY_PARAM = "query-param"


class ProviderFamily(str, Enum):
    """Request/response shape of a provider API."""

    CHAT = "chat"
    DOCUMENT = "document"


class PresentationState(str, Enum):
    """Lifecycle of the on-page summarization UI."""

    HIDDEN = "hidden"
    TRIGGER_VISIBLE = "trigger_visible"
    PROMPTING = "prompting"
    LOADING = "loading"
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


class NotificationKind(str, Enum):
    """Visual flavour of a transient notification."""

    ERROR = "error"
    INFO = "info"


# Asks the user for a secret; resolves to None when the prompt is dismissed.
SecretPrompt: TypeAlias = Callable[[str], Awaitable[str | None]]

ProgressCallback: TypeAlias = Callable[[bytes], None]
