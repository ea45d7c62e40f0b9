"""Application constants."""

from typing import Final

# Classifier
ARTICLE_WORD_THRESHOLD: Final[int] = 500
ARTICLE_URL_PATTERN: Final[str] = r"news|article|story|post"
INVISIBLE_TAGS: Final[tuple[str, ...]] = ("script", "style", "noscript", "template")

# Readerable scoring
READERABLE_MIN_CONTENT_LENGTH: Final[int] = 140
READERABLE_MIN_SCORE: Final[float] = 20.0

# Credentials
CREDENTIAL_KEY_SUFFIX: Final[str] = "_api_key"

# Streaming
SSE_DATA_MARKER: Final[str] = "data:"
SSE_DONE_SENTINEL: Final[str] = "[DONE]"

# Presentation
NOTIFICATION_DISMISS_SECONDS: Final[float] = 4.0
TRIGGER_LABEL: Final[str] = "S"
LOADING_HTML: Final[str] = '<p class="glow">Generating summary...</p>'
EDITABLE_TAGS: Final[frozenset[str]] = frozenset({"input", "textarea"})

# User-facing messages
MSG_KEY_REQUIRED: Final[str] = "API key is required to generate a summary."
MSG_KEY_UPDATED: Final[str] = "API key updated successfully."
MSG_NOT_ARTICLE: Final[str] = (
    "This page may not be an article. Proceeding to summarize anyway."
)
MSG_CANCELLED: Final[str] = "Request canceled."
MSG_BUSY: Final[str] = "A summary is already being generated."
