"""Data models for page-digest."""

from .domain import (
    ArticleCandidate,
    AuthParts,
    ExtractedContent,
    FocusTarget,
    KeyEvent,
    PageDocument,
    ProviderDescriptor,
    RawResponse,
    SummarizationRequest,
)

__all__ = [
    "ArticleCandidate",
    "AuthParts",
    "ExtractedContent",
    "FocusTarget",
    "KeyEvent",
    "PageDocument",
    "ProviderDescriptor",
    "RawResponse",
    "SummarizationRequest",
]
