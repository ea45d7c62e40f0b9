"""Domain models shared across page-digest components."""

from pydantic import BaseModel, ConfigDict, Field

from digest.constants import EDITABLE_TAGS
from digest.types import AuthScheme, ProviderFamily


class PageDocument(BaseModel):
    """A loaded page handed to the classifier."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(default="", description="Document address")
    html: str = Field(description="Serialized document markup")


class ArticleCandidate(BaseModel):
    """Result of classifying one page load."""

    model_config = ConfigDict(frozen=True)

    is_article: bool
    title: str = ""
    content: str = ""

    @classmethod
    def negative(cls) -> "ArticleCandidate":
        return cls(is_article=False)


class ExtractedContent(BaseModel):
    """Readable title and prose pulled out of a page."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    text: str


class ProviderDescriptor(BaseModel):
    """Static description of one AI provider's request and auth shape."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    models: tuple[str, ...]
    endpoint_template: str = Field(
        description="Formatted with base_url and model to give the request URL"
    )
    base_url: str
    auth_scheme: AuthScheme
    family: ProviderFamily
    auth_param: str = Field(default="key", description="Query param name for keys")
    supports_streaming: bool = False


class SummarizationRequest(BaseModel):
    """One summarization attempt, fixed once dispatched."""

    model_config = ConfigDict(frozen=True)

    provider_id: str
    model_id: str
    title: str = ""
    content: str
    locale: str = "en"
    stream: bool = False


class AuthParts(BaseModel):
    """Headers and query parameters that carry a credential."""

    model_config = ConfigDict(frozen=True)

    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, str] = Field(default_factory=dict)


class RawResponse(BaseModel):
    """Body of a completed provider call."""

    status_code: int
    body: str = ""
    streamed: bool = False


class KeyEvent(BaseModel):
    """Keyboard event delivered by the host page."""

    model_config = ConfigDict(frozen=True)

    key: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False
    meta: bool = False


class FocusTarget(BaseModel):
    """The element that currently holds focus."""

    model_config = ConfigDict(frozen=True)

    tag: str = ""
    content_editable: bool = False

    @property
    def is_editable(self) -> bool:
        return self.content_editable or self.tag.lower() in EDITABLE_TAGS
