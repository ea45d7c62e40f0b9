"""OpenAI chat completion wire models."""

from typing import Literal

from pydantic import BaseModel, Field

from digest.exceptions import MalformedResponseError


class OpenAIMessage(BaseModel):
    """OpenAI API message model."""

    role: Literal["system", "user", "assistant"]
    content: str | None = None


class ChatCompletionRequest(BaseModel):
    """OpenAI API chat completion request model."""

    model: str
    messages: list[OpenAIMessage]
    max_tokens: int = 500
    temperature: float = 0.5
    n: int = 1
    stream: bool = False


class OpenAIChoice(BaseModel):
    """OpenAI API choice model."""

    index: int = 0
    message: OpenAIMessage
    finish_reason: str | None = None


class OpenAIChatResponse(BaseModel):
    """OpenAI API chat completion response model.

    Only the fields the summarizer reads are required.
    """

    kind: Literal["openai"] = Field(default="openai", exclude=True)
    id: str | None = None
    model: str | None = None
    choices: list[OpenAIChoice] = Field(min_length=1)

    def text(self) -> str:
        content = self.choices[0].message.content
        if not content:
            raise MalformedResponseError("Chat completion has no message content")
        return content


class OpenAIDelta(BaseModel):
    """Partial message inside a streamed chunk."""

    role: str | None = None
    content: str | None = None


class OpenAIChunkChoice(BaseModel):
    """Choice entry of a streamed chunk."""

    index: int = 0
    delta: OpenAIDelta
    finish_reason: str | None = None


class ChatCompletionChunk(BaseModel):
    """One ``data:`` frame of a streamed chat completion."""

    id: str | None = None
    choices: list[OpenAIChunkChoice] = Field(default_factory=list)

    def delta_text(self) -> str:
        if not self.choices:
            return ""
        return self.choices[0].delta.content or ""
