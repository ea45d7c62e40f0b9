"""Wire models for the supported AI providers."""

from typing import TypeAlias

from .gemini import (
    GeminiCandidate,
    GeminiContent,
    GeminiPart,
    GeminiResponse,
    GenerateContentRequest,
)
from .openai import (
    ChatCompletionChunk,
    ChatCompletionRequest,
    OpenAIChatResponse,
    OpenAIMessage,
)

ProviderResponse: TypeAlias = OpenAIChatResponse | GeminiResponse

__all__ = [
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "GeminiCandidate",
    "GeminiContent",
    "GeminiPart",
    "GeminiResponse",
    "GenerateContentRequest",
    "OpenAIChatResponse",
    "OpenAIMessage",
    "ProviderResponse",
]
