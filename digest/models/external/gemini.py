"""Gemini generateContent wire models."""

from typing import Literal

from pydantic import BaseModel, Field

from digest.exceptions import MalformedResponseError


class GeminiPart(BaseModel):
    text: str = ""


class GeminiContent(BaseModel):
    role: str | None = None
    parts: list[GeminiPart] = Field(default_factory=list)


class GenerateContentRequest(BaseModel):
    """Gemini API request model."""

    contents: list[GeminiContent]


class GeminiCandidate(BaseModel):
    content: GeminiContent
    finish_reason: str | None = Field(default=None, alias="finishReason")


class GeminiResponse(BaseModel):
    """Gemini API response model."""

    kind: Literal["gemini"] = Field(default="gemini", exclude=True)
    candidates: list[GeminiCandidate] = Field(min_length=1)

    def text(self) -> str:
        text = "".join(part.text for part in self.candidates[0].content.parts)
        if not text:
            raise MalformedResponseError("Gemini candidate has no text parts")
        return text
