"""Pydantic request and response models for the Image Lab API.

Models
------
GenerateRequest
    Payload for ``POST /api/generate``: the prompt, the conversation history
    held by the client, and optional size/model overrides.
ImageResponse
    Successful response: exactly one of ``b64`` or ``url``.
ErrorResponse
    Error response for 400 (rejected prompt) and 500 (generation failure).
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class GenerateRequest(BaseModel):
    """Request body for the ``POST /api/generate`` endpoint.

    Attributes:
        prompt: Text describing the desired image.  ``None`` is accepted here
            and rejected by the pipeline as too short, so the client gets the
            same message for a missing and an empty prompt.
        history: Earlier prompts of the conversation, oldest first.  The
            pipeline uses only the most recent ``history_limit`` entries.
        size: Image size, e.g. ``"1024x1024"``.  ``None`` uses the configured
            default.
        model: Image model identifier.  ``None`` uses the configured default.
    """

    prompt: str | None = Field(
        default=None,
        description="Text describing the desired image (5-400 characters).",
    )
    history: list[str] = Field(
        default_factory=list,
        description="Up to 10 earlier prompts of this conversation, oldest first.",
    )
    size: str | None = Field(
        default=None,
        description="Image size, e.g. '1024x1024'.",
    )
    model: str | None = Field(
        default=None,
        description="Image model identifier, e.g. 'gpt-image-1-mini'.",
    )

    @field_validator("history", mode="before")
    @classmethod
    def _none_history_is_empty(cls, value):
        return [] if value is None else value


class ImageResponse(BaseModel):
    """Successful generation: inline base64 data or a remote URL."""

    b64: str | None = Field(default=None, description="Base64-encoded image data.")
    url: str | None = Field(default=None, description="Remote image URL.")


class ErrorResponse(BaseModel):
    """Error body returned with 400 and 500 responses."""

    error: str = Field(..., description="Human-readable error message.")
