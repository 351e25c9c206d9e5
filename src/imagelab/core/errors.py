"""Error taxonomy for the generation pipeline.

Only two kinds of failure ever reach the client:

- :class:`PromptRejectedError` (HTTP 400): the prompt failed a length check,
  the keyword guardrail, or the moderation model.  The message is shown to
  the user verbatim.
- :class:`GenerationError` (HTTP 500): the image provider failed or returned
  something unusable.  The message is a fixed, generic string; the underlying
  provider error is kept on ``cause`` for server-side logging only.

Enhancement and moderation-provider failures are recovered where they happen
(see :mod:`imagelab.core.context` and :mod:`imagelab.core.moderation`) and
never raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

GENERIC_GENERATION_MESSAGE = "Server error generating image."


@dataclass(eq=False)
class ImageLabError(Exception):
    message: str
    http_status: int = 400
    cause: Exception | None = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class PromptRejectedError(ImageLabError):
    """The prompt was refused before any image was requested."""

    def __init__(self, message: str):
        super().__init__(message=message, http_status=400)


class GenerationError(ImageLabError):
    """The image provider failed or returned an unusable response."""

    def __init__(self, message: str = GENERIC_GENERATION_MESSAGE, *, cause: Exception | None = None):
        super().__init__(message=message, http_status=500, cause=cause)


class ProviderNotConfiguredError(GenerationError):
    def __init__(self, setting: str = "OPENAI_API_KEY"):
        super().__init__(cause=RuntimeError(f"{setting} is not set"))
        self.setting = setting
