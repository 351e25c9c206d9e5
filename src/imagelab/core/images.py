"""Image provider calls and response normalisation.

The provider may return an image either inline (base64 data) or as a remote
URL.  :class:`ImageRequester` turns the first returned item into an
:class:`ImageResult` holding exactly one of the two.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from .errors import GenerationError, ProviderNotConfiguredError

logger = logging.getLogger(__name__)

NO_IMAGE_MESSAGE = "No image returned."
UNSUPPORTED_FORMAT_MESSAGE = "Unsupported image response format."


@dataclass(frozen=True)
class ImageResult:
    """A generated image: inline base64 data or a remote URL, never both."""

    b64: str | None = None
    url: str | None = None

    def __post_init__(self) -> None:
        if bool(self.b64) == bool(self.url):
            raise ValueError("ImageResult requires exactly one of b64 or url")

    @property
    def is_inline(self) -> bool:
        return self.b64 is not None

    def to_payload(self) -> dict[str, str]:
        """JSON body for a successful ``POST /api/generate`` response."""
        if self.b64:
            return {"b64": self.b64}
        return {"url": self.url}


class ImageRequester:
    """Submit prompts to the image provider."""

    def __init__(self, client: Any | None) -> None:
        self.client = client

    def generate(self, prompt: str, size: str, model: str) -> ImageResult:
        """Generate one image.

        Args:
            prompt: Final (possibly enhanced) prompt.
            size: Provider size string, e.g. ``"1024x1024"``.
            model: Provider model identifier.

        Returns:
            The normalised image result.

        Raises:
            GenerationError: Provider error, no image, or an item carrying
                neither inline data nor a URL.
        """
        if self.client is None:
            exc = ProviderNotConfiguredError()
            logger.error(f"Image generation unavailable: {exc.cause}")
            raise exc

        logger.info(f"Starting image generation (model={model}, size={size})...")
        start = time.perf_counter()
        try:
            result = self.client.images.generate(model=model, prompt=prompt, size=size)
        except Exception as e:
            logger.error(f"Image provider error: {e}")
            raise GenerationError(cause=e) from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"Image generated ({elapsed_ms:.0f}ms)")

        items = getattr(result, "data", None) or []
        if not items:
            logger.error("No image in provider response")
            raise GenerationError(NO_IMAGE_MESSAGE)

        first = items[0]
        b64 = getattr(first, "b64_json", None)
        if b64:
            return ImageResult(b64=b64)
        url = getattr(first, "url", None)
        if url:
            return ImageResult(url=url)

        logger.error("Unsupported image response format")
        raise GenerationError(UNSUPPORTED_FORMAT_MESSAGE)
