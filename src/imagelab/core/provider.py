"""OpenAI client construction and reply helpers.

The provider client is the only process-wide resource shared between
requests, and it is used read-only.  Every component that talks to the
provider receives the client in its constructor, which lets tests pass a
fake object with the same ``chat.completions.create`` / ``images.generate``
surface.
"""

from __future__ import annotations

import logging
from typing import Any

from openai import OpenAI

from .config import ImageLabConfig
from .errors import ProviderNotConfiguredError

logger = logging.getLogger(__name__)


def create_openai_client(settings: ImageLabConfig) -> OpenAI:
    """Build the OpenAI client from configuration.

    Args:
        settings: Configuration holding the API key and optional base URL.

    Returns:
        A ready-to-use synchronous ``OpenAI`` client.

    Raises:
        ProviderNotConfiguredError: If no API key is configured.
    """
    api_key = (settings.openai_api_key or "").strip()
    if not api_key:
        raise ProviderNotConfiguredError("OPENAI_API_KEY")

    client_kwargs: dict[str, object] = {"api_key": api_key}
    if settings.openai_base_url:
        client_kwargs["base_url"] = settings.openai_base_url

    logger.info(f"Created OpenAI client (base_url={settings.openai_base_url or 'default'})")
    return OpenAI(**client_kwargs)


def extract_message_text(resp: Any) -> str:
    """Return the stripped text of the first chat completion choice.

    Malformed responses (no choices, no message, ``None`` content) yield an
    empty string rather than raising.
    """
    try:
        content = (resp.choices[0].message.content or "").strip()
    except (AttributeError, IndexError, KeyError, TypeError):
        content = ""
    return content
