"""Chat submission handlers.

These functions hold the UI behaviour independently of Gradio: they mutate a
:class:`~imagelab.ui.models.ChatSession` and are driven by the Gradio event
wrappers in :mod:`imagelab.ui.app` (or directly by tests).
"""

import base64
import binascii
import io
import logging
from collections.abc import Iterator
from typing import Any

import requests
from PIL import Image

from .http_client import GenerateTransport
from .models import FAILED_MESSAGE, ChatSession

logger = logging.getLogger(__name__)


def submit_prompt(
    session: ChatSession, prompt_text: str | None, transport: GenerateTransport
) -> Iterator[ChatSession]:
    """Send one prompt to the server and render the outcome into *session*.

    Yields the session twice: once while the request is in flight (user
    bubble plus "thinking" placeholder, ``busy`` set) and once with the final
    bubble.  A prompt that is empty after trimming, or any submission while
    the session already has a request in flight, yields nothing.

    Args:
        session: Chat session to update.
        prompt_text: Raw text from the prompt box.
        transport: Sends the request to ``/api/generate``.

    Yields:
        The updated session.
    """
    if session.busy:
        logger.info("Ignoring submission: a request is already in flight")
        return

    prompt = (prompt_text or "").strip()
    if not prompt:
        return

    session.add_user_message(prompt)
    thinking = session.add_thinking_message()
    session.busy = True
    yield session

    try:
        result = transport.post_generate({"prompt": prompt, "history": session.history.snapshot()})
        data = result.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Generation request failed: {e}")
        session.remove_message(thinking)
        session.add_error_message(FAILED_MESSAGE)
    else:
        session.remove_message(thinking)
        apply_reply(session, prompt, data)
    finally:
        session.busy = False

    yield session


def apply_reply(session: ChatSession, prompt: str, data: Any) -> None:
    """Render a ``/api/generate`` JSON body into *session*.

    ``{"error": ...}`` becomes an error bubble.  ``{"b64": ...}`` or
    ``{"url": ...}`` becomes an image bubble, and only then is *prompt*
    added to the conversation history.
    """
    if not isinstance(data, dict):
        session.add_error_message(FAILED_MESSAGE)
        return

    if data.get("error"):
        session.add_error_message(str(data["error"]))
        return

    b64 = data.get("b64")
    url = data.get("url")
    if not b64 and not url:
        logger.warning(f"Reply carried no image: keys={sorted(data)}")
        session.add_error_message(FAILED_MESSAGE)
        return

    session.history.push(prompt)
    if b64:
        session.add_image_message(b64=b64)
    else:
        session.add_image_message(url=url)


def decode_inline_image(b64: str) -> Image.Image:
    """Decode base64 image data into a PIL image.

    Raises:
        ValueError: If the data is not valid base64 or not a readable image.
    """
    try:
        raw = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 image data: {e}") from e

    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except OSError as e:
        raise ValueError(f"Unreadable image data: {e}") from e
    return image
