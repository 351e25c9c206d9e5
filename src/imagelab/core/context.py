"""Conversation-aware prompt enhancement.

Follow-up requests such as "make it blue" only make sense together with the
earlier prompts of the conversation.  :class:`ContextEnhancer` sends the
history and the new request to a chat model, which either merges them into a
single descriptive prompt or returns the new request unchanged when it is
unrelated.

Enhancement is best-effort.  Any failure returns the original prompt, so a
problem here never blocks image generation.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Any

from .config import ImageLabConfig
from .provider import extract_message_text

logger = logging.getLogger(__name__)

CONTEXT_PROMPT = """
You help create image generation prompts. The user has been having a conversation about images they want to create.

Given the conversation history and the user's new request, create a single, detailed prompt for image generation that incorporates relevant context from previous requests.

If the new request is completely unrelated to the history, just return the new request as-is.
If the new request references something from before (like "make it blue" or "add a hat"), combine it with the relevant context.

Return ONLY the enhanced prompt text, nothing else.
""".strip()


def format_history(history: Sequence[str]) -> str:
    """Format prior prompts as a numbered list, oldest first.

    >>> format_history(["a red castle", "add a moat"])
    '1. a red castle\\n2. add a moat'
    """
    return "\n".join(f"{i}. {item}" for i, item in enumerate(history, start=1))


def build_user_message(prompt: str, history: Sequence[str]) -> str:
    return f"Previous prompts:\n{format_history(history)}\n\nNew request: {prompt}"


def clean_enhanced_text(content: str) -> str:
    """Collapse whitespace and strip wrapping quotes from a model reply."""
    content = " ".join(content.split())
    if len(content) >= 2 and content[0] == '"' and content[-1] == '"':
        content = content[1:-1].strip()
    return content


class ContextEnhancer:
    """Merge conversation history into a new prompt using a chat model."""

    def __init__(self, config: ImageLabConfig, client: Any | None = None) -> None:
        self.config = config
        self.client = client

    def enhance(self, prompt: str, history: Sequence[str] | None) -> str:
        """Return the enhanced prompt, or *prompt* itself when there is no usable context.

        Args:
            prompt: The user's new request.
            history: Earlier prompts of the conversation, oldest first.

        Returns:
            The merged prompt, or the original prompt if the history is
            empty or the provider call fails in any way.
        """
        if not history:
            return prompt

        if self.client is None:
            logger.warning("Context enhancement skipped: provider client is not configured")
            return prompt

        logger.info(f"Enhancing prompt with {len(history)} previous prompts...")
        start = time.perf_counter()
        try:
            resp = self.client.chat.completions.create(
                model=self.config.text_model,
                messages=[
                    {"role": "system", "content": CONTEXT_PROMPT},
                    {"role": "user", "content": build_user_message(prompt, history)},
                ],
                max_tokens=self.config.enhance_max_tokens,
                temperature=self.config.enhance_temperature,
            )
        except Exception as e:
            logger.warning(f"Context enhancement failed: {e}")
            return prompt

        enhanced = clean_enhanced_text(extract_message_text(resp))
        if not enhanced:
            logger.warning("Context enhancement returned no text, using original prompt")
            return prompt

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f'Enhanced prompt: "{enhanced}" ({elapsed_ms:.0f}ms)')
        return enhanced
