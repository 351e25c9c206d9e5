"""Static keyword guardrail for classroom prompts.

The guardrail rejects obviously unsafe or malformed prompts before any
network call.  Matching is a plain case-insensitive substring search against
:data:`BANNED_TERMS` (plus ``ImageLabConfig.extra_banned_terms``), so the
check is cheap and fully deterministic.
"""

from __future__ import annotations

import logging
from typing import Any

from .config import ImageLabConfig
from .gates import ModerationVerdict, PromptGate, gate_registry

logger = logging.getLogger(__name__)

BANNED_TERMS: tuple[str, ...] = (
    # Violence and weapons
    "gun",
    "rifle",
    "pistol",
    "knife",
    "sword fight",
    "murder",
    "killing",
    "kill someone",
    "bloody",
    "gore",
    "bomb",
    "corpse",
    "torture",
    "war crime",
    # Self-harm
    "suicide",
    "self-harm",
    "self harm",
    "hurt myself",
    # Sexual content
    "nude",
    "naked",
    "sexy",
    "sexual",
    "porn",
    "nsfw",
    "lingerie",
    # Hate symbols
    "nazi",
    "swastika",
    "kkk",
    "white power",
    # Drugs
    "cocaine",
    "heroin",
    "drugs",
    # Real people and deepfakes
    "deepfake",
    "deep fake",
    "face swap",
    "faceswap",
    "real photo of",
    "my teacher",
    "my classmate",
)


def blocked_term_message(term: str) -> str:
    return f'Prompt contains a blocked term: "{term}".'


@gate_registry.register
class GuardrailGate(PromptGate):
    """Keyword and length guardrail; makes no provider calls."""

    name = "guardrail"
    description = "Static keyword and length check"

    def __init__(self, config: ImageLabConfig, client: Any | None = None) -> None:
        super().__init__(config, client=None)
        extra = tuple(t.strip().lower() for t in config.extra_banned_terms if t and t.strip())
        self.banned_terms: tuple[str, ...] = BANNED_TERMS + extra

    def check(self, prompt: str | None) -> str | None:
        """Return a rejection reason, or ``None`` if the prompt may proceed."""
        reason = self.check_length(prompt)
        if reason:
            return reason

        lowered = prompt.lower()
        for term in self.banned_terms:
            if term in lowered:
                return blocked_term_message(term)
        return None

    def moderate(self, prompt: str | None) -> ModerationVerdict:
        reason = self.check(prompt)
        if reason:
            logger.info(f"Guardrail rejected prompt: {reason}")
            return ModerationVerdict.reject(reason)
        return ModerationVerdict.allow()
