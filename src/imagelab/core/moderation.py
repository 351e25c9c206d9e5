"""LLM-backed moderation gate for a children's classroom audience.

:class:`ModerationGate` first applies the local length checks, then asks a
chat model to classify the prompt.  The model must answer with a single JSON
object, ``{"allowed": true}`` or ``{"allowed": false, "reason": "..."}``,
and whatever verdict that object decodes to is final.

Failure Policy
--------------
If the provider call raises, or the reply cannot be parsed as the expected
JSON shape, the gate **fails open** and allows the prompt.  A moderation
outage therefore never blocks classroom use.  The trade-off is that unsafe
prompts can reach the image model while the moderation provider is down; the
image provider's own safety system is the remaining line of defence.  Deploy
with ``IMAGELAB_PROMPT_GATE=guardrail`` where that is not acceptable.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from pydantic import BaseModel, StrictBool, ValidationError

from .config import ImageLabConfig
from .gates import ModerationVerdict, PromptGate, gate_registry
from .provider import extract_message_text

logger = logging.getLogger(__name__)

MODERATION_RULES = """
You are a content moderator for an AI image generation tool used in classrooms.
Evaluate if the user's prompt is appropriate for 12 year old children.

REJECT prompts that:
- Are inappropriate for 12 year old children
- Reference real people (celebrities, teachers, classmates, etc.)
- Attempt to generate fake photos or deepfakes
- Are too vague or too short to generate meaningful art

ALLOW prompts that:
- Request creative, artistic, educational, or fun imagery
- Describe fictional characters, landscapes, animals, objects

Respond with ONLY valid JSON in this exact format:
{"allowed": true} or {"allowed": false, "reason": "brief explanation"}
""".strip()

DEFAULT_REJECTION_REASON = "Prompt was rejected by moderation."


class ModerationReply(BaseModel):
    """Expected JSON reply from the moderation model."""

    allowed: StrictBool
    reason: str | None = None


def parse_moderation_reply(content: str) -> ModerationVerdict:
    """Parse the model's reply into a verdict.

    Raises:
        pydantic.ValidationError: If *content* is not a JSON object with a
            boolean ``allowed`` field.
    """
    reply = ModerationReply.model_validate_json(content)
    if reply.allowed:
        return ModerationVerdict.allow()
    reason = (reply.reason or "").strip() or DEFAULT_REJECTION_REASON
    return ModerationVerdict.reject(reason)


@gate_registry.register
class ModerationGate(PromptGate):
    """Classifies prompts with a chat model; fails open on provider errors."""

    name = "moderation"
    description = "Context-aware LLM moderation for 12-year-olds"

    def __init__(self, config: ImageLabConfig, client: Any | None = None) -> None:
        super().__init__(config, client=client)

    def moderate(self, prompt: str | None) -> ModerationVerdict:
        logger.info("Validating prompt...")

        reason = self.check_length(prompt)
        if reason:
            logger.info(f"Rejected before moderation call: {reason}")
            return ModerationVerdict.reject(reason)

        if self.client is None:
            logger.warning("Moderation check skipped: provider client is not configured (failing open)")
            return ModerationVerdict.allow()

        start = time.perf_counter()
        try:
            resp = self.client.chat.completions.create(
                model=self.config.text_model,
                messages=[
                    {"role": "system", "content": MODERATION_RULES},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=self.config.moderation_max_tokens,
                temperature=self.config.moderation_temperature,
            )
            verdict = parse_moderation_reply(extract_message_text(resp))
        except ValidationError as e:
            logger.warning(f"Moderation reply could not be parsed, failing open: {e}")
            return ModerationVerdict.allow()
        except Exception as e:
            logger.warning(f"Moderation check failed, failing open: {e}")
            return ModerationVerdict.allow()

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"Moderation result: {'allowed' if verdict.allowed else 'rejected'} ({elapsed_ms:.0f}ms)")
        if not verdict.allowed:
            logger.info(f"Moderation reason: {verdict.reason}")
        return verdict
