"""Request orchestration: enhance, screen, generate.

:class:`GenerationPipeline` runs the three stages for a single request, one
after the other:

1. **Enhance**: merge the conversation history into the prompt (optional,
   ``ImageLabConfig.context_enhancement``).
2. **Screen**: run the configured :class:`~imagelab.core.gates.PromptGate`
   on the enhanced prompt.  A rejection raises
   :class:`~imagelab.core.errors.PromptRejectedError`.
3. **Generate**: request the image.  Provider failures raise
   :class:`~imagelab.core.errors.GenerationError`.

The raw prompt's length is checked before stage 1 as well, so malformed
prompts never cause a provider call.  Nothing is retried and no state is
kept between requests; one pipeline instance is shared by all requests.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Any

from .config import ImageLabConfig
from .context import ContextEnhancer
from .errors import PromptRejectedError
from .gates import PromptGate, check_prompt_length, gate_registry
from .images import ImageRequester, ImageResult

logger = logging.getLogger(__name__)


class GenerationPipeline:
    """Sequence context enhancement, prompt screening, and image generation."""

    def __init__(
        self,
        config: ImageLabConfig,
        gate: PromptGate,
        requester: ImageRequester,
        enhancer: ContextEnhancer | None = None,
    ) -> None:
        self.config = config
        self.gate = gate
        self.requester = requester
        self.enhancer = enhancer

    @classmethod
    def from_config(cls, config: ImageLabConfig, client: Any | None) -> GenerationPipeline:
        """Build a pipeline whose components all share *client*.

        Raises:
            KeyError: If ``config.prompt_gate`` names no registered gate.
        """
        gate = gate_registry.instantiate(config.prompt_gate, config, client=client)
        enhancer = ContextEnhancer(config, client=client) if config.context_enhancement else None
        return cls(config, gate=gate, requester=ImageRequester(client), enhancer=enhancer)

    def run(
        self,
        prompt: str | None,
        history: Sequence[str] = (),
        size: str | None = None,
        model: str | None = None,
    ) -> ImageResult:
        """Run one generation request end to end.

        Args:
            prompt: The user's prompt (``None`` is treated as empty).
            history: Earlier prompts of the conversation, oldest first.
            size: Image size; defaults to ``config.default_image_size``.
            model: Image model; defaults to ``config.default_image_model``.

        Returns:
            The generated image.

        Raises:
            PromptRejectedError: Length check, guardrail, or moderation
                rejected the prompt.
            GenerationError: The image provider failed.
        """
        request_start = time.perf_counter()
        size = size or self.config.default_image_size
        model = model or self.config.default_image_model
        history = list(history)[-self.config.history_limit :] if self.config.history_limit else []

        logger.info("=== New generation request ===")
        logger.info(f'Prompt: "{prompt}"')
        logger.info(f"History: {len(history)} previous prompts")
        logger.info(f"Model: {model}, Size: {size}")

        reason = check_prompt_length(
            prompt,
            min_length=self.config.min_prompt_length,
            max_length=self.config.max_prompt_length,
        )
        if reason:
            logger.info(f"Request rejected: {reason}")
            raise PromptRejectedError(reason)

        final_prompt = prompt
        if self.enhancer is not None:
            final_prompt = self.enhancer.enhance(prompt, history)

        verdict = self.gate.moderate(final_prompt)
        if not verdict.allowed:
            logger.info(f"Request rejected by {self.gate.name}")
            raise PromptRejectedError(verdict.reason or "Prompt was rejected.")

        result = self.requester.generate(final_prompt, size=size, model=model)

        total_ms = (time.perf_counter() - request_start) * 1000
        kind = "base64 image" if result.is_inline else "image URL"
        logger.info(f"Success: returning {kind} (total: {total_ms:.0f}ms)")
        return result
