"""Prompt gate base class and registry.

A *prompt gate* decides whether a prompt may be sent to the image provider.
Two implementations ship with the package and are interchangeable:

- :class:`~imagelab.core.moderation.ModerationGate` (``"moderation"``) asks
  a chat model whether the prompt suits a classroom of 12-year-olds.
- :class:`~imagelab.core.guardrails.GuardrailGate` (``"guardrail"``) applies
  a static keyword and length check without any network call.

The active gate is chosen by ``ImageLabConfig.prompt_gate`` and created
through the global :data:`gate_registry`, so the orchestrator never needs to
know which strategy is in use.

Usage
-----
::

    from imagelab.core import gate_registry
    from imagelab.core.config import config

    gate = gate_registry.instantiate(config.prompt_gate, config, client=client)
    verdict = gate.moderate("a blue elephant wearing a hat")
    if not verdict.allowed:
        print(verdict.reason)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from .config import ImageLabConfig

logger = logging.getLogger(__name__)

TOO_SHORT_MESSAGE = "Prompt is too short."


def too_long_message(max_length: int) -> str:
    return f"Prompt is too long (max {max_length} chars)."


@dataclass(frozen=True)
class ModerationVerdict:
    """Allow/reject decision for a single prompt."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> ModerationVerdict:
        return cls(allowed=True)

    @classmethod
    def reject(cls, reason: str) -> ModerationVerdict:
        return cls(allowed=False, reason=reason)


def check_prompt_length(prompt: str | None, min_length: int = 5, max_length: int = 400) -> str | None:
    """Return a rejection reason if *prompt* is outside the length bounds.

    The minimum applies to the trimmed prompt, the maximum to the raw prompt.

    Args:
        prompt: Prompt text, or ``None`` when the client sent none.
        min_length: Minimum number of characters after trimming.
        max_length: Maximum number of characters.

    Returns:
        ``None`` if the prompt is acceptable, otherwise the reason.
    """
    if not prompt or len(prompt.strip()) < min_length:
        return TOO_SHORT_MESSAGE
    if len(prompt) > max_length:
        return too_long_message(max_length)
    return None


class PromptGate(ABC):
    """Abstract base class for prompt gates.

    Subclasses must define ``name`` and ``description`` and implement
    :meth:`moderate`.  Gates are constructed with the application config and
    an optional provider client; gates that make no provider calls ignore
    the client.

    Attributes:
        name: Registry key (matches ``ImageLabConfig.prompt_gate``).
        description: One-line human-readable description.
    """

    name: str = "base"
    description: str = "Base class for prompt gates"

    def __init__(self, config: ImageLabConfig, client: Any | None = None) -> None:
        self.config = config
        self.client = client

    def check_length(self, prompt: str | None) -> str | None:
        return check_prompt_length(
            prompt,
            min_length=self.config.min_prompt_length,
            max_length=self.config.max_prompt_length,
        )

    @abstractmethod
    def moderate(self, prompt: str | None) -> ModerationVerdict:
        """Decide whether *prompt* may be sent to the image provider."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


class GateRegistry:
    """Registry of available prompt gate classes."""

    def __init__(self) -> None:
        self._gates: dict[str, type[PromptGate]] = {}

    def register(self, gate_class: type[PromptGate]) -> type[PromptGate]:
        """Register a gate class under its ``name``.

        Returns the class unchanged so this can be used as a decorator.
        """
        if gate_class.name in self._gates:
            logger.warning(f"Overwriting prompt gate registration: {gate_class.name}")
        self._gates[gate_class.name] = gate_class
        logger.debug(f"Registered prompt gate: {gate_class.name}")
        return gate_class

    def instantiate(
        self,
        gate_name: str,
        config: ImageLabConfig,
        client: Any | None = None,
    ) -> PromptGate:
        """Create an instance of a registered gate.

        Raises:
            KeyError: If *gate_name* is not registered.
        """
        if gate_name not in self._gates:
            available = ", ".join(self.list_available())
            raise KeyError(f"Prompt gate '{gate_name}' not found. Available gates: {available}")

        instance = self._gates[gate_name](config=config, client=client)
        logger.info(f"Instantiated prompt gate: {gate_name}")
        return instance

    def get_gate_class(self, gate_name: str) -> type[PromptGate] | None:
        return self._gates.get(gate_name)

    def list_available(self) -> list[str]:
        return list(self._gates.keys())


# Global gate registry instance
gate_registry = GateRegistry()
