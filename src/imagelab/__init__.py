"""Classroom Image Lab - classroom-safe AI image generation."""

__version__ = "0.1.0"

from imagelab.core.config import ImageLabConfig, config
from imagelab.core.gates import PromptGate, gate_registry

__all__ = [
    "ImageLabConfig",
    "PromptGate",
    "config",
    "gate_registry",
]
