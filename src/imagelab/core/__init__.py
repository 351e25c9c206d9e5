"""Core functionality for classroom-safe image generation.

This package holds everything between the HTTP layer and the provider:

1. **Configuration Layer** (config.py):
   - Environment-based configuration using Pydantic Settings
   - All settings prefixed with IMAGELAB_ (plus OPENAI_API_KEY and PORT)

2. **Prompt Gates** (gates.py, guardrails.py, moderation.py):
   - ``PromptGate`` interface and ``gate_registry``
   - ``GuardrailGate``: static keyword and length check
   - ``ModerationGate``: LLM classification, fails open on provider errors

3. **Pipeline Stages**:
   - context.py: conversation-aware prompt enhancement
   - images.py: image provider call and response normalisation
   - pipeline.py: ``GenerationPipeline`` orchestrating the stages

4. **Support Modules**:
   - provider.py: OpenAI client construction
   - errors.py: exceptions mapped to HTTP responses

Usage Example
-------------
    from imagelab.core import GenerationPipeline, config, create_openai_client

    pipeline = GenerationPipeline.from_config(config, create_openai_client(config))
    result = pipeline.run("a blue elephant wearing a hat", history=[])
    print(result.to_payload().keys())
"""

# Import gates to ensure they're registered
# This must happen before the pipeline looks them up
from imagelab.core.config import ImageLabConfig, config
from imagelab.core.gates import ModerationVerdict, PromptGate, gate_registry
from imagelab.core.guardrails import GuardrailGate
from imagelab.core.moderation import ModerationGate
from imagelab.core.context import ContextEnhancer
from imagelab.core.errors import GenerationError, ImageLabError, PromptRejectedError
from imagelab.core.images import ImageRequester, ImageResult
from imagelab.core.pipeline import GenerationPipeline
from imagelab.core.provider import create_openai_client

__all__ = [
    "ContextEnhancer",
    "GenerationError",
    "GenerationPipeline",
    "GuardrailGate",
    "ImageLabConfig",
    "ImageLabError",
    "ImageRequester",
    "ImageResult",
    "ModerationGate",
    "ModerationVerdict",
    "PromptGate",
    "PromptRejectedError",
    "config",
    "create_openai_client",
    "gate_registry",
]
