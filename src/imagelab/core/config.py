"""Configuration management for Classroom Image Lab.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the IMAGELAB_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (IMAGELAB_* prefix)
2. .env file in the project root
3. Default values defined in ImageLabConfig

Two settings also accept the conventional unprefixed names used by hosting
platforms and the OpenAI SDK:

- ``OPENAI_API_KEY`` for :attr:`ImageLabConfig.openai_api_key`
- ``PORT`` for :attr:`ImageLabConfig.server_port`

Example .env file:
    OPENAI_API_KEY=sk-...
    IMAGELAB_PROMPT_GATE=guardrail
    IMAGELAB_CONTEXT_ENHANCEMENT=false
    PORT=3000

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
The API key and port are therefore read once, at process start.

Usage Example
-------------
    from imagelab.core.config import config

    print(config.prompt_gate)
    print(config.default_image_model)

Prompt Gate Selection
---------------------
``prompt_gate`` chooses how prompts are screened before generation:

- ``"moderation"``: an LLM classifies the prompt for a 12-year-old audience.
  Provider failures fail open (the prompt is allowed).
- ``"guardrail"``: a static keyword and length check. No provider call.

See Also
--------
- imagelab.core.gates: The gate registry that consumes ``prompt_gate``
"""

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ImageLabConfig(BaseSettings):
    """Main configuration for Classroom Image Lab.

    Values are loaded from environment variables with the IMAGELAB_ prefix,
    with fallback to defaults defined here.

    Attributes
    ----------
    Provider Settings:
        openai_api_key : str | None
            API credential for the generative provider
        openai_base_url : str | None
            Optional base URL (proxy or compatible endpoint)
        text_model : str
            Chat model used for context enhancement and moderation

    Generation Settings:
        default_image_model : str
            Image model used when a request does not name one
        default_image_size : str
            Image size used when a request does not name one

    Pipeline Settings:
        prompt_gate : Literal["moderation", "guardrail"]
            Which PromptGate screens prompts
        context_enhancement : bool
            Merge conversation history into the prompt before screening
        extra_banned_terms : list[str]
            Terms appended to the guardrail's built-in list
        min_prompt_length / max_prompt_length : int
            Prompt length bounds (trimmed minimum, raw maximum)
        history_limit : int
            Maximum number of prior prompts kept per conversation

    Server Settings:
        server_host / server_port
            Bind address for uvicorn
        ui_enabled : bool
            Mount the Gradio chat UI (``/`` redirects to it)
        ui_path : str
            Mount path of the chat UI
        api_base_url : str | None
            Base URL the UI uses to reach ``/api/generate``
        ui_request_timeout_seconds : float
            Client-side timeout for one generation round trip

    Notes
    -----
    - Configuration is immutable after initialization
    - To modify config, set environment variables and restart the application

    Examples
    --------
    Create a custom configuration:

        >>> custom_config = ImageLabConfig(
        ...     prompt_gate="guardrail",
        ...     context_enhancement=False,
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="IMAGELAB_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Provider settings
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("openai_api_key", "IMAGELAB_OPENAI_API_KEY", "OPENAI_API_KEY"),
        description="API credential for the generative provider",
    )
    openai_base_url: str | None = Field(
        default=None,
        description="Optional provider base URL",
    )
    text_model: str = Field(
        default="gpt-4o-mini",
        description="Chat model used for context enhancement and moderation",
    )

    # Generation defaults
    default_image_model: str = Field(
        default="gpt-image-1-mini",
        description="Image model used when the request does not specify one",
    )
    default_image_size: str = Field(
        default="1024x1024",
        description="Image size used when the request does not specify one",
    )

    # Pipeline settings
    prompt_gate: Literal["moderation", "guardrail"] = Field(
        default="moderation",
        description="Prompt gate implementation (moderation = LLM, guardrail = keyword list)",
    )
    context_enhancement: bool = Field(
        default=True,
        description="Merge conversation history into the prompt before screening",
    )
    extra_banned_terms: list[str] = Field(
        default_factory=list,
        description="Additional guardrail terms (JSON list in the environment)",
    )
    min_prompt_length: int = Field(default=5, ge=1)
    max_prompt_length: int = Field(default=400, ge=1)
    history_limit: int = Field(default=10, ge=0, le=100)

    # Provider call tuning
    enhance_max_tokens: int = Field(default=300, ge=1)
    enhance_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    moderation_max_tokens: int = Field(default=100, ge=1)
    moderation_temperature: float = Field(default=0.0, ge=0.0, le=2.0)

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=3000,
        validation_alias=AliasChoices("server_port", "IMAGELAB_SERVER_PORT", "PORT"),
        description="Server port",
        ge=1024,
        le=65535,
    )
    ui_enabled: bool = Field(
        default=True,
        description="Mount the Gradio chat UI (/ redirects to it)",
    )
    ui_path: str = Field(
        default="/ui",
        description="Path the Gradio chat UI is mounted under",
    )
    api_base_url: str | None = Field(
        default=None,
        description="Base URL the chat UI posts to (defaults to the local server)",
    )
    ui_request_timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="How long the chat UI waits for /api/generate",
    )
    log_level: str = Field(default="INFO")

    @property
    def resolved_api_base_url(self) -> str:
        """Base URL for the chat UI, falling back to the local server address."""
        if self.api_base_url:
            return self.api_base_url.rstrip("/")
        return f"http://127.0.0.1:{self.server_port}"


# Global configuration instance
# Loads values from environment variables (IMAGELAB_* prefix) and .env file.
config = ImageLabConfig()
