"""Shared pytest fixtures for Image Lab tests."""

import base64
import io
import os
from types import SimpleNamespace
from typing import Any

# Keep the module-level app in imagelab.api.main light: no Gradio mount.
os.environ.setdefault("IMAGELAB_UI_ENABLED", "false")
os.environ.setdefault("GRADIO_ANALYTICS_ENABLED", "False")

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from imagelab.core.config import ImageLabConfig
from imagelab.core.moderation import MODERATION_RULES
from imagelab.ui.http_client import HttpResult


def chat_response(text: str | None) -> SimpleNamespace:
    """Build an object shaped like an OpenAI chat completion."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def image_response(*, b64: str | None = None, url: str | None = None) -> SimpleNamespace:
    """Build an object shaped like an OpenAI images response with one item."""
    return SimpleNamespace(data=[SimpleNamespace(b64_json=b64, url=url)])


class FakeOpenAI:
    """Stand-in for the OpenAI client.

    Chat calls are routed by their system message: the moderation rules get
    ``moderation_reply``, anything else gets ``enhance_reply``.  Setting a
    reply to an exception instance makes the call raise it.
    """

    def __init__(self, image_result: Any) -> None:
        self.enhance_reply: Any = "a detailed enhanced prompt"
        self.moderation_reply: Any = '{"allowed": true}'
        self.image_result: Any = image_result

        self.enhance_calls: list[dict] = []
        self.moderation_calls: list[dict] = []
        self.image_calls: list[dict] = []

        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create_chat))
        self.images = SimpleNamespace(generate=self._generate_image)

    @property
    def total_calls(self) -> int:
        return len(self.enhance_calls) + len(self.moderation_calls) + len(self.image_calls)

    def _create_chat(self, **kwargs):
        if kwargs["messages"][0]["content"] == MODERATION_RULES:
            self.moderation_calls.append(kwargs)
            reply = self.moderation_reply
        else:
            self.enhance_calls.append(kwargs)
            reply = self.enhance_reply
        if isinstance(reply, Exception):
            raise reply
        return chat_response(reply)

    def _generate_image(self, **kwargs):
        self.image_calls.append(kwargs)
        if isinstance(self.image_result, Exception):
            raise self.image_result
        return self.image_result


@pytest.fixture
def png_b64() -> str:
    """A tiny real PNG, base64-encoded."""
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color=(30, 60, 200)).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


@pytest.fixture
def fake_client(png_b64: str) -> FakeOpenAI:
    """Fake provider that allows everything and returns an inline PNG."""
    return FakeOpenAI(image_result=image_response(b64=png_b64))


@pytest.fixture
def test_config(monkeypatch) -> ImageLabConfig:
    """Configuration isolated from the environment and any .env file."""
    for name in ("OPENAI_API_KEY", "PORT", "IMAGELAB_PROMPT_GATE", "IMAGELAB_CONTEXT_ENHANCEMENT"):
        monkeypatch.delenv(name, raising=False)
    return ImageLabConfig(
        _env_file=None,
        openai_api_key="test-key",
        ui_enabled=False,
    )


@pytest.fixture
def guardrail_config(test_config: ImageLabConfig) -> ImageLabConfig:
    """Configuration for the simplified variant: keyword guardrail, no enhancement."""
    return test_config.model_copy(update={"prompt_gate": "guardrail", "context_enhancement": False})


@pytest.fixture
def test_client(test_config: ImageLabConfig, fake_client: FakeOpenAI) -> TestClient:
    """TestClient for an app whose pipeline talks to ``fake_client``."""
    from imagelab.api.main import create_app

    return TestClient(create_app(test_config, client=fake_client))


class ApiTransport:
    """Routes chat UI submissions through a FastAPI TestClient."""

    def __init__(self, client: TestClient) -> None:
        self.client = client
        self.payloads: list[dict] = []

    def post_generate(self, payload: dict) -> HttpResult:
        self.payloads.append(payload)
        resp = self.client.post("/api/generate", json=payload)
        return HttpResult(
            status_code=resp.status_code,
            headers={k.lower(): v for k, v in resp.headers.items()},
            body_bytes=resp.content,
        )


@pytest.fixture
def transport(test_client: TestClient) -> ApiTransport:
    return ApiTransport(test_client)


@pytest.fixture
def make_image_response():
    """Factory for provider image responses (``b64=`` or ``url=``)."""
    return image_response


@pytest.fixture
def make_chat_response():
    """Factory for provider chat completion responses."""
    return chat_response


@pytest.fixture
def guardrail_transport(guardrail_config: ImageLabConfig, fake_client: FakeOpenAI) -> ApiTransport:
    """Transport for an app running the keyword guardrail variant."""
    from imagelab.api.main import create_app

    return ApiTransport(TestClient(create_app(guardrail_config, client=fake_client)))
