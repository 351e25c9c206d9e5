"""End-to-end chat flows: UI handlers -> /api/generate -> pipeline -> fake provider.

Each test drives a :class:`ChatSession` through ``submit_prompt`` with a
transport that posts to the real FastAPI app, so the history the UI keeps and
the history the server receives are checked together.
"""

from __future__ import annotations

from imagelab.ui.handlers import submit_prompt
from imagelab.ui.models import FAILED_MESSAGE, ChatSession


def send(session: ChatSession, prompt: str, transport) -> ChatSession:
    for _ in submit_prompt(session, prompt, transport):
        pass
    return session


class TestConversation:
    """Multi-turn conversations through the default pipeline."""

    def test_first_prompt_generates_image(self, transport, fake_client):
        session = send(ChatSession(), "a blue elephant wearing a hat", transport)

        assert [m.kind for m in session.messages] == ["text", "image"]
        assert session.messages[-1].image_b64
        assert session.history.snapshot() == ["a blue elephant wearing a hat"]
        assert fake_client.enhance_calls == []

    def test_follow_up_uses_history(self, transport, fake_client):
        session = send(ChatSession(), "a red castle on a hill", transport)
        fake_client.enhance_reply = "a blue castle on a hill"

        send(session, "make it blue", transport)

        assert transport.payloads[-1] == {"prompt": "make it blue", "history": ["a red castle on a hill"]}
        assert fake_client.image_calls[-1]["prompt"] == "a blue castle on a hill"
        # The raw prompt, not the enhanced one, is remembered.
        assert session.history.snapshot() == ["a red castle on a hill", "make it blue"]

    def test_rejected_prompt_not_added_to_history(self, transport, fake_client):
        session = send(ChatSession(), "a red castle on a hill", transport)
        fake_client.moderation_reply = '{"allowed": false, "reason": "Not appropriate for class"}'

        send(session, "something not allowed", transport)

        assert session.messages[-1].kind == "error"
        assert session.messages[-1].text == "Not appropriate for class"
        assert session.history.snapshot() == ["a red castle on a hill"]

    def test_short_prompt_shows_server_message(self, transport, fake_client):
        session = send(ChatSession(), "hi", transport)

        assert session.messages[-1].text == "Prompt is too short."
        assert fake_client.total_calls == 0

    def test_provider_failure_shows_generic_error(self, transport, fake_client):
        fake_client.image_result = RuntimeError("upstream 503")
        session = send(ChatSession(), "a blue elephant wearing a hat", transport)

        assert session.messages[-1].text == "Server error generating image."
        assert len(session.history) == 0

    def test_url_image_rendered_as_url(self, transport, fake_client, make_image_response):
        fake_client.image_result = make_image_response(url="https://img.example/castle.png")
        session = send(ChatSession(), "a red castle on a hill", transport)

        assert session.messages[-1].image_url == "https://img.example/castle.png"
        assert session.messages[-1].image_b64 is None

    def test_eleven_generations_keep_last_ten(self, transport):
        session = ChatSession()
        prompts = [f"a picture of animal number {i}" for i in range(11)]
        for prompt in prompts:
            send(session, prompt, transport)

        assert session.history.snapshot() == prompts[1:]
        # The eleventh request carried the ten before it.
        assert transport.payloads[-1]["history"] == prompts[:10]
        assert len(transport.payloads[-1]["history"]) == 10

    def test_sessions_do_not_share_history(self, transport):
        first = send(ChatSession(), "a red castle on a hill", transport)
        second = send(ChatSession(), "a green frog on a lily pad", transport)

        assert first.history.snapshot() == ["a red castle on a hill"]
        assert second.history.snapshot() == ["a green frog on a lily pad"]
        assert transport.payloads[-1]["history"] == []


class TestGuardrailConversation:
    def test_blocked_term_shown_and_not_remembered(self, guardrail_transport):
        session = send(ChatSession(), "a cartoon cat holding a gun", guardrail_transport)

        assert session.messages[-1].text == 'Prompt contains a blocked term: "gun".'
        assert len(session.history) == 0
        assert FAILED_MESSAGE not in [m.text for m in session.messages]
