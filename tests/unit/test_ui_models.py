"""Tests for chat UI session models."""

from imagelab.ui.models import (
    HISTORY_CAPACITY,
    IMAGE_CAPTION,
    THINKING_TEXT,
    ChatSession,
    ConversationHistory,
)


class TestConversationHistory:
    """Tests for the bounded prompt history."""

    def test_starts_empty(self):
        history = ConversationHistory()
        assert len(history) == 0
        assert history.snapshot() == []

    def test_push_preserves_order(self):
        history = ConversationHistory()
        history.push("a red castle")
        history.push("make it blue")
        assert history.snapshot() == ["a red castle", "make it blue"]

    def test_eleventh_push_evicts_oldest(self):
        history = ConversationHistory()
        for i in range(11):
            history.push(f"prompt {i}")
        assert len(history) == HISTORY_CAPACITY == 10
        assert history.snapshot() == [f"prompt {i}" for i in range(1, 11)]

    def test_custom_capacity(self):
        history = ConversationHistory(capacity=2)
        for prompt in ("one", "two", "three"):
            history.push(prompt)
        assert history.snapshot() == ["two", "three"]

    def test_snapshot_is_a_copy(self):
        history = ConversationHistory()
        history.push("a red castle")
        snapshot = history.snapshot()
        snapshot.append("tampered")
        assert history.snapshot() == ["a red castle"]


class TestChatSession:
    """Tests for ChatSession bubble management."""

    def test_initial_state(self):
        session = ChatSession()
        assert session.messages == []
        assert len(session.history) == 0
        assert session.busy is False

    def test_sessions_are_independent(self):
        first, second = ChatSession(), ChatSession()
        first.history.push("a red castle")
        first.add_user_message("a red castle")
        assert len(second.history) == 0
        assert second.messages == []

    def test_message_kinds(self):
        session = ChatSession()
        user = session.add_user_message("a red castle")
        thinking = session.add_thinking_message()
        error = session.add_error_message("Prompt is too short.")
        image = session.add_image_message(b64="QUJD")

        assert (user.role, user.kind, user.text) == ("user", "text", "a red castle")
        assert (thinking.role, thinking.kind, thinking.text) == ("assistant", "thinking", THINKING_TEXT)
        assert (error.kind, error.text) == ("error", "Prompt is too short.")
        assert image.is_image
        assert image.text == IMAGE_CAPTION
        assert image.image_b64 == "QUJD"
        assert image.image_url is None

    def test_remove_message_by_identity(self):
        session = ChatSession()
        first = session.add_thinking_message()
        second = session.add_thinking_message()
        assert first == second

        session.remove_message(second)
        assert len(session.messages) == 1
        assert session.messages[0] is first

    def test_repr(self):
        session = ChatSession()
        session.add_user_message("a red castle")
        assert repr(session) == "ChatSession(history=0, messages=1, busy=False)"
