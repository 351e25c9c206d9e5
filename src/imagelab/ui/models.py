"""Data models for the chat UI session."""

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# UI Constants
HISTORY_CAPACITY = 10
THINKING_TEXT = "Thinking..."
IMAGE_CAPTION = "Here's your image:"
FAILED_MESSAGE = "Failed to generate image. Please try again."


@dataclass
class ConversationHistory:
    """Prompts of successful generations in this session, oldest first.

    Holds at most ``capacity`` prompts; pushing beyond that drops the oldest.
    Nothing is persisted: the history lives as long as the browser session.
    """

    capacity: int = HISTORY_CAPACITY
    prompts: list[str] = field(default_factory=list)

    def push(self, prompt: str) -> None:
        self.prompts.append(prompt)
        while len(self.prompts) > self.capacity:
            self.prompts.pop(0)

    def snapshot(self) -> list[str]:
        """Copy of the prompts, safe to send with a request."""
        return list(self.prompts)

    def __len__(self) -> int:
        return len(self.prompts)


@dataclass
class ChatMessage:
    """One chat bubble.

    ``kind`` is one of ``"text"``, ``"thinking"``, ``"error"``, or
    ``"image"``.  Image bubbles carry either ``image_b64`` or ``image_url``.
    """

    role: str
    text: str = ""
    kind: str = "text"
    image_b64: str | None = None
    image_url: str | None = None

    @property
    def is_image(self) -> bool:
        return self.kind == "image"


@dataclass
class ChatSession:
    """Session state for the chat UI.

    Each browser session gets its own ChatSession (via ``gr.State``), so
    conversations never leak between users and tests can drive a session
    without any UI.

    Attributes
    ----------
    history : ConversationHistory
        Prompts sent with the next request as context
    messages : list[ChatMessage]
        Rendered chat bubbles, in display order
    busy : bool
        True while a request is in flight (submit control disabled)
    """

    history: ConversationHistory = field(default_factory=ConversationHistory)
    messages: list[ChatMessage] = field(default_factory=list)
    busy: bool = False

    def add_user_message(self, prompt: str) -> ChatMessage:
        return self._append(ChatMessage(role="user", text=prompt))

    def add_thinking_message(self) -> ChatMessage:
        return self._append(ChatMessage(role="assistant", text=THINKING_TEXT, kind="thinking"))

    def add_error_message(self, text: str) -> ChatMessage:
        return self._append(ChatMessage(role="assistant", text=text, kind="error"))

    def add_image_message(self, *, b64: str | None = None, url: str | None = None) -> ChatMessage:
        return self._append(
            ChatMessage(role="assistant", text=IMAGE_CAPTION, kind="image", image_b64=b64, image_url=url)
        )

    def remove_message(self, message: ChatMessage) -> None:
        # Identity, not equality: two thinking bubbles compare equal.
        self.messages = [m for m in self.messages if m is not message]

    def _append(self, message: ChatMessage) -> ChatMessage:
        self.messages.append(message)
        return message

    def __repr__(self) -> str:
        return f"ChatSession(history={len(self.history)}, messages={len(self.messages)}, busy={self.busy})"
