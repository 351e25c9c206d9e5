"""Gradio chat UI for Classroom Image Lab."""

import logging
from collections.abc import Callable, Iterator

import gradio as gr
from fastapi import FastAPI

from imagelab.core.config import ImageLabConfig, config

from .handlers import decode_inline_image, submit_prompt
from .http_client import GenerateApiClient, GenerateTransport
from .models import FAILED_MESSAGE, ChatMessage, ChatSession

logger = logging.getLogger(__name__)

GENERATE_LABEL = "Generate"
BUSY_LABEL = "..."
URL_IMAGE_ALT = "Generated image"


def to_chatbot_messages(session: ChatSession) -> list[dict]:
    """Convert session bubbles into ``gr.Chatbot`` message dicts.

    Image bubbles become a caption message followed by the image: inline
    data is decoded with Pillow into a ``gr.Image``, URLs are emitted as a
    markdown image so the browser loads them directly.
    """
    rendered: list[dict] = []
    for message in session.messages:
        if message.is_image:
            rendered.extend(_render_image(message))
        elif message.kind == "thinking":
            rendered.append({"role": message.role, "content": f"_{message.text}_"})
        elif message.kind == "error":
            rendered.append({"role": message.role, "content": f"⚠️ {message.text}"})
        else:
            rendered.append({"role": message.role, "content": message.text})
    return rendered


def _render_image(message: ChatMessage) -> list[dict]:
    caption = {"role": message.role, "content": message.text}

    if message.image_url:
        # gr.Image would download the URL server-side; a markdown reference does not.
        return [caption, {"role": message.role, "content": f"![{URL_IMAGE_ALT}]({message.image_url})"}]

    try:
        image = decode_inline_image(message.image_b64 or "")
        component = gr.Image(value=image, show_label=False)
    except (ValueError, OSError) as e:
        logger.error(f"Could not render image from server: {e}")
        return [{"role": message.role, "content": f"⚠️ {FAILED_MESSAGE}"}]

    return [caption, {"role": message.role, "content": component}]


def _render_outputs(session: ChatSession) -> tuple:
    """Chatbot messages plus textbox/button updates for the current busy state."""
    if session.busy:
        textbox = gr.update(value="", interactive=False)
        button = gr.update(interactive=False, value=BUSY_LABEL)
    else:
        textbox = gr.update(interactive=True)
        button = gr.update(interactive=True, value=GENERATE_LABEL)
    return to_chatbot_messages(session), textbox, button, session


def make_generate_handler(transport: GenerateTransport) -> Callable[[str, ChatSession], Iterator[tuple]]:
    """Build the event handler shared by the Generate button and Enter.

    The handler streams two updates per accepted submission: the thinking
    placeholder with the controls locked, then the final bubble with the
    controls unlocked.  Ignored submissions (empty prompt, or a request
    already in flight) yield the unchanged chat once.
    """

    def generate_prompt(prompt_text, session):
        rendered_any = False
        for updated in submit_prompt(session, prompt_text, transport):
            rendered_any = True
            yield _render_outputs(updated)
        if not rendered_any:
            yield to_chatbot_messages(session), gr.update(), gr.update(), session

    return generate_prompt


def create_ui(settings: ImageLabConfig | None = None, transport: GenerateTransport | None = None) -> gr.Blocks:
    """Create the chat UI.

    Args:
        settings: Configuration; defaults to the global ``config``.
        transport: How submissions reach ``/api/generate``; defaults to an
            HTTP client for ``settings.resolved_api_base_url``.

    Returns:
        Gradio Blocks app
    """
    settings = settings or config
    if transport is None:
        transport = GenerateApiClient(
            base_url=settings.resolved_api_base_url,
            timeout_seconds=settings.ui_request_timeout_seconds,
        )

    app = gr.Blocks(title="AI Image Lab")

    with app:
        # Session state - one instance per user
        session_state = gr.State(ChatSession())

        gr.Markdown(
            """
            # AI Image Lab
            ### Describe a picture and refine it in conversation
            """
        )

        chatbot = gr.Chatbot(type="messages", label="Conversation", height=560)

        with gr.Row():
            # A single-line box submits on plain Enter; it still grows up to max_lines.
            prompt_input = gr.Textbox(
                placeholder="Describe an image... (Enter to send)",
                show_label=False,
                lines=1,
                max_lines=6,
                scale=5,
            )
            generate_btn = gr.Button(GENERATE_LABEL, variant="primary", scale=1)

        # Enter in the prompt box mirrors the button click.  Sessions are
        # gated by ChatSession.busy, so different users may run concurrently.
        gr.on(
            triggers=[generate_btn.click, prompt_input.submit],
            fn=make_generate_handler(transport),
            inputs=[prompt_input, session_state],
            outputs=[chatbot, prompt_input, generate_btn, session_state],
            concurrency_limit=None,
        )

    return app


def mount_chat_ui(app: FastAPI, settings: ImageLabConfig | None = None) -> FastAPI:
    """Mount the chat UI on an existing FastAPI app under ``settings.ui_path``."""
    settings = settings or config
    blocks = create_ui(settings)
    logger.info(f"Mounting chat UI at {settings.ui_path} (API: {settings.resolved_api_base_url})")
    return gr.mount_gradio_app(app, blocks, path=settings.ui_path)
