"""Chat UI for Classroom Image Lab.

Modules
-------
models
    Session state: conversation history and chat bubbles.
handlers
    Submission logic, independent of Gradio.
http_client
    Transport from the UI to ``POST /api/generate``.
app
    Gradio Blocks app and the FastAPI mount helper.
"""
