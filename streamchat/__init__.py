"""Stream Chat - conversational client for streamed chat completions.

Sends user text to an OpenAI-compatible endpoint and renders the reply as it
streams in, with the option to stop generation mid-response.

Components:
    - chat: Transcript, SSE decoder, cancellation and conversation controller
    - models: Message records and wire-format schemas
    - api: FastAPI host application
    - ui: NiceGUI chat page
"""

__version__ = "0.1.0"
