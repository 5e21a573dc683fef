"""Streaming chat core: transcript, decoder, cancellation and controller.

Responsibilities:
    - Conversation transcript ownership and snapshot observers
    - Incremental SSE decoding of streamed completion chunks
    - Cooperative cancellation of the in-flight request
    - Turn orchestration against an OpenAI-compatible endpoint

Maintains clean separation from the UI layer, which only reads snapshots
and calls the controller's entry points.
"""

from streamchat.chat.cancellation import CancellationToken
from streamchat.chat.config import ChatConfig, get_chat_config
from streamchat.chat.controller import ConversationController, StreamError, build_history
from streamchat.chat.decoder import StreamDecoder, decode_stream
from streamchat.chat.transcript import Transcript

__all__ = [
    "CancellationToken",
    "ChatConfig",
    "ConversationController",
    "StreamDecoder",
    "StreamError",
    "Transcript",
    "build_history",
    "decode_stream",
    "get_chat_config",
]
