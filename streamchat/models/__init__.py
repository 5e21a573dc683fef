"""Pydantic models for transcript records and the completion wire format.

Models:
    - Message: Transcript record (frozen, replaced on update)
    - Notification: User-visible notice with severity
    - CompletionRequest: Outbound chat completion payload
    - CompletionChunk: Envelope of one streamed ``data:`` event
"""

from streamchat.models.schemas import (
    ChatMessage,
    ChunkChoice,
    ChunkDelta,
    CompletionChunk,
    CompletionRequest,
    Message,
    Notification,
    Role,
    Severity,
    new_message_id,
)

__all__ = [
    "ChatMessage",
    "ChunkChoice",
    "ChunkDelta",
    "CompletionChunk",
    "CompletionRequest",
    "Message",
    "Notification",
    "Role",
    "Severity",
    "new_message_id",
]
