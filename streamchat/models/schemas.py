import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Speaker of a transcript message."""

    USER = "user"
    ASSISTANT = "assistant"


class Severity(str, Enum):
    """Severity marker for user-visible notifications."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def new_message_id() -> str:
    """Return a fresh opaque message identifier."""
    return uuid.uuid4().hex


class Message(BaseModel):
    """A single record in the conversation transcript.

    Records are frozen; updates produce a new record via ``model_copy``.

    Attributes:
        id: Opaque identifier, unique within a transcript.
        role: Who wrote the message.
        content: Message text. Grows while ``streaming`` is True.
        created_at: Creation timestamp.
        streaming: Whether the record is still receiving fragments.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_message_id)
    role: Role
    content: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    streaming: bool = False


class Notification(BaseModel):
    """User-visible notice emitted by the controller.

    Attributes:
        title: Short headline.
        description: Longer explanation for the user.
        severity: How prominently the UI should present it.
    """

    title: str
    description: str
    severity: Severity = Severity.INFO


class ChatMessage(BaseModel):
    """A role/content pair as sent to the completion endpoint."""

    role: Role
    content: str


class CompletionRequest(BaseModel):
    """Outbound payload for the chat completions endpoint.

    Attributes:
        model: Model identifier understood by the server.
        messages: Conversation history, oldest first.
        temperature: Sampling temperature.
        max_tokens: Output token limit, ``-1`` for unbounded.
        stream: Always True; replies arrive as server-sent events.
    """

    model: str
    messages: list[ChatMessage]
    temperature: float
    max_tokens: int
    stream: bool = True


class ChunkDelta(BaseModel):
    """Incremental content of one streamed choice."""

    content: str | None = None


class ChunkChoice(BaseModel):
    """One choice inside a streamed completion chunk."""

    delta: ChunkDelta = Field(default_factory=ChunkDelta)


class CompletionChunk(BaseModel):
    """Envelope of a single ``data:`` event in the completion stream.

    Only ``choices[0].delta.content`` is used; later choices and unknown
    fields are not inspected.
    """

    choices: list[Any] = Field(default_factory=list)

    def first_content(self) -> str:
        """Return ``choices[0].delta.content`` or an empty string.

        Raises:
            ValidationError: If the first choice has an unexpected shape.
        """
        if not self.choices:
            return ""
        choice = ChunkChoice.model_validate(self.choices[0])
        return choice.delta.content or ""
