"""Conversation controller: one streamed request/response turn at a time.

Owns the transcript and the in-flight request. A turn appends the user
message and an assistant placeholder, posts the conversation to the
completion endpoint, and grows the placeholder fragment by fragment as the
server streams its reply.

Turn states::

    Idle -> UserAppended -> PlaceholderAppended -> Streaming
         -> Completed | Cancelled | Failed -> Idle

Completed and Cancelled leave a finalized assistant record. Failed removes
it and emits exactly one error notification; the user message stays.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from contextlib import aclosing

import httpx

from streamchat.chat.cancellation import CancellationToken
from streamchat.chat.config import ChatConfig, get_chat_config
from streamchat.chat.decoder import decode_stream
from streamchat.chat.transcript import Snapshot, Transcript
from streamchat.models.schemas import (
    ChatMessage,
    CompletionRequest,
    Message,
    Notification,
    Role,
    Severity,
)

logger = logging.getLogger(__name__)

NotificationHandler = Callable[[Notification], None]


class StreamError(Exception):
    """Raised when the completion endpoint cannot deliver a stream.

    Attributes:
        status_code: HTTP status, or None for transport failures.
        url: Endpoint that was called.
        response_body: Start of the error body, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
        response_body: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        self.response_body = response_body
        super().__init__(message)

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.status_code is not None:
            parts.append(f"HTTP {self.status_code}")
        if self.url:
            parts.append(f"Endpoint: {self.url}")
        if self.response_body:
            parts.append(f"Response: {self.response_body[:500]}")
        return " | ".join(parts)


def build_history(prior: Sequence[Message], user_message: Message) -> list[ChatMessage]:
    """Select the role/content pairs sent to the server for a new turn.

    Streaming records and empty assistant placeholders are left out so the
    server never sees incomplete state.

    Args:
        prior: Transcript records before this turn, oldest first.
        user_message: The message being sent.

    Returns:
        Ordered history ending with ``user_message``.
    """
    history = [
        ChatMessage(role=m.role, content=m.content)
        for m in prior
        if m.role == Role.USER or (not m.streaming and m.content.strip())
    ]
    history.append(ChatMessage(role=user_message.role, content=user_message.content))
    return history


class ConversationController:
    """Drives streamed chat turns against an OpenAI-compatible endpoint.

    Wraps the transcript and an ``httpx.AsyncClient`` with:
    - A single in-flight request, cancellable via :meth:`stop_generation`
    - Incremental application of streamed fragments to the transcript
    - Cleanup and user notification when a turn fails
    """

    def __init__(
        self,
        config: ChatConfig | None = None,
        client: httpx.AsyncClient | None = None,
        on_notification: NotificationHandler | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            config: Optional chat configuration.
                    Loads from environment if not provided.
            client: Optional HTTP client. One is created (and owned) if omitted.
            on_notification: Receives user-visible notifications.
        """
        self._config = config or get_chat_config()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.request_timeout)
        )
        self._on_notification = on_notification
        self._transcript = Transcript()
        self._in_flight: CancellationToken | None = None

    @property
    def transcript(self) -> Transcript:
        return self._transcript

    @property
    def messages(self) -> Snapshot:
        """Current transcript snapshot."""
        return self._transcript.messages

    @property
    def is_streaming(self) -> bool:
        """True while any transcript record is still receiving fragments."""
        return any(m.streaming for m in self._transcript.messages)

    @property
    def is_busy(self) -> bool:
        """True while a request is in flight."""
        return self._in_flight is not None

    def subscribe(self, observer: Callable[[Snapshot], None]) -> Callable[[], None]:
        """Observe transcript snapshots. Returns an unsubscribe callable."""
        return self._transcript.subscribe(observer)

    async def send_message(self, text: str) -> None:
        """Run one full turn for ``text``.

        Blank input is ignored. While another turn is in flight the call is
        rejected with a warning notification.

        Args:
            text: The user's message.
        """
        content = text.strip()
        if not content:
            return

        if self._in_flight is not None:
            logger.warning("Rejected message: a response is still streaming")
            self._notify(
                title="Response in progress",
                description="Wait for the current reply to finish or stop it first.",
                severity=Severity.WARNING,
            )
            return

        prior = self._transcript.messages
        user_message = Message(role=Role.USER, content=content)
        self._transcript.append(user_message)

        placeholder = Message(role=Role.ASSISTANT, streaming=True)
        self._transcript.append(placeholder)

        request = CompletionRequest(
            model=self._config.model_name,
            messages=build_history(prior, user_message),
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )

        token = CancellationToken()
        self._in_flight = token
        logger.info(
            f"Sending turn with {len(request.messages)} message(s) to {self._config.api_url}"
        )

        try:
            await self._stream_reply(request, placeholder.id, token)
        except asyncio.CancelledError:
            self._finalize(placeholder.id)
            raise
        except StreamError as e:
            logger.error(f"Chat request failed: {e}")
            self._discard(placeholder.id)
        except Exception:
            logger.exception("Unexpected failure while streaming reply")
            self._discard(placeholder.id)
        finally:
            self._in_flight = None

    def stop_generation(self) -> None:
        """Cancel the in-flight request, if any."""
        if self._in_flight is not None:
            logger.info("Stopping generation")
            self._in_flight.cancel()

    def clear_messages(self) -> None:
        """Empty the transcript. An in-flight stream keeps running harmlessly."""
        self._transcript.clear()

    async def aclose(self) -> None:
        """Cancel any running turn and close the HTTP client if owned."""
        self.stop_generation()
        if self._owns_client:
            await self._client.aclose()

    async def _stream_reply(
        self,
        request: CompletionRequest,
        placeholder_id: str,
        token: CancellationToken,
    ) -> None:
        url = self._config.api_url
        http_request = self._client.build_request(
            "POST",
            url,
            json=request.model_dump(mode="json"),
            headers={"Accept": "text/event-stream"},
        )

        try:
            response = await token.run(self._client.send(http_request, stream=True))
        except httpx.HTTPError as e:
            raise StreamError(f"Connection failed: {e}", url=url) from e

        if response is None:
            logger.info("Request cancelled before response headers arrived")
            self._finalize(placeholder_id)
            return

        try:
            if not response.is_success:
                raw = await token.run(response.aread())
                if raw is None:
                    logger.info(
                        f"Stopped while reading HTTP {response.status_code} error body"
                    )
                    self._finalize(placeholder_id)
                    return
                body = raw.decode("utf-8", errors="replace")
                raise StreamError(
                    "Completion endpoint returned an error",
                    status_code=response.status_code,
                    url=url,
                    response_body=body[:500],
                )

            accumulated = ""
            fragments = decode_stream(
                token.iterate(response.aiter_bytes()), stopped=token.is_cancelled
            )
            async with aclosing(fragments):
                async for fragment in fragments:
                    if token.is_cancelled():
                        break
                    accumulated += fragment
                    self._transcript.replace(
                        placeholder_id,
                        lambda m, text=accumulated: m.model_copy(
                            update={"content": text, "streaming": True}
                        ),
                    )
        except httpx.HTTPError as e:
            raise StreamError(f"Stream interrupted: {e}", url=url) from e
        finally:
            await response.aclose()

        if token.is_cancelled():
            logger.info(f"Generation stopped after {len(accumulated)} characters")
        else:
            logger.info(f"Reply complete ({len(accumulated)} characters)")
        self._finalize(placeholder_id)

    def _finalize(self, placeholder_id: str) -> None:
        self._transcript.replace(
            placeholder_id, lambda m: m.model_copy(update={"streaming": False})
        )

    def _discard(self, placeholder_id: str) -> None:
        self._transcript.remove(placeholder_id)
        self._notify(
            title="Error",
            description=(
                "Failed to get response from the API. "
                "Please check your endpoint configuration."
            ),
            severity=Severity.ERROR,
        )

    def _notify(self, title: str, description: str, severity: Severity) -> None:
        if self._on_notification is None:
            return
        self._on_notification(
            Notification(title=title, description=description, severity=severity)
        )
