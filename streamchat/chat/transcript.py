"""Ordered, observable store of conversation messages.

Every mutation commits a new immutable tuple, so observers can detect
changes by identity. Observers are called synchronously after each commit.
"""

import logging
from collections.abc import Callable, Iterator

from streamchat.models.schemas import Message

logger = logging.getLogger(__name__)

Snapshot = tuple[Message, ...]
Observer = Callable[[Snapshot], None]


class Transcript:
    """The ordered log of all messages in one conversation."""

    def __init__(self) -> None:
        self._messages: Snapshot = ()
        self._observers: list[Observer] = []

    @property
    def messages(self) -> Snapshot:
        """Current immutable snapshot, in conversation order."""
        return self._messages

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)

    def get(self, message_id: str) -> Message | None:
        """Return the record with ``message_id``, or None."""
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer for committed snapshots.

        Args:
            observer: Called with the new snapshot after every mutation.

        Returns:
            A callable that removes the observer again.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def append(self, message: Message) -> None:
        """Add ``message`` to the end of the transcript.

        Raises:
            ValueError: If a record with the same id already exists.
        """
        if self.get(message.id) is not None:
            raise ValueError(f"Duplicate message id: {message.id}")
        self._commit((*self._messages, message))

    def replace(self, message_id: str, updater: Callable[[Message], Message]) -> None:
        """Replace the record with ``message_id`` by ``updater(record)``.

        No-op when no such record exists.

        Raises:
            ValueError: If the updater changes the record id.
        """
        for index, message in enumerate(self._messages):
            if message.id != message_id:
                continue
            updated = updater(message)
            if updated.id != message_id:
                raise ValueError("Updater must not change the message id")
            self._commit((*self._messages[:index], updated, *self._messages[index + 1 :]))
            return
        logger.debug(f"replace: no message with id {message_id}")

    def remove(self, message_id: str) -> None:
        """Delete the record with ``message_id``. No-op when absent."""
        remaining = tuple(m for m in self._messages if m.id != message_id)
        if len(remaining) != len(self._messages):
            self._commit(remaining)

    def clear(self) -> None:
        """Remove every record."""
        if self._messages:
            self._commit(())

    def _commit(self, snapshot: Snapshot) -> None:
        self._messages = snapshot
        for observer in list(self._observers):
            observer(snapshot)
