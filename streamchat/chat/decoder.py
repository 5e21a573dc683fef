"""Server-sent event decoder for streamed chat completions.

Turns the raw bytes of a completion response into the text fragments found
at ``choices[0].delta.content``. Bytes are decoded incrementally, so chunk
boundaries may fall anywhere, including inside a multi-byte character or in
the middle of a JSON payload.
"""

import codecs
import logging
from collections.abc import AsyncIterable, AsyncIterator, Callable

from pydantic import ValidationError

from streamchat.models.schemas import CompletionChunk

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class StreamDecoder:
    """Incremental parser from SSE bytes to content fragments.

    Feed it byte chunks in arrival order; each call returns the fragments
    completed by that chunk. Once the ``[DONE]`` marker has been seen the
    decoder is finished and ignores further input.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.done = False
        self.skipped = 0

    def feed(self, chunk: bytes) -> list[str]:
        """Consume one byte chunk.

        Args:
            chunk: Raw bytes as received from the response body.

        Returns:
            Fragments from every line completed by this chunk, in order.
        """
        if self.done:
            return []
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return self._process(lines)

    def finish(self) -> list[str]:
        """Flush the decoder at end of input and process any final line."""
        if self.done:
            return []
        self._buffer += self._decoder.decode(b"", final=True)
        tail, self._buffer = self._buffer, ""
        fragments = self._process([tail])
        self.done = True
        return fragments

    def _process(self, lines: list[str]) -> list[str]:
        fragments: list[str] = []
        for raw_line in lines:
            line = raw_line.rstrip("\r")
            if not line.strip() or not line.startswith(DATA_PREFIX):
                continue
            payload = line[len(DATA_PREFIX) :]
            if payload == DONE_SENTINEL:
                self.done = True
                break
            fragment = self._extract(payload)
            if fragment:
                fragments.append(fragment)
        return fragments

    def _extract(self, payload: str) -> str:
        try:
            return CompletionChunk.model_validate_json(payload).first_content()
        except ValidationError:
            # Tolerated protocol noise: skip the event, keep the stream going
            self.skipped += 1
            logger.debug(f"Skipping malformed event payload: {payload[:200]}")
            return ""


async def decode_stream(
    chunks: AsyncIterable[bytes],
    stopped: Callable[[], bool] | None = None,
) -> AsyncIterator[str]:
    """Lazily yield content fragments from an SSE byte stream.

    Single-pass: the sequence ends at ``[DONE]`` or when ``chunks`` is
    exhausted, and cannot be restarted.

    Args:
        chunks: Response body bytes in arrival order.
        stopped: Reports whether the caller cut ``chunks`` short on purpose.
            An empty stream is only worth a warning when it did not.

    Yields:
        Non-empty text fragments, in stream order.
    """
    decoder = StreamDecoder()
    count = 0

    async for chunk in chunks:
        for fragment in decoder.feed(chunk):
            count += 1
            yield fragment
        if decoder.done:
            break
    else:
        for fragment in decoder.finish():
            count += 1
            yield fragment

    if count == 0 and not (stopped and stopped()):
        logger.warning("Stream ended without any content fragments")
    if decoder.skipped:
        logger.info(f"Skipped {decoder.skipped} malformed event(s) in stream")
