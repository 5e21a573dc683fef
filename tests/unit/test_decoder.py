"""Unit tests for the SSE stream decoder."""

import logging
from collections.abc import Callable, Iterable

import pytest
import pytest_check as check

from streamchat.chat.decoder import StreamDecoder, decode_stream


async def collect(chunks: Iterable[bytes]) -> list[str]:
    """Run decode_stream over ``chunks`` and gather every fragment."""

    async def source():
        for chunk in chunks:
            yield chunk

    return [fragment async for fragment in decode_stream(source())]


class TestDecodeStream:
    """Tests for fragment extraction from byte chunks."""

    async def test_single_fragment_then_done(self) -> None:
        """A content event followed by [DONE] yields exactly that fragment."""
        chunks = [
            b'data: {"choices":[{"delta":{"content":"Hi"}}]}\n',
            b"data: [DONE]\n",
        ]

        assert await collect(chunks) == ["Hi"]

    async def test_payload_split_across_chunks(self) -> None:
        """A JSON payload cut mid-field is reassembled exactly once."""
        chunks = [
            b'data: {"choices":[{"delta":{"conte',
            b'nt":"Hi"}}]}\n',
        ]

        assert await collect(chunks) == ["Hi"]

    async def test_malformed_line_is_skipped(self, sse_event: Callable[[str], bytes]) -> None:
        """Bad JSON between two valid events does not stop extraction."""
        chunks = [sse_event("Hel"), b"data: {not json\n", sse_event("lo")]

        assert await collect(chunks) == ["Hel", "lo"]

    async def test_multibyte_character_split_across_chunks(
        self, sse_event: Callable[[str], bytes]
    ) -> None:
        """A UTF-8 sequence split between receipts decodes intact."""
        raw = sse_event("héllo wörld")
        split = raw.index("é".encode()) + 1

        assert await collect([raw[:split], raw[split:]]) == ["héllo wörld"]

    async def test_multiple_events_in_one_chunk(self, sse_event: Callable[[str], bytes]) -> None:
        """Several complete lines in one receipt all yield, in order."""
        chunk = sse_event("a") + b"\n" + sse_event("b") + sse_event("c")

        assert await collect([chunk]) == ["a", "b", "c"]

    async def test_done_terminates_stream(self, sse_event: Callable[[str], bytes]) -> None:
        """Nothing after [DONE] is yielded, even in the same chunk."""
        chunks = [sse_event("x") + b"data: [DONE]\n" + sse_event("late"), sse_event("later")]

        assert await collect(chunks) == ["x"]

    async def test_non_data_lines_are_ignored(self, sse_event: Callable[[str], bytes]) -> None:
        """Comments, event names and ids carry no content."""
        chunks = [b": keep-alive\n", b"event: message\nid: 7\n", sse_event("ok")]

        assert await collect(chunks) == ["ok"]

    async def test_crlf_line_endings(self) -> None:
        """Carriage returns before the newline are tolerated."""
        chunks = [b'data: {"choices":[{"delta":{"content":"Hi"}}]}\r\n\r\n', b"data: [DONE]\r\n"]

        assert await collect(chunks) == ["Hi"]

    async def test_final_line_without_newline_is_flushed(self) -> None:
        """A last event lacking a trailing newline is still processed."""
        chunks = [b'data: {"choices":[{"delta":{"content":"end"}}]}']

        assert await collect(chunks) == ["end"]

    async def test_events_without_content_yield_nothing(self) -> None:
        """Role-only deltas, empty content, null content and empty choices are skipped."""
        chunks = [
            b'data: {"choices":[{"delta":{"role":"assistant"}}]}\n',
            b'data: {"choices":[{"delta":{"content":""}}]}\n',
            b'data: {"choices":[{"delta":{"content":null}}]}\n',
            b'data: {"choices":[]}\n',
            b'data: {"object":"chat.completion.chunk"}\n',
        ]

        assert await collect(chunks) == []

    async def test_unexpected_shapes_are_skipped(self, sse_event: Callable[[str], bytes]) -> None:
        """Valid JSON of the wrong shape counts as noise, not a failure."""
        chunks = [
            b"data: 42\n",
            b'data: {"choices":"nope"}\n',
            b'data: {"choices":[{"delta":{"content":7}}]}\n',
            sse_event("fine"),
        ]

        assert await collect(chunks) == ["fine"]

    async def test_later_choices_are_not_inspected(
        self, sse_event: Callable[[str], bytes]
    ) -> None:
        """An odd second choice does not hide the first choice's content."""
        chunks = [
            b'data: {"choices":[{"delta":{"content":"x"}},{"delta":"weird"}]}\n',
            b'data: {"choices":[{"delta":{"content":"z"}},42]}\n',
            sse_event("y"),
        ]

        assert await collect(chunks) == ["x", "z", "y"]

    async def test_malformed_first_choice_is_skipped(
        self, sse_event: Callable[[str], bytes]
    ) -> None:
        """A first choice of the wrong shape still counts as noise."""
        chunks = [
            b'data: {"choices":[{"delta":"weird"}]}\n',
            b'data: {"choices":["x"]}\n',
            sse_event("ok"),
        ]

        assert await collect(chunks) == ["ok"]

    async def test_empty_stream(self) -> None:
        """No bytes means no fragments."""
        assert await collect([]) == []

    async def test_empty_stream_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        """A stream that ends with no content is reported."""
        with caplog.at_level(logging.WARNING, logger="streamchat.chat.decoder"):
            await collect([b": keep-alive\n"])

        assert "without any content" in caplog.text

    async def test_stopped_stream_does_not_warn(self, caplog: pytest.LogCaptureFixture) -> None:
        """Ending early on request is not an anomaly."""

        async def source():
            yield b": keep-alive\n"

        with caplog.at_level(logging.WARNING, logger="streamchat.chat.decoder"):
            fragments = [f async for f in decode_stream(source(), stopped=lambda: True)]

        assert fragments == []
        assert "without any content" not in caplog.text

    async def test_sequence_is_single_pass(self, sse_event: Callable[[str], bytes]) -> None:
        """An exhausted fragment sequence cannot be replayed."""

        async def source():
            yield sse_event("once")

        fragments = decode_stream(source())

        check.equal([f async for f in fragments], ["once"])
        check.equal([f async for f in fragments], [])


class TestStreamDecoder:
    """Tests for the synchronous feed/finish interface."""

    def test_partial_line_is_retained(self) -> None:
        """A chunk without a newline produces nothing until completed."""
        decoder = StreamDecoder()

        check.equal(decoder.feed(b'data: {"choices":[{"delta":{"content":"A'), [])
        check.equal(decoder.feed(b'B"}}]}\n'), ["AB"])
        check.equal(decoder.finish(), [])

    def test_skipped_counter(self) -> None:
        """Malformed payloads are counted."""
        decoder = StreamDecoder()

        decoder.feed(b"data: {oops\ndata: [1,\n")

        assert decoder.skipped == 2

    def test_done_flag_blocks_further_input(self) -> None:
        """After [DONE] the decoder ignores everything."""
        decoder = StreamDecoder()

        decoder.feed(b"data: [DONE]\n")

        check.is_true(decoder.done)
        check.equal(decoder.feed(b'data: {"choices":[{"delta":{"content":"x"}}]}\n'), [])
        check.equal(decoder.finish(), [])
