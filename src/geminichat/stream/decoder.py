"""Incremental decoder for streamed text-generation responses.

Hides the framing of the response body. The endpoint may deliver one JSON
document, a JSON array of chunks, newline-delimited JSON, or something that
only becomes valid JSON once the last byte arrives. The decoder never fails:
while data is arriving it reports the best text it can reconstruct, and at
the end it prefers an exact parse of the whole body.

Functional interface::

    state = DecoderState()
    for chunk in chunks:
        partial, state = decode(chunk, state)
    final = finish(state)

or the stateful wrapper :class:`StreamDecoder`.
"""

import codecs
import logging
from dataclasses import dataclass

from ..config import NO_RESPONSE_TEXT
from .extract import match_text_field, parse_document, parse_last_object

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecoderState:
    """Accumulated stream state.

    Attributes:
        buffer: All text decoded so far
        pending: Trailing bytes of an incomplete UTF-8 sequence
        last_partial: Most recent partial text, None before the first chunk
    """

    buffer: str = ""
    pending: bytes = b""
    last_partial: str | None = None


def best_partial(buffer: str) -> str:
    """Reconstruct the reply text from an incomplete buffer.

    Tries an exact parse from the last opening brace, then a tolerant scan for
    the last text field, then falls back to the raw buffer.
    """
    text = parse_last_object(buffer)
    if text is not None:
        logger.debug("Partial from exact parse (%d chars)", len(text))
        return text

    text = match_text_field(buffer)
    if text is not None:
        logger.debug("Partial from text field match (%d chars)", len(text))
        return text

    return buffer


def _decode_bytes(state: DecoderState, chunk: bytes | str, final: bool) -> tuple[str, bytes]:
    if isinstance(chunk, str):
        # Any dangling partial sequence cannot be completed by text input.
        flushed = codecs.utf_8_decode(state.pending, "replace", True)[0] if state.pending else ""
        return flushed + chunk, b""
    data = state.pending + chunk
    text, consumed = codecs.utf_8_decode(data, "replace", final)
    return text, data[consumed:]


def decode(chunk: bytes | str, state: DecoderState) -> tuple[str, DecoderState]:
    """Consume one chunk of the response body.

    Args:
        chunk: Raw bytes (or already decoded text) as received
        state: State returned by the previous call

    Returns:
        Tuple of (partial_text, new_state)
    """
    text, pending = _decode_bytes(state, chunk, final=False)
    buffer = state.buffer + text
    partial = best_partial(buffer)
    return partial, DecoderState(buffer=buffer, pending=pending, last_partial=partial)


def finish(state: DecoderState) -> str:
    """Produce the final reply text once the stream has ended.

    A full-body parse with the response shape is authoritative. Otherwise the
    last heuristic partial is used, and when that is empty the placeholder
    ``"(no response)"``.
    """
    text, _ = _decode_bytes(state, b"", final=True)
    buffer = state.buffer + text

    document = parse_document(buffer)
    if document is not None:
        return document.strip() or NO_RESPONSE_TEXT

    # Flushed bytes change the buffer, so the stored partial is out of date.
    if text or state.last_partial is None:
        partial = best_partial(buffer)
    else:
        partial = state.last_partial
    return partial.strip() or NO_RESPONSE_TEXT


def decode_body(body: bytes | str) -> str:
    """Decode a response delivered as one complete body."""
    _, state = decode(body, DecoderState())
    return finish(state)


class StreamDecoder:
    """Stateful wrapper around :func:`decode` and :func:`finish`.

    One instance per response stream; instances never share a buffer.
    """

    def __init__(self) -> None:
        self._state = DecoderState()
        self._finished = False

    @property
    def state(self) -> DecoderState:
        """Current decoder state."""
        return self._state

    @property
    def buffer(self) -> str:
        """All text received so far."""
        return self._state.buffer

    def feed(self, chunk: bytes | str) -> str:
        """Add a chunk and return the current partial text."""
        if self._finished:
            raise RuntimeError("Cannot feed a finished stream decoder")
        partial, self._state = decode(chunk, self._state)
        return partial

    def finish(self) -> str:
        """Return the final text; the decoder accepts no more chunks."""
        self._finished = True
        return finish(self._state)

    def reset(self) -> None:
        """Discard all accumulated data."""
        self._state = DecoderState()
        self._finished = False
