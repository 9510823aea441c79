"""Text extraction from (possibly incomplete) Gemini response bodies.

Each function here is one tier of the decoder's fallback chain and can be
used on its own:

1. :func:`parse_last_object` - exact JSON parse from the last ``{``
2. :func:`match_text_field` - tolerant scan for the last ``"text": "..."``
3. raw passthrough (done by the decoder itself)

:func:`parse_document` is the authoritative full-body parse used once the
stream has ended.
"""

import json
import logging
import re
from typing import Any

from ..config import TEXT_FIELD_NAME

logger = logging.getLogger(__name__)

_SSE_PREFIX = "data:"
_SSE_TERMINATOR = "[DONE]"
# Punctuation lines left over when a JSON array stream is split per line.
_ARRAY_FRAMING = {"[", "]", ","}
# Longest escape the stream can cut: an escaped surrogate pair.
_MAX_CUT_ESCAPE = 12
_HIGH_SURROGATE_START = "\ud800"
_HIGH_SURROGATE_END = "\udbff"
_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


def extract_text(payload: Any) -> str | None:
    """Pull the reply text out of a decoded response object.

    Recognizes ``{"candidates": [{"content": {"parts": [{"text": ...}]}}]}``
    and joins the text parts of the first candidate with newlines.

    Args:
        payload: Decoded JSON value

    Returns:
        The joined text (possibly empty when the candidate carries no text),
        or None when ``payload`` does not have the response shape
    """
    if not isinstance(payload, dict):
        return None
    candidates = payload.get("candidates")
    if not isinstance(candidates, list):
        return None
    if not candidates or not isinstance(candidates[0], dict):
        return ""

    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""

    texts = [
        part[TEXT_FIELD_NAME]
        for part in parts
        if isinstance(part, dict) and isinstance(part.get(TEXT_FIELD_NAME), str)
    ]
    return replace_lone_surrogates("\n".join(texts))


def parse_last_object(buffer: str) -> str | None:
    """Parse the buffer from its last opening brace as one JSON value.

    Succeeds only when that suffix is complete JSON with the response shape.
    """
    start = buffer.rfind("{")
    if start == -1:
        return None
    try:
        payload = json.loads(buffer[start:])
    except json.JSONDecodeError:
        return None
    return extract_text(payload)


def replace_lone_surrogates(text: str) -> str:
    """Replace UTF-16 surrogates left over from unpaired ``\\uXXXX`` escapes."""
    return _LONE_SURROGATE.sub("\ufffd", text)


def unescape_fragment(fragment: str) -> str:
    """Decode JSON string escapes in a possibly truncated string body.

    A trailing escape sequence cut off by the stream (``\\u00`` for example,
    or the high half of an escaped surrogate pair whose low half has not
    arrived) is dropped rather than failing the whole fragment.
    """
    for end in range(len(fragment), max(len(fragment) - _MAX_CUT_ESCAPE, 0) - 1, -1):
        try:
            text = json.loads(f'"{fragment[:end]}"', strict=False)
        except json.JSONDecodeError:
            continue
        if text and _HIGH_SURROGATE_START <= text[-1] <= _HIGH_SURROGATE_END:
            continue
        return replace_lone_surrogates(text)
    return fragment.replace('\\"', '"')


def _text_field_pattern(field: str) -> re.Pattern[str]:
    # Closing quote is optional: a string still being streamed is matched too.
    return re.compile(rf'"{re.escape(field)}"\s*:\s*"((?:[^"\\]|\\.)*)', re.DOTALL)


_TEXT_FIELD = _text_field_pattern(TEXT_FIELD_NAME)


def match_text_field(buffer: str, field: str = TEXT_FIELD_NAME) -> str | None:
    """Find the last ``"<field>": "<value>`` pair and return the unescaped value."""
    pattern = _TEXT_FIELD if field == TEXT_FIELD_NAME else _text_field_pattern(field)
    last = None
    for last in pattern.finditer(buffer):
        pass
    if last is None:
        return None
    return unescape_fragment(last.group(1))


def _extract_any(value: Any) -> str | None:
    """Extract from a single response object or an array of stream chunks."""
    if isinstance(value, list):
        texts = [text for text in map(extract_text, value) if text is not None]
        return "".join(texts) if texts else None
    return extract_text(value)


def _loads_line(line: str) -> tuple[bool, Any]:
    # Array element lines carry a leading "[" or a trailing "," / "]".
    for candidate in (line, line.strip("[],").strip()):
        try:
            return True, json.loads(candidate)
        except json.JSONDecodeError:
            continue
    return False, None


def _parse_lines(text: str) -> str | None:
    """Treat the body as newline-delimited JSON or server-sent events."""
    texts = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line.startswith(_SSE_PREFIX):
            line = line[len(_SSE_PREFIX):].strip()
        if not line or line in _ARRAY_FRAMING or line == _SSE_TERMINATOR:
            continue
        parsed, value = _loads_line(line)
        if not parsed:
            return None
        extracted = _extract_any(value)
        if extracted is not None:
            texts.append(extracted)
    return "".join(texts) if texts else None


def parse_document(buffer: str) -> str | None:
    """Parse a complete response body in any supported framing.

    Supported: one JSON object (leading junk before the first brace is
    ignored), a JSON array of response chunks, and newline-delimited JSON or
    ``data:`` lines. Texts of successive chunks are concatenated.

    Returns:
        The reply text, or None when no framing yields the response shape
    """
    text = buffer.strip()
    if not text:
        return None

    starts = [index for index in (text.find("{"), text.find("[")) if index != -1]
    if starts:
        try:
            value = json.loads(text[min(starts):])
        except json.JSONDecodeError:
            pass
        else:
            extracted = _extract_any(value)
            if extracted is not None:
                return extracted

    extracted = _parse_lines(text)
    if extracted is None:
        logger.debug("Full body parse found no response shape (%d chars)", len(text))
    return extracted
