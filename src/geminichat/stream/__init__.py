"""Tolerant decoding of streamed Gemini responses."""

from .decoder import DecoderState, StreamDecoder, best_partial, decode, decode_body, finish
from .extract import extract_text, match_text_field, parse_document, parse_last_object

__all__ = [
    "DecoderState",
    "StreamDecoder",
    "best_partial",
    "decode",
    "decode_body",
    "extract_text",
    "finish",
    "match_text_field",
    "parse_document",
    "parse_last_object",
]
