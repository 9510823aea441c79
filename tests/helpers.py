"""Helpers shared by the test modules."""
import json


def make_response(*texts: str) -> dict:
    """Build a generateContent response whose first candidate holds ``texts``."""
    return {
        "candidates": [
            {
                "content": {"parts": [{"text": text} for text in texts], "role": "model"},
                "finishReason": "STOP",
                "index": 0,
            }
        ],
        "usageMetadata": {"promptTokenCount": 4, "candidatesTokenCount": 9, "totalTokenCount": 13},
    }


def response_bytes(*texts: str) -> bytes:
    """Serialized response body for ``texts``."""
    return json.dumps(make_response(*texts), ensure_ascii=False).encode("utf-8")


class FakeClock:
    """Millisecond clock that advances by one second per call."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        self.now += 1000
        return self.now
