"""Simulated streaming provider for UI development and tests.

Emits growing prefixes of a fixed demo text on a timer, without any network
access. Selecting it is a startup decision; nothing else changes.
"""

import asyncio
import random

from ...config import MOCK_DEMO_TEXT, MOCK_INTERVAL_SECONDS, MOCK_MAX_STEP
from ..base import LLMProvider
from ..models import Message, UpdateCallback


class MockProvider(LLMProvider):
    """Provider that replays a demo string as if it were streamed."""

    def __init__(
        self,
        demo_text: str = MOCK_DEMO_TEXT,
        interval: float = MOCK_INTERVAL_SECONDS,
        max_step: int = MOCK_MAX_STEP,
        seed: int | None = None,
    ):
        """Initialize the mock provider.

        Args:
            demo_text: Text every reply consists of
            interval: Seconds between two updates
            max_step: Largest number of characters added per update
            seed: Seed for the step sizes (None for non-deterministic)
        """
        if max_step < 1:
            raise ValueError("max_step must be at least 1")
        self._demo_text = demo_text
        self._interval = interval
        self._max_step = max_step
        self._random = random.Random(seed)

    @property
    def name(self) -> str:
        return "mock"

    @property
    def demo_text(self) -> str:
        return self._demo_text

    async def generate(
        self,
        messages: list[Message],
        on_update: UpdateCallback | None = None,
    ) -> str:
        """Stream prefixes of the demo text, then return all of it."""
        index = 0
        while index < len(self._demo_text):
            await asyncio.sleep(self._interval)
            index += self._random.randint(1, self._max_step)
            if on_update is not None:
                on_update(self._demo_text[:index])
        return self._demo_text

    async def close(self) -> None:
        """Nothing to release."""
