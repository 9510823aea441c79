from abc import ABC, abstractmethod

from .models import Message, UpdateCallback


class LLMProvider(ABC):
    """Source of assistant replies.

    Hides where reply text comes from: the Gemini HTTP endpoint or a
    simulated stream. One provider is chosen at startup; the controller only
    sees this interface.

    Providers hold network resources and are async context managers:
        async with create_llm_provider("mock") as provider:
            reply = await provider.generate(messages, on_update=print)
    """

    @abstractmethod
    async def generate(
        self,
        messages: list[Message],
        on_update: UpdateCallback | None = None,
    ) -> str:
        """Produce the assistant reply to a transcript.

        Args:
            messages: Transcript, oldest message first
            on_update: Receives the growing partial text, zero or more times

        Returns:
            Final reply text

        Raises:
            RequestError: If the endpoint failed; nothing is returned then
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the HTTP client or other resources."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier shown in the UI."""

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
