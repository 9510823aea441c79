"""Google Gemini provider over the plain REST API.

Talks to ``models/{model}:generateContent`` with httpx and feeds the raw
response bytes through :class:`~geminichat.stream.StreamDecoder`, so the
reply is shown while it arrives whatever framing the endpoint uses.
Reference: https://ai.google.dev/api/generate-content
"""

import logging
from typing import Any

import httpx

from ...config import DEFAULT_BASE_URL, DEFAULT_MODEL
from ...exceptions import RequestError
from ...stream import StreamDecoder, decode_body
from ..base import LLMProvider
from ..models import Message, UpdateCallback
from ..payload import build_payload

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """Google Gemini provider implementation.

    Hidden design decisions:
    - Endpoint URL layout and API key placement
    - Request body format (see :func:`build_payload`)
    - Incremental versus single-body reading of the response
    - Mapping of HTTP failures to :class:`RequestError`
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        system_prompt: str | None = None,
        streaming: bool = True,
        timeout: float = 60.0,
        **client_kwargs: Any
    ):
        """Initialize Gemini provider.

        Args:
            api_key: Google AI API key
            model: Default model (gemini-2.5-flash, gemini-2.5-pro, ...)
            base_url: API root, without a trailing slash
            system_prompt: Instruction sent ahead of every conversation
            streaming: Read the response body incrementally
            timeout: HTTP timeout in seconds
            **client_kwargs: Additional kwargs for httpx.AsyncClient
                (``transport`` is useful for tests)
        """
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._system_prompt = system_prompt or None
        self._streaming = streaming
        self._client = httpx.AsyncClient(timeout=timeout, **client_kwargs)

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    @property
    def name(self) -> str:
        return f"gemini:{self._model}"

    @property
    def endpoint(self) -> str:
        """URL the requests are posted to."""
        return f"{self._base_url}/models/{self._model}:generateContent"

    async def generate(
        self,
        messages: list[Message],
        on_update: UpdateCallback | None = None,
    ) -> str:
        """Send the transcript and return the decoded reply.

        Args:
            messages: Conversation history
            on_update: Receives each partial text, then the final text

        Returns:
            Final reply text

        Raises:
            RequestError: Non-success status (carrying the raw body) or a
                transport failure
        """
        payload = build_payload(messages, self._system_prompt)
        logger.info("POST %s (%d messages)", self.endpoint, len(messages))

        try:
            if self._streaming:
                text = await self._generate_streaming(payload, on_update)
            else:
                text = await self._generate_single(payload)
        except httpx.HTTPError as e:
            logger.warning("Request to %s failed: %s", self.endpoint, e)
            raise RequestError(str(e) or type(e).__name__) from e

        if on_update is not None:
            on_update(text)
        return text

    async def _generate_streaming(
        self,
        payload: dict[str, Any],
        on_update: UpdateCallback | None,
    ) -> str:
        decoder = StreamDecoder()
        async with self._client.stream(
            "POST",
            self.endpoint,
            params={"key": self._api_key},
            json=payload,
        ) as response:
            if response.is_error:
                body = (await response.aread()).decode("utf-8", errors="replace")
                raise self._request_error(response.status_code, body)

            async for chunk in response.aiter_bytes():
                partial = decoder.feed(chunk)
                if on_update is not None:
                    on_update(partial)

        return decoder.finish()

    async def _generate_single(self, payload: dict[str, Any]) -> str:
        response = await self._client.post(
            self.endpoint,
            params={"key": self._api_key},
            json=payload,
        )
        if response.is_error:
            raise self._request_error(response.status_code, response.text)
        return decode_body(response.content)

    @staticmethod
    def _request_error(status_code: int, body: str) -> RequestError:
        logger.warning("Endpoint answered %d: %s", status_code, body[:200])
        return RequestError(body, status_code=status_code)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
