from typing import Any

from .base import LLMProvider
from .providers import GeminiProvider, MockProvider

SUPPORTED_PROVIDERS = ("gemini", "mock")


def create_llm_provider(name: str, **options: Any) -> LLMProvider:
    """Build the reply provider selected at startup.

    Args:
        name: 'gemini' for the HTTP endpoint, 'mock' for simulated streaming
            (case-insensitive)
        **options: Passed to the provider's constructor
            gemini: api_key (required), model, base_url, system_prompt,
                streaming, timeout
            mock: demo_text, interval, max_step, seed

    Returns:
        A ready provider

    Raises:
        ValueError: For an unknown provider name
        TypeError: If gemini is requested without an api_key

    Examples:
        >>> provider = create_llm_provider("gemini", api_key="...", streaming=False)
        >>> provider = create_llm_provider("mock", interval=0.0, seed=1)
    """
    kind = name.lower()

    if kind == "gemini":
        if "api_key" not in options:
            raise TypeError("The gemini provider needs an 'api_key' option")
        return GeminiProvider(**options)

    if kind == "mock":
        return MockProvider(**options)

    raise ValueError(
        f"Unsupported provider: {name}. "
        f"Choose one of: {', '.join(SUPPORTED_PROVIDERS)}"
    )
