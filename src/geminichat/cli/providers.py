"""Construction of the chat components from settings.

Commands ask this module for a provider or a history store and never read
environment-derived settings themselves.
"""

import typer
from rich.console import Console
from rich.markup import escape

from ..config import ChatSettings, load_settings
from ..history import ChatSessionStore, create_storage_backend
from ..llm import LLMProvider, create_llm_provider

_console = Console()


def require_settings(console: Console | None = None, **overrides) -> ChatSettings:
    """Load settings, exiting with status 1 when the environment is invalid.

    A missing system prompt file or a non-numeric timeout is reported
    instead of ending in a traceback.
    """
    out = console or _console
    try:
        return load_settings(**overrides)
    except (OSError, ValueError) as e:
        out.print(f"[red]Error: invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def get_llm(settings: ChatSettings, console: Console | None = None) -> LLMProvider | None:
    """Pick the reply provider for these settings.

    Args:
        settings: Loaded settings
        console: Where to print warnings (defaults to stdout)

    Returns:
        MockProvider in mock mode, GeminiProvider when an API key is set,
        otherwise None
    """
    out = console or _console

    if settings.mock:
        return create_llm_provider("mock", interval=settings.mock_interval)

    if not settings.api_key:
        out.print("[yellow]Warning: GEMINI_API_KEY not set, use --mock for simulated replies[/yellow]")
        return None

    return create_llm_provider(
        "gemini",
        api_key=settings.api_key,
        model=settings.model,
        base_url=settings.base_url,
        system_prompt=settings.system_prompt,
        streaming=settings.streaming,
        timeout=settings.timeout,
    )


def require_llm(settings: ChatSettings, console: Console | None = None) -> LLMProvider:
    """Like :func:`get_llm`, but exit with status 1 when no provider is available."""
    out = console or _console
    llm = get_llm(settings, out)
    if llm is None:
        out.print("[red]Error: no reply provider available[/red]")
        raise typer.Exit(code=1)
    return llm


def get_store(settings: ChatSettings) -> ChatSessionStore:
    """Open the chat history kept under the settings' home directory."""
    backend = create_storage_backend("file", directory=settings.history_dir)
    store = ChatSessionStore(backend, storage_key=settings.storage_key)
    store.load_from_storage()
    return store
