"""geminichat command line: interactive chat, history management, rendering."""
import asyncio
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console, Group
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..chat import ConversationController
from ..exceptions import ConversationBusyError
from ..history import ChatEntry, ChatSessionStore
from ..llm import Sender
from ..log import configure_logging
from ..render import render_markdown_html
from .providers import get_store, require_llm, require_settings

app = typer.Typer(
    name="geminichat",
    help="Chat with Gemini in the terminal, with resumable local history",
    no_args_is_help=True,
    add_completion=True,
)
history_app = typer.Typer(help="Manage saved chats", no_args_is_help=True)
app.add_typer(history_app, name="history")

console = Console()

EXIT_COMMANDS = ("exit", "quit", "q")
RESET_COMMAND = "new chat"
WAITING_TEXT = "Searching..."


@app.callback()
def main_callback(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level: debug, info, warning or error (default from GEMINICHAT_LOG_LEVEL)"
    ),
):
    """Configure logging before any command runs."""
    configure_logging(log_level or require_settings(console).log_level)


def _format_timestamp(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp / 1000).strftime("%Y-%m-%d %H:%M")


def _reply_renderable(text: str, failed: bool = False):
    if failed:
        return Text.assemble(("Error: ", "bold red"), text)
    return Markdown(text)


def _print_transcript(entry_messages) -> None:
    for message in entry_messages:
        if message.sender == Sender.USER:
            console.print(Text.assemble(("You: ", "bold yellow"), message.text))
        else:
            console.print(Text("Gemini:", style="bold green"))
            console.print(Markdown(message.text))
        console.print()


def _history_table(entries: list[ChatEntry]) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Saved", width=16)
    table.add_column("Msgs", justify="right", width=4)
    table.add_column("Preview")
    for entry in entries:
        table.add_row(entry.id, _format_timestamp(entry.timestamp), str(len(entry.messages)), entry.preview)
    return table


async def _send(controller: ConversationController, text: str) -> None:
    """Send one message and show the reply while it streams in."""
    console.print(Text("Gemini:", style="bold green"))
    with Live(Markdown(WAITING_TEXT), console=console, refresh_per_second=12) as live:
        def on_update(partial: str) -> None:
            live.update(Markdown(partial))

        result = await controller.send(text, on_update)
        live.update(_reply_renderable(result.text, result.failed))
    console.print()


@app.command()
def chat(
    mock: bool = typer.Option(
        False,
        "--mock",
        help="Use simulated streaming replies instead of the API"
    ),
    no_stream: bool = typer.Option(
        False,
        "--no-stream",
        help="Read each reply as one complete body"
    ),
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Gemini model (default from GEMINI_MODEL)"
    ),
    resume: str | None = typer.Option(
        None,
        "--resume",
        "-r",
        help="ID of a saved chat to continue"
    ),
):
    """Interactive chat. Replies are saved to the local history."""
    async def _chat():
        settings = require_settings(
            console,
            model=model,
            mock=True if mock else None,
            streaming=False if no_stream else None,
        )
        llm = require_llm(settings, console)
        store = get_store(settings)
        controller = ConversationController(llm, store)

        try:
            if resume:
                if controller.open_chat(resume):
                    _print_transcript(controller.transcript)
                else:
                    console.print(f"[yellow]No saved chat with ID {resume}, starting a new one[/yellow]")

            console.print(f"[bold cyan]geminichat[/bold cyan] [dim]({llm.name})[/dim]")
            console.print(
                "[dim]Type 'exit', 'quit', or 'q' to leave. "
                "'/new' saves and starts a new chat, 'new chat' discards this one, "
                "'/history' lists saved chats, '/open ID' resumes one.[/dim]\n"
            )

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ").strip()
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                if not user_input:
                    continue

                command = user_input.lower()
                if command in EXIT_COMMANDS:
                    console.print("[dim]Goodbye![/dim]")
                    break
                if command == RESET_COMMAND:
                    controller.reset()
                    console.print("[dim]Started a new chat.[/dim]\n")
                    continue
                if command == "/new":
                    controller.new_chat()
                    console.print("[dim]Chat saved. Started a new chat.[/dim]\n")
                    continue
                if command == "/history":
                    console.print(_history_table(store.list_all()))
                    continue
                if command.startswith("/open "):
                    chat_id = user_input.split(maxsplit=1)[1]
                    if controller.open_chat(chat_id):
                        console.print()
                        _print_transcript(controller.transcript)
                    else:
                        console.print(f"[yellow]No saved chat with ID {chat_id}[/yellow]")
                    continue

                try:
                    await _send(controller, user_input)
                except ConversationBusyError as e:
                    console.print(f"[yellow]{e}[/yellow]")

        finally:
            controller.save()
            await llm.close()

    asyncio.run(_chat())


@app.command()
def render(
    source: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Markdown file to convert"
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the HTML fragment here instead of stdout"
    ),
):
    """Convert chat markdown to the sanitized HTML fragment used for replies."""
    html = render_markdown_html(source.read_text(encoding="utf-8"))
    if output:
        output.write_text(html, encoding="utf-8")
        console.print(f"[green]Wrote {output}[/green]")
    else:
        typer.echo(html)


def _open_store() -> ChatSessionStore:
    return get_store(require_settings(console))


@history_app.command("list")
def history_list():
    """List saved chats, most recent first."""
    entries = _open_store().list_all()
    if not entries:
        console.print("[yellow]No chat history yet.[/yellow]")
        return
    console.print(_history_table(entries))


@history_app.command("show")
def history_show(
    chat_id: str = typer.Argument(..., help="Chat ID"),
    html: bool = typer.Option(
        False,
        "--html",
        help="Print assistant messages as HTML fragments"
    ),
):
    """Show one saved chat."""
    entry = _open_store().load(chat_id)
    if entry is None:
        console.print(f"[red]Error: no saved chat with ID {chat_id}[/red]")
        raise typer.Exit(code=1)

    console.print(Panel(
        Group(Text(entry.preview), Text(_format_timestamp(entry.timestamp), style="dim")),
        title=entry.id,
        border_style="dim"
    ))
    if html:
        for message in entry.messages:
            if message.sender == Sender.USER:
                typer.echo(f"user: {message.text}")
            else:
                typer.echo(f"assistant: {render_markdown_html(message.text)}")
        return
    _print_transcript(entry.messages)


@history_app.command("delete")
def history_delete(chat_id: str = typer.Argument(..., help="Chat ID")):
    """Delete one saved chat."""
    if _open_store().delete(chat_id):
        console.print(f"[green]Deleted {chat_id}[/green]")
    else:
        console.print(f"[yellow]No saved chat with ID {chat_id}[/yellow]")
        raise typer.Exit(code=1)


@history_app.command("clear")
def history_clear(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt"
    )
):
    """Delete all saved chats."""
    if not yes:
        console.print("[yellow]WARNING: This will delete all saved chats![/yellow]")
        confirm = typer.confirm("Are you sure you want to continue?")
        if not confirm:
            console.print("[dim]Aborted.[/dim]")
            return

    store = _open_store()
    count = len(store)
    store.clear_all()
    console.print(f"[green]Success! Deleted {count} chats.[/green]")


@history_app.command("export")
def history_export(target: Path = typer.Argument(..., dir_okay=False, help="File to write")):
    """Export all saved chats as JSON."""
    store = _open_store()
    target.write_text(store.export_as_json(), encoding="utf-8")
    console.print(f"[green]Exported {len(store)} chats to {target}[/green]")


@history_app.command("import")
def history_import(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="Exported JSON file"),
):
    """Replace the saved chats with an exported file."""
    store = _open_store()
    if not store.import_from_json(source.read_text(encoding="utf-8")):
        console.print(f"[red]Error: {source} is not a valid chat history export[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Imported {len(store)} chats[/green]")


@history_app.command("stats")
def history_stats():
    """Show chat history storage statistics."""
    stats = _open_store().storage_stats()

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="bold cyan", width=15)
    table.add_column("Value")

    table.add_row("Chats", str(stats.count))
    table.add_row("Size", f"{stats.size_in_bytes} bytes ({stats.size_in_kb:.2f} KB)")
    table.add_row("Storage Key", stats.storage_key)

    console.print(table)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
