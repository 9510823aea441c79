"""Tests for the command line interface."""
import json

import pytest
from typer.testing import CliRunner

from geminichat.cli import app as cli_app
from geminichat.cli.app import app
from geminichat.config import MOCK_DEMO_TEXT
from geminichat.history import ChatSessionStore, InMemoryStorage

from helpers import FakeClock

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Keep Rich from wrapping table cells and messages."""
    monkeypatch.setattr(cli_app.console, "width", 200)


@pytest.fixture
def export_file(isolated_env, sample_transcript):
    """An exported history holding two chats."""
    source = ChatSessionStore(InMemoryStorage(), clock=FakeClock())
    source.save(sample_transcript, session_id="paris")
    source.save([], session_id="ignored")
    source.save(sample_transcript[:1], session_id="short")
    path = isolated_env / "backup.json"
    path.write_text(source.export_as_json(), encoding="utf-8")
    return path


def saved_chats(tmp_path) -> list:
    target = tmp_path / "dump.json"
    result = runner.invoke(app, ["history", "export", str(target)])
    assert result.exit_code == 0
    return json.loads(target.read_text(encoding="utf-8"))


class TestChatCommand:
    """Tests for the interactive chat command."""

    def test_mock_chat_is_saved(self, isolated_env):
        """Test one mock turn followed by quit."""
        result = runner.invoke(app, ["chat", "--mock"], input="hello\nq\n")

        assert result.exit_code == 0, result.output
        assert "Goodbye" in result.output

        chats = saved_chats(isolated_env)
        assert len(chats) == 1
        assert chats[0]["preview"] == "hello"
        assert chats[0]["messages"] == [
            {"sender": "user", "text": "hello"},
            {"sender": "assistant", "text": MOCK_DEMO_TEXT},
        ]

    def test_new_command_starts_second_chat(self, isolated_env):
        """Test that /new saves the chat and starts another one."""
        result = runner.invoke(app, ["chat", "--mock"], input="first\n/new\nsecond\n/history\nexit\n")

        assert result.exit_code == 0, result.output
        assert [chat["preview"] for chat in saved_chats(isolated_env)] == ["second", "first"]

    def test_reset_command_starts_over(self, isolated_env):
        """Test that 'new chat' starts over without touching saved chats."""
        result = runner.invoke(app, ["chat", "--mock"], input="keep\n/new\ndrop\nnew chat\nquit\n")

        assert result.exit_code == 0, result.output
        chats = saved_chats(isolated_env)
        assert [chat["preview"] for chat in chats] == ["drop", "keep"]

    def test_resume_continues_saved_chat(self, isolated_env, export_file):
        """Test --resume with a known id."""
        runner.invoke(app, ["history", "import", str(export_file)])

        result = runner.invoke(app, ["chat", "--mock", "--resume", "short"], input="more\nq\n")

        assert result.exit_code == 0, result.output
        chats = {chat["id"]: chat for chat in saved_chats(isolated_env)}
        assert [m["text"] for m in chats["short"]["messages"]][:2] == ["What is the capital of France?", "more"]

    def test_missing_api_key_exits(self, isolated_env):
        """Test that the real provider needs GEMINI_API_KEY."""
        result = runner.invoke(app, ["chat"], input="q\n")

        assert result.exit_code == 1
        assert "GEMINI_API_KEY not set" in result.output


class TestHistoryCommands:
    """Tests for the history subcommands."""

    def test_list_empty(self, isolated_env):
        """Test listing when nothing is saved."""
        result = runner.invoke(app, ["history", "list"])
        assert result.exit_code == 0
        assert "No chat history yet." in result.output

    def test_import_then_list(self, isolated_env, export_file):
        """Test importing an export and listing it."""
        result = runner.invoke(app, ["history", "import", str(export_file)])
        assert result.exit_code == 0, result.output
        assert "Imported 2 chats" in result.output

        result = runner.invoke(app, ["history", "list"])
        assert result.exit_code == 0
        assert "What is the capital" in result.output

    def test_import_invalid_file(self, isolated_env):
        """Test that a malformed export is rejected."""
        bad = isolated_env / "bad.json"
        bad.write_text('{"not": "a list"}', encoding="utf-8")

        result = runner.invoke(app, ["history", "import", str(bad)])

        assert result.exit_code == 1
        assert "not a valid chat history export" in result.output

    def test_show_as_html(self, isolated_env, export_file):
        """Test printing a chat with rendered assistant messages."""
        runner.invoke(app, ["history", "import", str(export_file)])

        result = runner.invoke(app, ["history", "show", "paris", "--html"])

        assert result.exit_code == 0, result.output
        assert "user: What is the capital of France?" in result.output
        assert "assistant: The capital of France is <strong>Paris</strong>." in result.output

    def test_show_missing(self, isolated_env):
        """Test that unknown ids fail."""
        result = runner.invoke(app, ["history", "show", "nope"])
        assert result.exit_code == 1

    def test_delete(self, isolated_env, export_file):
        """Test deleting one chat."""
        runner.invoke(app, ["history", "import", str(export_file)])

        assert runner.invoke(app, ["history", "delete", "paris"]).exit_code == 0
        assert runner.invoke(app, ["history", "delete", "paris"]).exit_code == 1
        assert [chat["id"] for chat in saved_chats(isolated_env)] == ["short"]

    def test_clear(self, isolated_env, export_file):
        """Test clearing with and without confirmation."""
        runner.invoke(app, ["history", "import", str(export_file)])

        result = runner.invoke(app, ["history", "clear"], input="n\n")
        assert "Aborted" in result.output
        assert len(saved_chats(isolated_env)) == 2

        result = runner.invoke(app, ["history", "clear", "--yes"])
        assert "Deleted 2 chats" in result.output
        assert saved_chats(isolated_env) == []

    def test_stats(self, isolated_env, export_file):
        """Test the statistics table."""
        runner.invoke(app, ["history", "import", str(export_file)])

        result = runner.invoke(app, ["history", "stats"])

        assert result.exit_code == 0
        assert "gemini_chat_histories" in result.output
        assert "bytes" in result.output


class TestInvalidConfiguration:
    """Tests for environment settings that cannot be loaded."""

    def test_missing_system_prompt_file(self, isolated_env, monkeypatch):
        """Test that an unreadable prompt file is reported, not raised."""
        monkeypatch.setenv("GEMINICHAT_SYSTEM_PROMPT_FILE", str(isolated_env / "missing.txt"))

        result = runner.invoke(app, ["history", "list"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "invalid configuration" in result.output
        assert "missing.txt" in result.output

    def test_non_numeric_timeout(self, isolated_env, monkeypatch):
        """Test that a malformed timeout is reported, not raised."""
        monkeypatch.setenv("GEMINICHAT_TIMEOUT", "soon")

        result = runner.invoke(app, ["history", "stats"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "invalid configuration" in result.output

    def test_non_numeric_mock_interval_with_log_level(self, isolated_env, monkeypatch):
        """Test the chat command when logging is configured from the option."""
        monkeypatch.setenv("GEMINICHAT_MOCK_INTERVAL", "fast")

        result = runner.invoke(app, ["--log-level", "WARNING", "chat", "--mock"], input="q\n")

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "invalid configuration" in result.output


class TestRenderCommand:
    """Tests for the render command."""

    def test_render_to_stdout(self, isolated_env):
        """Test converting a markdown file."""
        source = isolated_env / "reply.md"
        source.write_text("# Title\n**bold** <tag>", encoding="utf-8")

        result = runner.invoke(app, ["render", str(source)])

        assert result.exit_code == 0
        assert result.output.strip() == "<h1>Title</h1><br><strong>bold</strong> &lt;tag&gt;"

    def test_render_to_file(self, isolated_env):
        """Test writing the fragment to a file."""
        source = isolated_env / "reply.md"
        source.write_text("`code`", encoding="utf-8")
        output = isolated_env / "reply.html"

        result = runner.invoke(app, ["render", str(source), "-o", str(output)])

        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8") == "<code>code</code>"
