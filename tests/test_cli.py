"""Tests for the command line interface."""

import pytest
from click.testing import CliRunner

from bookmark2vault import cli
from bookmark2vault.exceptions import TransportError


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    monkeypatch.setattr("bookmark2vault.config.load_dotenv", lambda: None)
    monkeypatch.delenv("SERVER_URL", raising=False)
    monkeypatch.delenv("LLM_PROVIDER", raising=False)


class TestHealthCommand:
    def test_reachable(self, monkeypatch):
        monkeypatch.setattr(cli.SubmissionClient, "health", lambda self: True)
        result = CliRunner().invoke(cli.main, ["health", "--server-url", "http://box:1"])
        assert result.exit_code == 0
        assert "OK: http://box:1" in result.output

    def test_unreachable(self, monkeypatch):
        monkeypatch.setattr(cli.SubmissionClient, "health", lambda self: False)
        result = CliRunner().invoke(cli.main, ["health"])
        assert result.exit_code == 2


class TestSyncCommand:
    def test_refuses_without_endpoint(self, monkeypatch):
        monkeypatch.setattr(cli.SubmissionClient, "health", lambda self: False)
        result = CliRunner().invoke(cli.main, ["sync"])
        assert result.exit_code == 2
        assert "Endpoint not reachable" in result.output

    def test_log_file_option(self, monkeypatch, tmp_path):
        calls = []
        monkeypatch.setattr(cli, "setup_logging", lambda level, log_file=None: calls.append((level, log_file)))
        monkeypatch.setattr(cli.SubmissionClient, "health", lambda self: False)
        log_file = str(tmp_path / "sync.log")

        CliRunner().invoke(cli.main, ["sync", "-v", "--log-file", log_file])

        assert calls == [("DEBUG", log_file)]

    def test_browser_failure_exits_2(self, monkeypatch):
        def no_browser(*args, **kwargs):
            raise TransportError("Could not start the browser: profile is already in use")

        monkeypatch.setattr(cli.SubmissionClient, "health", lambda self: True)
        monkeypatch.setattr("bookmark2vault.browser.open_bookmarks_view", no_browser)

        result = CliRunner().invoke(cli.main, ["sync"])

        assert result.exit_code == 2
        assert "Sync failed: Could not start the browser" in result.output


class TestServeCommand:
    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        result = CliRunner().invoke(cli.main, ["serve", "--provider", "claude"])
        assert result.exit_code == 2
        assert "ANTHROPIC_API_KEY" in result.output


class TestPrintState:
    def test_sending_line(self, capsys):
        cli._print_state({"phase": "sending", "processed": 1, "total": 3, "failed": 0})
        assert "Saving... 1/3" in capsys.readouterr().out
