"""
Unit tests for the command line interface.
"""

import json

from click.testing import CliRunner

from apd_monitor import __version__
from apd_monitor.cli import cli


class TestCli:
    """Test cases for the apd-monitor command group."""

    def test_version(self):
        result = CliRunner().invoke(cli, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_config_without_token_fails(self, tmp_path, monkeypatch):
        monkeypatch.delenv("BOT_TOKEN", raising=False)

        result = CliRunner().invoke(cli, ["config", "--config-dir", str(tmp_path)])

        assert result.exit_code == 1

    def test_run_without_token_refuses_to_start(self, tmp_path, monkeypatch):
        monkeypatch.delenv("BOT_TOKEN", raising=False)

        result = CliRunner().invoke(cli, ["run", "--config-dir", str(tmp_path), "--no-web"])

        assert result.exit_code == 1

    def test_config_masks_token(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BOT_TOKEN", "1234567890:ABCDEFGHIJKLMNOP")
        monkeypatch.delenv("DISTRITO", raising=False)

        result = CliRunner().invoke(cli, ["config", "--config-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "ABCDEFGHIJK" not in result.output
        assert "general pueyrredon" in result.output

    def test_init_writes_config(self, tmp_path):
        answers = "\n".join(["123:abc", "42", "", "", "", "", ""]) + "\n"

        result = CliRunner().invoke(cli, ["init", "--config-dir", str(tmp_path)], input=answers)

        assert result.exit_code == 0
        data = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
        assert data["bot_token"] == "123:abc"
        assert data["chat_id"] == 42
        assert data["first_run_policy"] == "silent"
