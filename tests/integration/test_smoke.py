"""Smoke tests for the CLI entrypoint."""

from __future__ import annotations

from typer.testing import CliRunner

import pastebin_agent
from pastebin_agent.cli import app


def test_cli_help_lists_commands() -> None:
    """The root help should list every command."""

    result = CliRunner().invoke(app, ["--help"])

    assert result.exit_code == 0, result.output
    for command in ("login", "paste", "list", "delete", "raw", "user", "credentials"):
        assert command in result.output


def test_package_exports_agent_and_modes() -> None:
    """Top-level imports should expose the agent API."""

    assert pastebin_agent.PastebinAgent.__name__ == "PastebinAgent"
    assert pastebin_agent.RateLimitMode("burst") is pastebin_agent.RateLimitMode.BURST
    assert pastebin_agent.__version__ == "0.1.0"
