"""Module entrypoint for running pastebin-agent as ``python -m pastebin_agent``."""

from __future__ import annotations

from pastebin_agent.cli import main


if __name__ == "__main__":
    main()
