"""Entry point for invoking the URL status checker via the CLI."""

from __future__ import annotations

from url_status.cli import main as cli_main

if __name__ == "__main__":
    raise SystemExit(cli_main())
