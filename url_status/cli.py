"""Command line interface for the URL status checker."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path

from url_status.config import Config, initialize_environment
from url_status.logging_setup import configure_logging
from url_status.pipeline import run_pipeline
from url_status.producer import Lines, read_file, read_stream

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the command line interface."""
    p = argparse.ArgumentParser(
        description="Concurrently check the HTTP status of URLs.",
        epilog="Unset options fall back to URLCHK_* environment variables (or .env).",
    )
    p.add_argument(
        "urls", nargs="*",
        help="URLs to check. Without URLs or --input, lines are read from stdin.",
    )
    p.add_argument(
        "-i", "--input", type=Path, default=None,
        help="Read URLs from a file, one per line",
    )
    p.add_argument(
        "-t", "--threads", type=int, dest="concurrency", default=None,
        help="Number of concurrent workers (default: 8)",
    )
    p.add_argument(
        "--timeout", type=float, default=None,
        help="Connect and TLS handshake timeout in seconds (default: 8)",
    )
    p.add_argument(
        "--read-timeout", type=float, default=None,
        help="Seconds to wait for the response once connected (default: unbounded)",
    )
    p.add_argument(
        "--retry", type=int, dest="retries", default=None,
        help="Number of retries for failed requests (default: 3)",
    )
    p.add_argument(
        "--retry-sleep", type=float, default=None,
        help="Sleep between retries in seconds (default: 1)",
    )
    tls = p.add_mutually_exclusive_group()
    tls.add_argument(
        "--verify-tls", action="store_true", dest="verify_tls", default=None,
        help="Verify TLS certificates",
    )
    tls.add_argument(
        "--insecure", action="store_false", dest="verify_tls", default=None,
        help="Skip TLS certificate verification (default; INSECURE)",
    )
    p.add_argument(
        "--output", choices=["log", "json"], default=None,
        help="Report outcomes as log lines or JSON lines on stdout (default: log)",
    )
    p.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to $LOG_LEVEL or INFO.",
    )
    return p


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return ``config`` with every option given on the command line applied."""
    fields = ("concurrency", "timeout", "read_timeout", "retries",
              "retry_sleep", "verify_tls", "output")
    overrides = {
        name: getattr(args, name)
        for name in fields
        if getattr(args, name) is not None
    }
    return dataclasses.replace(config, **overrides).validate()


def select_input(args: argparse.Namespace) -> Lines:
    """Pick the line source: positional URLs, ``--input`` file or stdin."""
    if args.urls:
        return args.urls
    if args.input is not None:
        return read_file(args.input)
    if sys.stdin.isatty():
        print("Please type or paste the URLs:", file=sys.stderr)
    return read_stream(sys.stdin)


async def main_async(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    """Run the checker using parsed command line arguments."""
    configure_logging(args.log_level)
    try:
        config = apply_overrides(await initialize_environment(), args)
    except ValueError as exc:
        parser.error(str(exc))

    _, metrics = await run_pipeline(select_input(args), config)

    if metrics.urls_total == 0:
        print("No valid URLs provided. Exiting.")
    else:
        txt, _ = metrics.summary()
        logger.info("\n%s", txt)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return asyncio.run(main_async(args, parser))
    except KeyboardInterrupt:
        logger.warning("Interrupted.")
        return 130
