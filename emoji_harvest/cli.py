"""Command-line entry point for the emoji harvester."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Sequence

from playwright.async_api import Error as PlaywrightError

from .config import load_config
from .errors import ConfigError, HarvestError
from .harvester import run_harvest

logger = logging.getLogger("emoji_harvest.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Log into Discord with Playwright, enumerate each configured server's "
            "custom emojis and save them as resized WebP files."
        ),
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file with DISCORD_EMAIL, DISCORD_PASSWORD and SERVERS",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Directory where server folders are written (default: OUTPUT_BASE_DIR or 'emojis')",
    )
    parser.add_argument(
        "--size",
        type=int,
        default=None,
        help="Fit emojis inside a SIZE x SIZE box (default: EMOJI_SIZE or 512)",
    )
    parser.add_argument(
        "--max-rounds",
        type=int,
        default=None,
        help="Maximum number of picker scroll rounds per server (default: 50)",
    )
    parser.add_argument(
        "--scroll-increment",
        type=int,
        default=None,
        help="Pixels to scroll the picker between scans (default: 200)",
    )
    parser.add_argument(
        "--settle-ms",
        type=int,
        default=None,
        help="Milliseconds to wait after each scroll for lazy content to render (default: 1500)",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run the browser without a visible window",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    argv = list(sys.argv[1:] if argv is None else argv)
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    try:
        config, session_config = load_config(env_file=args.env_file)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2

    if args.output is not None:
        config.output_base_dir = args.output
    if args.size is not None:
        config.emoji_size = args.size
    config.output_base_dir = Path(config.output_base_dir).resolve()
    if args.max_rounds is not None:
        config.max_scroll_rounds = args.max_rounds
    if args.scroll_increment is not None:
        config.scroll_increment = args.scroll_increment
    if args.settle_ms is not None:
        config.settle_delay_ms = args.settle_ms
    config.headless = args.headless

    overall_start = time.perf_counter()
    try:
        summary = asyncio.run(run_harvest(config, session_config))
    except (HarvestError, PlaywrightError) as exc:
        logger.error("An error occurred: %s", exc)
        return 1
    total_elapsed = time.perf_counter() - overall_start

    logger.info(
        "Finished in %.2fs (%d/%d servers processed, %d emojis saved, %d failed)",
        total_elapsed,
        summary.collections_processed,
        len(config.collections),
        summary.items_saved,
        summary.items_failed,
    )
    if summary.failed_collections:
        logger.debug("Servers skipped: %s", ", ".join(summary.failed_collections))
    return 0


if __name__ == "__main__":
    sys.exit(main())
