"""High-level orchestration: log in once, then harvest each server in turn."""

from __future__ import annotations

import logging
from pathlib import Path

import requests
from playwright.async_api import Error as PlaywrightError, async_playwright

from .collector import collect
from .config import HarvestConfig, SessionConfig
from .errors import HarvestError
from .images import process
from .models import CollectionTarget, HarvestSummary
from .session import CodePrompt, DiscordSession, prompt_for_two_factor_code

logger = logging.getLogger("emoji_harvest")


def prepare_output_dirs(config: HarvestConfig) -> Path:
    """Create the base folder and one folder per server, keeping existing files."""
    base_dir = Path(config.output_base_dir)
    existed = base_dir.exists()
    logger.info("Emojis folder (%s) exists: %s", base_dir, existed)
    base_dir.mkdir(parents=True, exist_ok=True)
    if not existed:
        logger.info("Created output directory: %s", base_dir)

    for target in config.collections:
        server_dir = base_dir / target.output_folder
        if server_dir.exists():
            logger.debug("Server directory already exists, skipping creation: %s", server_dir)
            continue
        server_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Created server directory: %s", server_dir)
    return base_dir


async def harvest_collection(
    session: DiscordSession,
    target: CollectionTarget,
    config: HarvestConfig,
    base_dir: Path,
    http: requests.Session,
    summary: HarvestSummary,
) -> None:
    """Navigate to one server, enumerate its emojis and save them."""
    logger.info("Processing server: %s...", target.name)
    await session.navigate_to_server(target.name)
    if target.channel:
        await session.navigate_to_channel(target.name, target.channel)
    picker_open = False
    try:
        await session.open_emoji_picker(target.name)
        picker_open = True
        items = await collect(session, target.name, config)
        logger.info("Found %d emojis in %s.", len(items), target.name)
        results = process(
            items,
            target,
            base_dir,
            config.emoji_size,
            http=http,
            quality=config.webp_quality,
        )
    finally:
        if picker_open:
            await session.close_emoji_picker()

    saved = sum(1 for result in results if result.ok)
    summary.items_found += len(items)
    summary.items_saved += saved
    summary.items_failed += len(results) - saved


async def run_harvest(
    config: HarvestConfig,
    session_config: SessionConfig,
    prompt: CodePrompt = prompt_for_two_factor_code,
) -> HarvestSummary:
    """Log in and harvest every configured server sequentially."""
    base_dir = prepare_output_dirs(config)
    summary = HarvestSummary()
    http = requests.Session()

    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch(headless=config.headless)
        try:
            page = await browser.new_page()
            page.set_default_navigation_timeout(config.navigation_timeout * 1000)
            session = DiscordSession(page, session_config)

            await session.login(session_config.email, session_config.password)
            await session.handle_two_factor(prompt)

            for target in config.collections:
                try:
                    await harvest_collection(
                        session, target, config, base_dir, http, summary
                    )
                except (HarvestError, PlaywrightError) as exc:
                    logger.error("Skipping server %s: %s", target.name, exc)
                    summary.failed_collections.append(target.name)
                    continue
                summary.collections_processed += 1
        finally:
            await browser.close()
            http.close()

    logger.info("All emojis from all servers have been downloaded and processed!")
    return summary
