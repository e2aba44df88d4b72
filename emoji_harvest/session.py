"""Browser session capability used by the collector, plus its Playwright implementation."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Protocol

from playwright.async_api import (
    ElementHandle,
    Page,
    TimeoutError as PlaywrightTimeoutError,
)

from .config import SessionConfig
from .errors import AuthenticationError, StructuralNotFound
from .models import Thumbnail

logger = logging.getLogger("emoji_harvest")

LOGIN_URL = "https://discord.com/login"
SCROLL_REGION_SELECTOR = 'div[class*="emojiPicker"] div[class*="scroller"]'
SECTION_SELECTOR = 'div[class*="emojiPicker"] div[class*="categorySection"]'
THUMBNAIL_SELECTOR = 'img[src*="cdn.discordapp.com/emojis"]'
SECTION_CLASS_PREFIX = "categorySection"

RegionHandle = Any
CodePrompt = Callable[[], Awaitable[str]]


class Session(Protocol):
    """What the collector needs from an already-open emoji picker."""

    async def find_scroll_region(self) -> Optional[RegionHandle]:
        ...

    async def find_section(self) -> Optional[RegionHandle]:
        ...

    async def list_thumbnails(self, region: RegionHandle) -> List[Thumbnail]:
        ...

    async def next_sibling_is_new_section(self, region: RegionHandle) -> bool:
        ...

    async def scroll_by(self, region: RegionHandle, delta: int) -> None:
        ...

    async def wait(self, duration_ms: int) -> None:
        ...


async def prompt_for_two_factor_code() -> str:
    """Ask the operator for the code from their authenticator app."""
    code = await asyncio.to_thread(input, "Please enter your 2FA code: ")
    code = code.strip()
    if not code:
        raise AuthenticationError("No 2FA code provided")
    return code


class DiscordSession:
    """Drives the Discord web client through a Playwright page."""

    def __init__(self, page: Page, config: SessionConfig) -> None:
        self.page = page
        self.config = config

    @property
    def emoji_button_selector(self) -> str:
        return f'button[aria-label="{self.config.emoji_button_label}"]'

    async def _wait_and_click(self, selector: str, element: str, timeout: float) -> None:
        try:
            await self.page.wait_for_selector(selector, timeout=timeout * 1000)
        except PlaywrightTimeoutError as exc:
            raise StructuralNotFound(element, selector) from exc
        await self.page.click(selector)

    async def _scroll_into_view(self, selector: str) -> None:
        await self.page.eval_on_selector(
            selector,
            "el => el.scrollIntoView({behavior: 'smooth', block: 'center'})",
        )

    async def login(self, email: str, password: str) -> None:
        logger.info("Logging in to Discord...")
        await self.page.goto(LOGIN_URL, wait_until="networkidle")
        await self.page.fill('input[name="email"]', email)
        await self.page.fill('input[name="password"]', password)
        await self.page.click('button[type="submit"]')

    async def handle_two_factor(
        self, prompt: CodePrompt = prompt_for_two_factor_code
    ) -> None:
        """Submit a 2FA code if the login flow asks for one."""
        logger.info("Checking for 2FA prompt...")
        selector = f'input[placeholder="{self.config.two_factor_placeholder}"]'
        try:
            await self.page.wait_for_selector(
                selector, timeout=self.config.two_factor_timeout * 1000
            )
            prompted = True
        except PlaywrightTimeoutError:
            prompted = False

        if prompted:
            logger.info("2FA prompt detected! Please check your authenticator app.")
            code = await prompt()
            await self.page.fill(selector, code)
            await self.page.click('button[type="submit"]')
        else:
            logger.info("No 2FA prompt detected. Proceeding...")

        await self.page.wait_for_load_state("networkidle")
        logger.info("Logged in successfully!")

    async def navigate_to_server(self, server_name: str) -> None:
        logger.info("Navigating to server: %s...", server_name)
        selector = f'div[aria-label*="{server_name}"][role="treeitem"]'
        try:
            await self.page.wait_for_selector(selector, timeout=30_000)
        except PlaywrightTimeoutError as exc:
            raise StructuralNotFound(f"server {server_name!r}", selector) from exc
        await self._scroll_into_view(selector)
        await self.wait(1000)
        await self.page.click(selector)
        await self.wait(2000)

    async def navigate_to_channel(self, server_name: str, channel_name: str) -> None:
        logger.info("Navigating to channel: %s in %s...", channel_name, server_name)
        selector = f'li[data-dnd-name="{channel_name}"]'
        try:
            await self.page.wait_for_selector(selector, timeout=10_000)
        except PlaywrightTimeoutError as exc:
            raise StructuralNotFound(f"channel {channel_name!r}", selector) from exc
        await self._scroll_into_view(selector)
        await self.wait(1000)
        await self.page.click(selector)
        await self.wait(2000)

    async def open_emoji_picker(self, server_name: str) -> None:
        logger.info("Opening emoji picker...")
        await self._wait_and_click(self.emoji_button_selector, "emoji button", 10.0)
        await self.wait(2000)

        logger.info("Switching to %s emoji tab...", server_name)
        await self._wait_and_click(
            f'div[aria-label="{server_name}"]', f"emoji tab {server_name!r}", 10.0
        )
        await self.wait(2000)

    async def close_emoji_picker(self) -> None:
        await self.page.click(self.emoji_button_selector)
        await self.wait(1000)

    async def find_scroll_region(self) -> Optional[ElementHandle]:
        return await self.page.query_selector(SCROLL_REGION_SELECTOR)

    async def find_section(self) -> Optional[ElementHandle]:
        return await self.page.query_selector(SECTION_SELECTOR)

    async def list_thumbnails(self, region: ElementHandle) -> List[Thumbnail]:
        raw = await region.eval_on_selector_all(
            THUMBNAIL_SELECTOR,
            "els => els.map(el => ({url: el.src, label: el.alt || ''}))",
        )
        return [Thumbnail(url=item["url"], label=item["label"]) for item in raw]

    async def next_sibling_is_new_section(self, region: ElementHandle) -> bool:
        return bool(
            await region.evaluate(
                """(el, prefix) => {
                    const next = el.nextElementSibling;
                    return !!next && Array.from(next.classList).some(c => c.startsWith(prefix));
                }""",
                SECTION_CLASS_PREFIX,
            )
        )

    async def scroll_by(self, region: ElementHandle, delta: int) -> None:
        await region.evaluate("(el, delta) => el.scrollTo(0, el.scrollTop + delta)", delta)

    async def wait(self, duration_ms: int) -> None:
        await self.page.wait_for_timeout(duration_ms)
