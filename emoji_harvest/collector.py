"""Incremental, duplicate-safe enumeration of a lazily rendered emoji picker."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Set

from .config import HarvestConfig
from .errors import StructuralNotFound
from .models import ItemDescriptor
from .session import Session
from .utils import build_descriptor

logger = logging.getLogger("emoji_harvest")

STAGNANT_ROUND_LIMIT = 3
HIGH_QUALITY_SIZE = 512


@dataclass
class ScrollState:
    """Progress of a single scan; discarded when :func:`collect` returns."""

    seen_count: int = 0
    stagnant_rounds: int = 0
    round: int = 0


async def collect(
    session: Session,
    collection_name: str,
    config: Optional[HarvestConfig] = None,
) -> List[ItemDescriptor]:
    """Scroll the picker and return every distinct emoji in first-seen order.

    Scanning stops when the section is followed by the next category, when
    three consecutive rounds add nothing new, or after
    ``config.max_scroll_rounds`` rounds.  Raises :class:`StructuralNotFound`
    when the scroll region or section is missing.
    """
    config = config or HarvestConfig()
    logger.info("Extracting emoji URLs and names for %s...", collection_name)

    scroller = await session.find_scroll_region()
    if scroller is None:
        raise StructuralNotFound("scroll region", f"emoji picker for {collection_name}")
    section = await session.find_section()
    if section is None:
        raise StructuralNotFound("section", f"server emojis for {collection_name}")

    seen: Set[str] = set()
    items: List[ItemDescriptor] = []
    state = ScrollState()

    while state.round < config.max_scroll_rounds:
        previous_count = state.seen_count
        for thumbnail in await session.list_thumbnails(section):
            descriptor = build_descriptor(thumbnail.url, thumbnail.label, HIGH_QUALITY_SIZE)
            if descriptor.source_url in seen:
                continue
            seen.add(descriptor.source_url)
            items.append(descriptor)
        state.seen_count = len(items)
        logger.info(
            "Scroll attempt %d: found %d emojis so far", state.round + 1, state.seen_count
        )

        if await session.next_sibling_is_new_section(section):
            logger.info("Reached the next category section, stopping scroll")
            return items

        if state.seen_count == previous_count:
            state.stagnant_rounds += 1
            if state.stagnant_rounds >= STAGNANT_ROUND_LIMIT:
                logger.info(
                    "No new emojis loaded after %d attempts, stopping scroll",
                    STAGNANT_ROUND_LIMIT,
                )
                return items
        else:
            state.stagnant_rounds = 0

        await session.scroll_by(scroller, config.scroll_increment)
        await session.wait(config.settle_delay_ms)
        state.round += 1

    logger.warning(
        "Stopped scanning %s after %d rounds; %d emojis found, list may be incomplete",
        collection_name,
        config.max_scroll_rounds,
        len(items),
    )
    return items
