"""Utility helpers for emoji name and URL normalization."""

from __future__ import annotations

import re

from .models import ANIMATED_MARKER, ItemDescriptor

NAME_PATTERN = re.compile(r"[^a-zA-Z0-9_-]")
SIZE_PATTERN = re.compile(r"size=\d+")
LABEL_DELIMITER = ":"


def sanitize_name(label: str) -> str:
    """Turn a picker label like ``:PES_Bunny:`` into a filename-safe stem."""
    name = label or ""
    if name.startswith(LABEL_DELIMITER):
        name = name[1:]
    if name.endswith(LABEL_DELIMITER):
        name = name[:-1]
    return NAME_PATTERN.sub("_", name)


def normalize_emoji_url(url: str, size: int = 512) -> str:
    """Request the emoji at ``size`` while keeping the animated flag."""
    animated = ANIMATED_MARKER in url
    normalized = SIZE_PATTERN.sub(f"size={size}", url, count=1)
    if animated and ANIMATED_MARKER not in normalized:
        normalized += f"&{ANIMATED_MARKER}"
    return normalized


def build_descriptor(url: str, label: str, size: int = 512) -> ItemDescriptor:
    return ItemDescriptor(source_url=normalize_emoji_url(url, size), name=sanitize_name(label))


def fallback_name(index: int) -> str:
    """Positional name used when the sanitized label is empty."""
    return f"emoji_{index + 1}"
