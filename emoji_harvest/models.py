"""Data models used throughout the harvester pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

ANIMATED_MARKER = "animated=true"


@dataclass(frozen=True)
class Thumbnail:
    """Raw emoji reference as rendered in the picker."""

    url: str
    label: str


@dataclass(frozen=True)
class ItemDescriptor:
    """Normalized emoji discovered by the collector."""

    source_url: str
    name: str

    @property
    def animated(self) -> bool:
        return ANIMATED_MARKER in self.source_url


@dataclass(frozen=True)
class CollectionTarget:
    """A server whose emojis should be harvested."""

    name: str
    output_folder: str
    channel: str = ""


@dataclass
class ProcessResult:
    """Outcome of running one descriptor through the pipeline."""

    index: int
    name: str
    path: Optional[Path] = None
    bytes_written: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class HarvestSummary:
    """Totals reported at the end of a run."""

    collections_processed: int = 0
    items_found: int = 0
    items_saved: int = 0
    items_failed: int = 0
    failed_collections: List[str] = field(default_factory=list)
