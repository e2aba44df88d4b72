"""Shared fixtures: a scripted picker session, an HTTP stub and sample images."""

from __future__ import annotations

import io
import struct
import zlib
from typing import Dict, List, Optional, Sequence

import pytest
import requests
from PIL import Image

from emoji_harvest.models import Thumbnail


class FakeSession:
    """Picker whose visible thumbnails change each time it is scrolled.

    ``rounds[i]`` is what the section renders after ``i`` scrolls; the last
    entry repeats once the script runs out.  ``boundary_at`` is the scroll
    count at which the next category section becomes visible.
    """

    def __init__(
        self,
        rounds: Sequence[Sequence[Thumbnail]],
        boundary_at: Optional[int] = None,
        has_region: bool = True,
        has_section: bool = True,
    ) -> None:
        self.rounds = [list(r) for r in rounds] or [[]]
        self.boundary_at = boundary_at
        self.has_region = has_region
        self.has_section = has_section
        self.scrolls: List[int] = []
        self.waits: List[int] = []
        self.scans = 0

    async def find_scroll_region(self):
        return "scroller" if self.has_region else None

    async def find_section(self):
        return "section" if self.has_section else None

    async def list_thumbnails(self, region) -> List[Thumbnail]:
        assert region == "section"
        self.scans += 1
        position = min(len(self.scrolls), len(self.rounds) - 1)
        return self.rounds[position]

    async def next_sibling_is_new_section(self, region) -> bool:
        return self.boundary_at is not None and len(self.scrolls) >= self.boundary_at

    async def scroll_by(self, region, delta: int) -> None:
        assert region == "scroller"
        self.scrolls.append(delta)

    async def wait(self, duration_ms: int) -> None:
        self.waits.append(duration_ms)


class StubHTTP:
    """Minimal stand-in for ``requests.Session`` keyed by URL."""

    def __init__(self, responses: Dict[str, requests.Response]) -> None:
        self.responses = responses
        self.requested: List[str] = []

    def get(self, url: str, timeout: float = 0) -> requests.Response:
        self.requested.append(url)
        return self.responses[url]


def make_response(status: int = 200, content: bytes = b"", reason: str = "OK") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason
    resp._content = content
    return resp


def emoji_url(emoji_id: int, size: int = 48, animated: bool = False) -> str:
    ext = "gif" if animated else "webp"
    url = f"https://cdn.discordapp.com/emojis/{emoji_id}.{ext}?size={size}&quality=lossless"
    if animated:
        url += "&animated=true"
    return url


def png_bytes(size=(64, 64), color=(255, 0, 0, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def gif_bytes(size=(64, 64), frames: int = 3) -> bytes:
    palette = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0)]
    images = [
        Image.new("RGB", size, palette[i % len(palette)]).convert("P")
        for i in range(frames)
    ]
    buffer = io.BytesIO()
    images[0].save(
        buffer,
        format="GIF",
        save_all=True,
        append_images=images[1:],
        duration=100,
        loop=0,
    )
    return buffer.getvalue()


@pytest.fixture()
def png_factory():
    return png_bytes


@pytest.fixture()
def gif_factory():
    return gif_bytes


def oversized_png_bytes(width: int = 30000, height: int = 30000) -> bytes:
    """A well-formed PNG header that declares a huge canvas and carries no pixels."""

    def chunk(kind: bytes, payload: bytes) -> bytes:
        crc = zlib.crc32(kind + payload) & 0xFFFFFFFF
        return struct.pack(">I", len(payload)) + kind + payload + struct.pack(">I", crc)

    header = struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IEND", b"")
