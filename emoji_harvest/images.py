"""Emoji downloading, resizing and persistence."""

from __future__ import annotations

import io
import logging
import struct
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import requests
from filetype import guess
from PIL import Image, ImageSequence

from .errors import (
    DecodeFailed,
    EmptyOutput,
    EmptyPayload,
    FetchFailed,
    HarvestError,
    WriteVerificationMismatch,
)
from .models import CollectionTarget, ItemDescriptor, ProcessResult
from .utils import fallback_name

logger = logging.getLogger("emoji_harvest")

OUTPUT_EXTENSION = "webp"
FETCH_TIMEOUT = 15
ALLOWED_IMAGE_TYPES = {"png", "jpg", "jpeg", "gif", "webp", "bmp", "tiff"}


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def fit_inside(size: Tuple[int, int], box: int) -> Tuple[int, int]:
    """Scale ``size`` to fit a ``box``×``box`` square without enlarging it."""
    width, height = size
    scale = min(box / float(width), box / float(height), 1.0)
    if scale >= 1.0:
        return width, height
    return max(1, round(width * scale)), max(1, round(height * scale))


def _prepare_frame(frame: Image.Image, box: int) -> Image.Image:
    if frame.mode not in ("RGB", "RGBA"):
        frame = frame.convert("RGBA")
    new_size = fit_inside(frame.size, box)
    if new_size != frame.size:
        frame = frame.resize(new_size, Image.Resampling.LANCZOS)
    return frame


def transcode_image(
    data: bytes, target_size: int, animated: bool = False, quality: int = 80
) -> bytes:
    """Resize raw image bytes to fit ``target_size`` and encode them as WebP."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            buffer = io.BytesIO()
            if animated:
                frames: List[Image.Image] = []
                durations: List[int] = []
                for frame in ImageSequence.Iterator(image):
                    durations.append(int(frame.info.get("duration", 100)))
                    frames.append(_prepare_frame(frame.copy(), target_size))
                frames[0].save(
                    buffer,
                    format="WEBP",
                    save_all=True,
                    append_images=frames[1:],
                    duration=durations,
                    loop=image.info.get("loop", 0),
                    quality=quality,
                )
            else:
                _prepare_frame(image, target_size).save(
                    buffer, format="WEBP", quality=quality
                )
    except (
        OSError,
        ValueError,
        EOFError,
        SyntaxError,
        struct.error,
        Image.DecompressionBombError,
    ) as exc:
        raise DecodeFailed(f"Could not transcode image: {exc}") from exc
    return buffer.getvalue()


def fetch_bytes(http: requests.Session, url: str) -> bytes:
    try:
        resp = http.get(url, timeout=FETCH_TIMEOUT)
    except requests.RequestException as exc:
        raise FetchFailed(None, str(exc)) from exc
    if not resp.ok:
        raise FetchFailed(resp.status_code, resp.reason or "")
    return resp.content


def destination_for(
    item: ItemDescriptor, index: int, target: CollectionTarget, base_dir: Path
) -> Path:
    stem = item.name or fallback_name(index)
    return Path(base_dir) / target.output_folder / f"{stem}.{OUTPUT_EXTENSION}"


def _process_one(
    http: requests.Session,
    item: ItemDescriptor,
    index: int,
    target: CollectionTarget,
    base_dir: Path,
    target_size: int,
    quality: int,
) -> Tuple[Path, int]:
    data = fetch_bytes(http, item.source_url)
    logger.info(
        "Downloaded emoji %d (%s), buffer size: %d bytes", index + 1, item.name, len(data)
    )
    if not data:
        raise EmptyPayload()

    extension = detect_image_format(data)
    if not extension or extension not in ALLOWED_IMAGE_TYPES:
        raise DecodeFailed("Unsupported image type")

    encoded = transcode_image(data, target_size, animated=item.animated, quality=quality)
    logger.info(
        "Processed emoji %d (%s), resized buffer size: %d bytes",
        index + 1,
        item.name,
        len(encoded),
    )
    if not encoded:
        raise EmptyOutput()

    destination = destination_for(item, index, target, base_dir)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(encoded)
    logger.info("Saved %s to %s", destination.name, target.output_folder)

    on_disk = len(destination.read_bytes())
    logger.info("File size on disk: %d bytes", on_disk)
    if on_disk != len(encoded):
        logger.warning(
            "%s: %s has %d bytes on disk, expected %d",
            WriteVerificationMismatch.__name__,
            destination,
            on_disk,
            len(encoded),
        )
    return destination, on_disk


def process(
    items: Sequence[ItemDescriptor],
    target: CollectionTarget,
    base_dir: Path,
    target_size: int,
    *,
    http: Optional[requests.Session] = None,
    quality: int = 80,
) -> List[ProcessResult]:
    """Download, resize and save each emoji; failures are logged and skipped."""
    http = http or requests.Session()
    results: List[ProcessResult] = []
    total = len(items)

    for index, item in enumerate(items):
        logger.info(
            "Downloading emoji %d/%d (%s) from URL: %s...",
            index + 1,
            total,
            item.name,
            item.source_url,
        )
        try:
            path, size = _process_one(
                http, item, index, target, base_dir, target_size, quality
            )
        except (HarvestError, OSError) as exc:
            logger.error(
                "Failed to process emoji %d (%s) in %s: %s",
                index + 1,
                item.name,
                target.name,
                exc,
            )
            results.append(ProcessResult(index=index, name=item.name, error=str(exc)))
            continue
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception(
                "Unexpected error processing emoji %d (%s) in %s",
                index + 1,
                item.name,
                target.name,
            )
            results.append(ProcessResult(index=index, name=item.name, error=str(exc)))
            continue
        results.append(
            ProcessResult(index=index, name=item.name, path=path, bytes_written=size)
        )
    return results
