"""Configuration objects and environment loading for the harvester."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from dotenv import load_dotenv

from .errors import ConfigError
from .models import CollectionTarget

DEFAULT_OUTPUT_BASE_DIR = "emojis"
DEFAULT_EMOJI_SIZE = 512
DEFAULT_TWO_FACTOR_PLACEHOLDER = "código de autenticación de 6 dígitos"
DEFAULT_EMOJI_BUTTON_LABEL = "Seleccionar emojis"


@dataclass
class HarvestConfig:
    """Settings that control scanning, image processing and browser launch."""

    output_base_dir: Path = Path(DEFAULT_OUTPUT_BASE_DIR)
    emoji_size: int = DEFAULT_EMOJI_SIZE
    max_scroll_rounds: int = 50
    scroll_increment: int = 200
    settle_delay_ms: int = 1500
    webp_quality: int = 80
    headless: bool = False
    navigation_timeout: float = 30.0
    collections: List[CollectionTarget] = field(default_factory=list)


@dataclass
class SessionConfig:
    """Credentials and locale-dependent selectors for the chat client."""

    email: str
    password: str
    two_factor_placeholder: str = DEFAULT_TWO_FACTOR_PLACEHOLDER
    emoji_button_label: str = DEFAULT_EMOJI_BUTTON_LABEL
    two_factor_timeout: float = 50.0


def parse_collections(raw: str) -> List[CollectionTarget]:
    """Parse the JSON server list, e.g. ``[{"name": ..., "folder": ..., "channel": ...}]``."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"SERVERS must be a valid JSON array: {exc}") from exc
    if not isinstance(data, list):
        raise ConfigError("SERVERS must be a valid JSON array")

    targets: List[CollectionTarget] = []
    for position, entry in enumerate(data, start=1):
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ConfigError(f"SERVERS entry {position} is missing a name")
        folder = entry.get("folder") or entry["name"]
        targets.append(
            CollectionTarget(
                name=str(entry["name"]),
                output_folder=str(folder),
                channel=str(entry.get("channel", "")),
            )
        )
    return targets


def _int_from_env(environ: Mapping[str, str], key: str, default: int) -> int:
    value = environ.get(key)
    if not value:
        return default
    try:
        return int(value, 10)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from exc


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
) -> Tuple[HarvestConfig, SessionConfig]:
    """Build configuration from environment variables (and a ``.env`` file)."""
    if environ is None:
        load_dotenv(dotenv_path=env_file)
        environ = os.environ

    email = environ.get("DISCORD_EMAIL", "")
    password = environ.get("DISCORD_PASSWORD", "")
    if not email:
        raise ConfigError("DISCORD_EMAIL is required in .env file")
    if not password:
        raise ConfigError("DISCORD_PASSWORD is required in .env file")

    collections = parse_collections(environ.get("SERVERS") or "[]")
    if not collections:
        raise ConfigError("SERVERS is required in .env file and must be a valid JSON array")

    harvest = HarvestConfig(
        output_base_dir=Path(environ.get("OUTPUT_BASE_DIR") or DEFAULT_OUTPUT_BASE_DIR),
        emoji_size=_int_from_env(environ, "EMOJI_SIZE", DEFAULT_EMOJI_SIZE),
        collections=collections,
    )
    session = SessionConfig(
        email=email,
        password=password,
        two_factor_placeholder=environ.get("DISCORD_2FA_SELECTOR")
        or DEFAULT_TWO_FACTOR_PLACEHOLDER,
        emoji_button_label=environ.get("DISCORD_EMOJI_BUTTON_SELECTOR")
        or DEFAULT_EMOJI_BUTTON_LABEL,
    )
    return harvest, session
