"""Tests for CLI flag handling."""

from __future__ import annotations

import pytest

from emoji_harvest import cli
from emoji_harvest.config import HarvestConfig, SessionConfig
from emoji_harvest.models import CollectionTarget, HarvestSummary


@pytest.fixture()
def captured(monkeypatch):
    """Stub config loading and the browser run, recording the final config."""
    seen = {}

    def fake_load_config(env_file=None):
        harvest = HarvestConfig(
            max_scroll_rounds=12,
            scroll_increment=300,
            settle_delay_ms=900,
            collections=[CollectionTarget(name="Cats", output_folder="cats")],
        )
        return harvest, SessionConfig(email="a", password="b")

    async def fake_run_harvest(config, session_config):
        seen["config"] = config
        return HarvestSummary(collections_processed=1)

    monkeypatch.setattr(cli, "load_config", fake_load_config)
    monkeypatch.setattr(cli, "run_harvest", fake_run_harvest)
    return seen


def test_unset_flags_keep_loaded_config(captured, tmp_path):
    assert cli.main(["--output", str(tmp_path)]) == 0

    config = captured["config"]
    assert (config.max_scroll_rounds, config.scroll_increment, config.settle_delay_ms) == (
        12,
        300,
        900,
    )
    assert config.output_base_dir == tmp_path.resolve()


def test_flags_override_loaded_config(captured, tmp_path):
    argv = [
        "--output",
        str(tmp_path),
        "--max-rounds",
        "5",
        "--scroll-increment",
        "150",
        "--settle-ms",
        "0",
        "--size",
        "64",
    ]
    assert cli.main(argv) == 0

    config = captured["config"]
    assert (config.max_scroll_rounds, config.scroll_increment, config.settle_delay_ms) == (
        5,
        150,
        0,
    )
    assert config.emoji_size == 64
