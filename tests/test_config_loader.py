"""Tests for the YAML config loader."""

from pathlib import Path

import pytest

from herdbook.config.loader import (
    BASE_DEFAULTS,
    clamp_page_size,
    get_sqlite_path,
    load_config,
    load_config_or_defaults,
)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "herdbook.config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_config_raises(tmp_path):
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        load_config(tmp_path / "absent.yaml")


def test_missing_config_falls_back_to_defaults(tmp_path):
    config = load_config_or_defaults(tmp_path / "absent.yaml")

    assert config == BASE_DEFAULTS
    assert get_sqlite_path(config) == "herdbook.db"


def test_partial_config_keeps_defaults_for_other_keys(tmp_path):
    path = _write(tmp_path, "storage:\n  sqlite_path: /data/farm.db\nquery:\n  max_page_size: 50\n")

    config = load_config(path)

    assert get_sqlite_path(config) == "/data/farm.db"
    assert config["query"] == {"default_page_size": 10, "max_page_size": 50}
    assert config["vaccination"]["due_soon_days"] == 30


def test_empty_file_is_all_defaults(tmp_path):
    assert load_config(_write(tmp_path, "")) == BASE_DEFAULTS


def test_non_mapping_config_rejected(tmp_path):
    with pytest.raises(ValueError, match="Config must be a dictionary"):
        load_config(_write(tmp_path, "- one\n- two\n"))


def test_non_mapping_section_rejected(tmp_path):
    with pytest.raises(ValueError, match="'query' must be a dictionary"):
        load_config(_write(tmp_path, "query: 25\n"))


def test_invalid_page_size_rejected(tmp_path):
    with pytest.raises(ValueError, match="query.default_page_size"):
        load_config(_write(tmp_path, "query:\n  default_page_size: 0\n"))


def test_clamp_page_size():
    config = load_config_or_defaults(Path("/nonexistent/herdbook.config.yaml"))

    assert clamp_page_size(None, config) == 10
    assert clamp_page_size(25, config) == 25
    assert clamp_page_size(1000, config) == 100
    assert clamp_page_size(0, config) == 1
