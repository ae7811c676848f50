from copy import deepcopy
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = Path("herdbook.config.yaml")

BASE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "storage": {
        "sqlite_path": "herdbook.db",
    },
    "query": {
        "default_page_size": 10,
        "max_page_size": 100,
    },
    "vaccination": {
        "due_soon_days": 30,
    },
}


def _merge_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Fill every known section with built-in fallbacks."""
    merged = deepcopy(config)
    for section, defaults in BASE_DEFAULTS.items():
        user_section = merged.get(section)
        if user_section is None:
            user_section = {}
        if not isinstance(user_section, dict):
            raise ValueError(f"Config section '{section}' must be a dictionary")
        merged[section] = {**defaults, **user_section}
    return merged


def _validate_positive_int(config: Dict[str, Any], section: str, key: str) -> None:
    value = config[section][key]
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config '{section}.{key}' must be a positive integer")


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load herdbook configuration from YAML, with defaults applied.

    Args:
        path: Optional path to the config file. Defaults to herdbook.config.yaml

    Returns:
        Dictionary with storage, query and vaccination sections

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If config structure is invalid
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")

    merged = _merge_defaults(config)
    _validate_positive_int(merged, "query", "default_page_size")
    _validate_positive_int(merged, "query", "max_page_size")
    _validate_positive_int(merged, "vaccination", "due_soon_days")
    return merged


def load_config_or_defaults(path: Path | None = None) -> Dict[str, Any]:
    """Like load_config, but a missing file yields the built-in defaults."""
    try:
        return load_config(path)
    except FileNotFoundError:
        return _merge_defaults({})


def get_sqlite_path(config: Dict[str, Any]) -> str:
    return config.get("storage", {}).get("sqlite_path", BASE_DEFAULTS["storage"]["sqlite_path"])


def clamp_page_size(page_size: int | None, config: Dict[str, Any]) -> int:
    """Requested page size bounded to [1, query.max_page_size]; None means the default."""
    query_cfg = config.get("query", {})
    if page_size is None:
        return query_cfg.get("default_page_size", BASE_DEFAULTS["query"]["default_page_size"])
    maximum = query_cfg.get("max_page_size", BASE_DEFAULTS["query"]["max_page_size"])
    return max(1, min(page_size, maximum))
