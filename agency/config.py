import os
import shutil
from functools import lru_cache

import yaml

from . import paths

DEFAULT_CONFIG = {
    "poll_interval_seconds": 0.5,
    "forward_poll_interval_seconds": 2.0,
    "session_ttl_minutes": 60,
    "daily_token_limit": 2143,
    "spawn_log_limit": 100,
    "logging_level": "INFO",
}

ENV_PREFIX = "AGENCY_"


def _coerce(value: str, original):
    if isinstance(original, bool):
        return value.lower() in ("true", "1", "t", "y", "yes")
    if isinstance(original, int):
        return int(value)
    if isinstance(original, float):
        return float(value)
    return value


def _apply_env(config: dict) -> None:
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        config_key = key[len(ENV_PREFIX) :].lower()
        if config_key not in config:
            continue
        try:
            config[config_key] = _coerce(value, DEFAULT_CONFIG[config_key])
        except ValueError as e:
            raise ValueError(f"Invalid value for {key}: {value!r}") from e


def _validate_config(cfg) -> None:
    """Validate config structure. Fail fast on invalid types."""
    if not isinstance(cfg, dict):
        raise ValueError(f"Config must be a dict, got {type(cfg).__name__}")


def clear_cache():
    load_config.cache_clear()


@lru_cache(maxsize=1)
def load_config() -> dict:
    """Load config: defaults, then AGENCY_* env overrides, then config.yaml."""
    config = DEFAULT_CONFIG.copy()
    _apply_env(config)

    path = paths.config_file()
    if path.exists():
        with open(path) as f:
            file_cfg = yaml.safe_load(f) or {}
        _validate_config(file_cfg)
        config.update(file_cfg)
    return config


def get(key: str):
    return load_config()[key]


def init_config() -> bool:
    """Initialize config.yaml in the agency root from defaults if missing."""
    target = paths.config_file()
    if target.exists():
        return False

    target.parent.mkdir(parents=True, exist_ok=True)

    default_config_path = paths.default_config_file()
    if not default_config_path.exists():
        raise FileNotFoundError(f"Default config not found at {default_config_path}")

    shutil.copy(default_config_path, target)
    return True
