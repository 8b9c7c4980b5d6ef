"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  -- static defaults checked into the repo
  2. .env file           -- local developer overrides (not committed)
  3. Environment vars    -- set at deploy time

``load_config()`` reads the YAML file first, then deep-merges the
Settings-derived values on top, e.g.::

    base      = {"scraper": {"timeout": 10.0}}
    overrides = {"scraper": {"team_url_template": "..."}}
    result    = {"scraper": {"timeout": 10.0, "team_url_template": "..."}}
"""

from pathlib import Path

import yaml

from ironwatch.config.settings import Settings
from ironwatch.utils.errors import ConfigurationError

# Used when config.yaml is missing or leaves a key out.
DEFAULTS: dict = {
    "scraper": {
        "timeout": 10.0,
        "max_retries": 3,
        "retry_backoff": 1.0,
    },
    "fetch": {
        "max_pages": 100,
        "walk_timeout": 120.0,
    },
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings instance to merge; a fresh one is built when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the YAML file cannot be parsed or a numeric
            limit is not positive.
    """
    config: dict = {}
    _deep_merge(config, _copy(DEFAULTS))

    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(message=f"Cannot parse {path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(message=f"{path} must contain a mapping at the top level")
        _deep_merge(config, yaml_config)

    settings = settings or Settings()
    env_overrides = {
        "scraper": {
            "team_url_template": settings.team_url_template,
        },
        "store": {
            "backend": settings.store_backend,
            "db_path": settings.article_db_path,
        },
    }

    _deep_merge(config, env_overrides)
    _validate(config)
    return config


def _validate(config: dict) -> None:
    """Reject non-positive limits before they reach the fetch engine."""
    for section, key in (
        ("scraper", "timeout"),
        ("scraper", "retry_backoff"),
        ("fetch", "max_pages"),
        ("fetch", "walk_timeout"),
    ):
        value = config[section][key]
        if not isinstance(value, (int, float)) or value <= 0:
            raise ConfigurationError(message=f"{section}.{key} must be a positive number, got {value!r}")
    if int(config["scraper"]["max_retries"]) < 1:
        raise ConfigurationError(message="scraper.max_retries must be at least 1")
    if config["store"]["backend"] not in ("sqlite", "memory"):
        raise ConfigurationError(
            message=f"Unknown store backend {config['store']['backend']!r}; expected 'sqlite' or 'memory'"
        )


def _copy(value: dict) -> dict:
    return {k: _copy(v) if isinstance(v, dict) else v for k, v in value.items()}


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
