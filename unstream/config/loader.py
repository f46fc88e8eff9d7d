"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  -- static defaults checked into the repo
  2. .env file           -- local developer overrides
  3. Environment vars    -- set at deploy time

The YAML file owns the list of enabled adapters; pydantic-settings owns
everything that varies per deployment (timeouts, log level, identity).
"""

from pathlib import Path

import yaml

from unstream.config.settings import Settings
from unstream.config.source_registry import SOURCE_REGISTRY
from unstream.utils.errors import ConfigurationError

DEFAULT_ENABLED_SOURCES: list[str] = [
    "bandcamp",
    "mirlo",
    "qobuz",
    "faircamp",
    "bandwagon",
    "jamcoop",
    "patreon",
    "ampwall",
    "sonica",
    "nina",
    "kofi",
    "buymeacoffee",
]


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file falls
            back to built-in defaults.
        settings: Settings instance to read overrides from.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the YAML is malformed or enables an
            unknown source id.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            try:
                yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Malformed config file {path}: {exc}") from exc
    else:
        yaml_config = {}

    if not isinstance(yaml_config, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "timeouts": {
            "search": settings.search_timeout,
            "page": settings.page_timeout,
            "feed": settings.feed_timeout,
            "enrichment": settings.enrichment_timeout,
            "embed": settings.embed_timeout,
            "adapter": settings.adapter_timeout,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)

    sources = yaml_config.setdefault("sources", {})
    enabled = sources.get("enabled") or list(DEFAULT_ENABLED_SOURCES)
    unknown = [source_id for source_id in enabled if source_id not in SOURCE_REGISTRY]
    if unknown:
        raise ConfigurationError(f"Unknown source ids in sources.enabled: {', '.join(unknown)}")
    sources["enabled"] = enabled

    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
