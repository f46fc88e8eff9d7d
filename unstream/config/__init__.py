"""Configuration module -- exports Settings, load_config and the Source Registry."""

from unstream.config.loader import load_config
from unstream.config.settings import Settings
from unstream.config.source_registry import SOURCE_REGISTRY, SourceRegistry

__all__ = ["SOURCE_REGISTRY", "Settings", "SourceRegistry", "load_config"]
