"""Unit tests for the Source Registry, Settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from unstream.config.loader import DEFAULT_ENABLED_SOURCES, load_config
from unstream.config.settings import Settings
from unstream.config.source_registry import (
    LIBRARY_SOURCE_IDS,
    OFFICIAL_ORDER,
    SOCIAL_ORDER,
    SOURCE_REGISTRY,
    SourceRegistry,
)
from unstream.models.entities import Source, SourceCategory
from unstream.utils.errors import ConfigurationError


class TestSourceRegistry:
    def test_mapping_protocol(self) -> None:
        assert "bandcamp" in SOURCE_REGISTRY
        assert SOURCE_REGISTRY["bandcamp"].name == "Bandcamp"
        assert len(SOURCE_REGISTRY) == len(list(SOURCE_REGISTRY))

    def test_read_only(self) -> None:
        with pytest.raises(TypeError):
            SOURCE_REGISTRY["bandcamp"] = SOURCE_REGISTRY["mirlo"]  # type: ignore[index]

    def test_duplicate_ids_rejected(self) -> None:
        source = Source(id="dup", name="Dup", category=SourceCategory.MARKETPLACE)
        with pytest.raises(ValueError):
            SourceRegistry([source, source])

    def test_precedence_tables_reference_known_sources(self) -> None:
        for source_id in (*OFFICIAL_ORDER, *SOCIAL_ORDER, *LIBRARY_SOURCE_IDS):
            assert source_id in SOURCE_REGISTRY

    def test_search_only_ids(self) -> None:
        search_only = set(SOURCE_REGISTRY.search_only_ids())
        assert {"ampwall", "sonica", "nina", "kofi", "buymeacoffee", "hoopla", "freegal"} <= search_only
        assert "bandcamp" not in search_only

    def test_by_category(self) -> None:
        social = {s.id for s in SOURCE_REGISTRY.by_category(SourceCategory.SOCIAL)}
        assert social == set(SOCIAL_ORDER)

    def test_search_url_query_string_encoding(self) -> None:
        assert SOURCE_REGISTRY.search_url("bandcamp", "Mo-Rice & Babebee") == (
            "https://bandcamp.com/search?q=Mo-Rice+%26+Babebee"
        )

    def test_search_url_path_encoding(self) -> None:
        assert SOURCE_REGISTRY.search_url("qobuz", "Kid Lightbulbs/2") == (
            "https://www.qobuz.com/us-en/search/artists/Kid%20Lightbulbs%2F2"
        )

    def test_search_url_missing(self) -> None:
        assert SOURCE_REGISTRY.search_url("officialsite", "x") is None
        assert SOURCE_REGISTRY.search_url("nope", "x") is None

    def test_artist_url(self) -> None:
        assert SOURCE_REGISTRY.artist_url("mirlo", "kidlightbulbs") == "https://mirlo.space/kidlightbulbs"
        assert SOURCE_REGISTRY.artist_url("bandcamp", "kid") is None
        assert SOURCE_REGISTRY.artist_url("mirlo", "") is None


class TestLoadConfig:
    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), Settings())
        assert config["sources"]["enabled"] == DEFAULT_ENABLED_SOURCES
        assert config["timeouts"]["adapter"] == Settings().adapter_timeout

    def test_yaml_values_kept_and_env_layer_applied(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "sources:\n  enabled: [bandcamp, ampwall]\n"
            "search:\n  name_match_threshold: 0.9\n"
            "app:\n  name: unstream\n"
        )
        config = load_config(str(path), Settings(app_port=9001, log_level="DEBUG"))

        assert config["sources"]["enabled"] == ["bandcamp", "ampwall"]
        assert config["search"]["name_match_threshold"] == 0.9
        assert config["app"] == {"name": "unstream", "host": "0.0.0.0", "port": 9001, "env": "development"}
        assert config["logging"]["level"] == "DEBUG"

    def test_unknown_source_id(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("sources:\n  enabled: [bandcamp, myspace]\n")
        with pytest.raises(ConfigurationError, match="myspace"):
            load_config(str(path), Settings())

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("sources: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_config(str(path), Settings())

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            load_config(str(path), Settings())

    def test_repository_config_is_valid(self) -> None:
        config_file = Path(__file__).resolve().parents[2] / "config" / "config.yaml"
        config = load_config(str(config_file), Settings())
        assert config["sources"]["enabled"][0] == "bandcamp"


class TestSettings:
    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ADAPTER_TIMEOUT", "3.5")
        monkeypatch.setenv("MAX_RELEASE_LOOKUPS", "1")
        settings = Settings()
        assert settings.adapter_timeout == 3.5
        assert settings.max_release_lookups == 1
