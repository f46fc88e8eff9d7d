"""Application settings loaded from environment variables via pydantic-settings.

Values come from (highest priority first) environment variables, then a
``.env`` file in the working directory, then the defaults below.  Field
``search_timeout`` maps to env var ``SEARCH_TIMEOUT`` and so on.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from unstream.utils.http import USER_AGENT


class Settings(BaseSettings):
    """unstream application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    config_path: str = "config/config.yaml"

    # === Outbound HTTP ===
    # Sent on every page, feed and API fetch.  Several platforms serve
    # reduced markup to non-browser agents.
    http_user_agent: str = USER_AGENT

    # Per-call-type timeouts (seconds).  Each bounds one fetch; a fetch
    # that overruns counts as "nothing found" for that source only.
    search_timeout: float = 8.0
    page_timeout: float = 5.0
    feed_timeout: float = 10.0
    enrichment_timeout: float = 15.0
    embed_timeout: float = 5.0
    # Overall budget for one adapter branch (its search plus release lookups).
    adapter_timeout: float = 15.0

    # === Release lookups ===
    max_release_candidates: int = 5
    max_release_lookups: int = 3
    directory_cache_ttl: int = 600

    # === Music Databases ===
    musicbrainz_app_name: str = "unstream"
    musicbrainz_app_version: str = "0.1.0"
    musicbrainz_contact: str = "hello@unstream.stream"
    discogs_user_agent: str = "unstream/0.1.0"
