"""Unit tests for the Spotify / Apple Music URL resolver."""

from __future__ import annotations

import pytest

from unstream.models.entities import EntityType
from unstream.services.url_resolver import (
    UrlResolver,
    normalize_spotify_url,
    spotify_title_artist,
    strip_apple_suffix,
)
from unstream.utils.errors import InvalidURLError
from tests.conftest import routed_client

SPOTIFY_ARTIST = "https://open.spotify.com/artist/4Z8W4fKeB5YxbusRsdQVPb"
SPOTIFY_ALBUM = "https://open.spotify.com/album/6dVIqQ8qmQ5GBnJ9shOYGE"
APPLE_SONG = "https://music.apple.com/us/song/midnight/1500000001"
APPLE_ARTIST = "https://music.apple.com/us/artist/kid-lightbulbs/1400000000"


class TestClassify:
    def test_spotify(self) -> None:
        assert UrlResolver.classify(SPOTIFY_ARTIST) == ("spotify", "artist", SPOTIFY_ARTIST)

    def test_spotify_intl_path(self) -> None:
        platform, kind, _ = UrlResolver.classify("https://open.spotify.com/intl-de/track/abc123")
        assert (platform, kind) == ("spotify", "track")

    def test_spotify_uri(self) -> None:
        assert normalize_spotify_url("spotify:album:abc123") == "https://open.spotify.com/album/abc123"
        assert UrlResolver.classify("spotify:album:abc123")[1] == "album"

    def test_apple(self) -> None:
        assert UrlResolver.classify(APPLE_SONG)[:2] == ("apple", "song")

    @pytest.mark.parametrize("url", ["", "https://tidal.com/browse/artist/1", "https://music.apple.com/us/browse"])
    def test_unsupported(self, url: str) -> None:
        with pytest.raises(InvalidURLError):
            UrlResolver.classify(url)


class TestHelpers:
    @pytest.mark.parametrize(
        "raw",
        ["Kid Lightbulbs on Apple Music", "Kid Lightbulbs - Apple Music", "Kid Lightbulbs | Apple Music"],
    )
    def test_strip_apple_suffix(self, raw: str) -> None:
        assert strip_apple_suffix(raw) == "Kid Lightbulbs"

    def test_spotify_title_ignores_bare_site_name(self) -> None:
        assert spotify_title_artist("<title>Spotify</title>") is None
        assert spotify_title_artist("<title>Midnight EP - Spotify</title>") is None
        assert spotify_title_artist("<title>Midnight - Kid Lightbulbs - Spotify</title>") == "Kid Lightbulbs"


class TestUrlResolver:
    @pytest.mark.asyncio
    async def test_spotify_artist_page(self, settings) -> None:
        client = routed_client({SPOTIFY_ARTIST: '<meta property="og:title" content="Kid Lightbulbs">'})
        resolved = await UrlResolver(client, settings).resolve(SPOTIFY_ARTIST)
        assert resolved.artist_name == "Kid Lightbulbs"
        assert resolved.entity_type is EntityType.ARTIST
        assert resolved.platform == "spotify"

    @pytest.mark.asyncio
    async def test_spotify_album_description(self, settings) -> None:
        page = '<meta property="og:description" content="Midnight EP, an EP by Kid Lightbulbs · 2025 · 5 songs">'
        resolved = await UrlResolver(routed_client({SPOTIFY_ALBUM: page}), settings).resolve(SPOTIFY_ALBUM)
        assert resolved.artist_name == "Kid Lightbulbs"
        assert resolved.entity_type is EntityType.ALBUM

    @pytest.mark.asyncio
    async def test_spotify_album_anchor_fallback(self, settings) -> None:
        page = '<h1>Midnight EP</h1><a href="/artist/4Z8W4fKeB5YxbusRsdQVPb">Kid Lightbulbs</a>'
        resolved = await UrlResolver(routed_client({SPOTIFY_ALBUM: page}), settings).resolve(SPOTIFY_ALBUM)
        assert resolved.artist_name == "Kid Lightbulbs"

    @pytest.mark.asyncio
    async def test_apple_song_title(self, settings) -> None:
        page = '<meta property="og:title" content="Midnight by Kid Lightbulbs on Apple Music">'
        resolved = await UrlResolver(routed_client({APPLE_SONG: page}), settings).resolve(APPLE_SONG)
        assert resolved.artist_name == "Kid Lightbulbs"
        assert resolved.entity_type is EntityType.TRACK

    @pytest.mark.asyncio
    async def test_apple_meta_fallback(self, settings) -> None:
        page = '<meta name="twitter:audio:artist_name" content="Kid Lightbulbs">'
        resolved = await UrlResolver(routed_client({APPLE_SONG: page}), settings).resolve(APPLE_SONG)
        assert resolved.artist_name == "Kid Lightbulbs"

    @pytest.mark.asyncio
    async def test_apple_artist_page(self, settings) -> None:
        page = '<meta property="og:title" content="Kid Lightbulbs on Apple Music">'
        resolved = await UrlResolver(routed_client({APPLE_ARTIST: page}), settings).resolve(APPLE_ARTIST)
        assert resolved.artist_name == "Kid Lightbulbs"

    @pytest.mark.asyncio
    async def test_unresolvable_page(self, settings) -> None:
        resolver = UrlResolver(routed_client({SPOTIFY_ALBUM: "<html></html>"}), settings)
        assert await resolver.resolve(SPOTIFY_ALBUM) is None

    @pytest.mark.asyncio
    async def test_fetch_failure(self, settings) -> None:
        assert await UrlResolver(routed_client({}), settings).resolve(SPOTIFY_ARTIST) is None
