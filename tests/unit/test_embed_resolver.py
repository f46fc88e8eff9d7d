"""Unit tests for the Bandcamp embed resolver."""

from __future__ import annotations

import pytest

from unstream.models.entities import EmbedStatus, ReleaseType
from unstream.services.embed_resolver import (
    EmbedResolver,
    artist_base_url,
    extract_item_id,
    first_item_path,
    page_title,
)
from unstream.utils.errors import InvalidURLError
from tests.conftest import routed_client

ALBUM_URL = "https://kidlightbulbs.bandcamp.com/album/midnight-ep"

ALBUM_PAGE = """
<html><head><title>Midnight EP | Kid Lightbulbs</title></head>
<body><script data-tralbum='{"tralbum_param":{"name":"album","value":1234567}}'></script>
"public_embeddable":true
</body></html>
"""


class TestIdPatterns:
    def test_tralbum_param_preferred(self) -> None:
        page = '"album_id":1 "tralbum_param":{"name":"album","value":2}'
        assert extract_item_id(page, "album") == "2"

    def test_query_style(self) -> None:
        assert extract_item_id('src="https://bandcamp.com/EmbeddedPlayer/album=555/size=large"', "album") == "555"

    def test_data_attribute(self) -> None:
        assert extract_item_id('<li data-item-id="track-42">', "track") == "42"

    def test_json_field(self) -> None:
        assert extract_item_id('{"track_id": 77}', "track") == "77"

    def test_current_object(self) -> None:
        assert extract_item_id('"current":{"title":"x","id":99}', "album") == "99"

    def test_nothing(self) -> None:
        assert extract_item_id("<html></html>", "album") is None


class TestHelpers:
    def test_page_title(self) -> None:
        assert page_title("<title>Midnight EP | Kid Lightbulbs</title>") == "Midnight EP"
        assert page_title("<html></html>") == "Music"

    def test_first_item_path_prefers_albums(self) -> None:
        page = '<a href="/track/single">s</a><a href="/album/lp">a</a>'
        assert first_item_path(page) == ("/album/lp", ReleaseType.ALBUM)

    def test_first_item_path_tracks(self) -> None:
        assert first_item_path('<a href="/track/single?x=1">s</a>') == ("/track/single", ReleaseType.TRACK)

    def test_artist_base_url(self) -> None:
        assert artist_base_url("https://kid.bandcamp.com/music/") == "https://kid.bandcamp.com"
        assert artist_base_url("https://kid.bandcamp.com") == "https://kid.bandcamp.com"


class TestEmbedResolver:
    @pytest.mark.asyncio
    async def test_album_page(self, settings) -> None:
        resolver = EmbedResolver(routed_client({ALBUM_URL: ALBUM_PAGE}), settings)
        result = await resolver.resolve(ALBUM_URL)

        assert result.status is EmbedStatus.FOUND
        assert result.item_type is ReleaseType.ALBUM
        assert result.item_id == "1234567"
        assert result.title == "Midnight EP"
        assert result.embed_url == (
            "https://bandcamp.com/EmbeddedPlayer/album=1234567"
            "/size=small/bgcol=ffffff/linkcol=0687f5/transparent=true/"
        )

    @pytest.mark.asyncio
    async def test_explicitly_unembeddable(self, settings) -> None:
        page = '<title>Private</title>{"tralbum_param":{"name":"album","value":1}, "public_embeddable":false}'
        resolver = EmbedResolver(routed_client({ALBUM_URL: page}), settings)
        result = await resolver.resolve(ALBUM_URL)

        assert result.status is EmbedStatus.NOT_EMBEDDABLE
        assert result.embed_url is None
        assert result.item_id is None

    @pytest.mark.asyncio
    async def test_artist_page_follows_first_album(self, settings) -> None:
        client = routed_client(
            {
                "https://kidlightbulbs.bandcamp.com/music": '<a href="/album/midnight-ep">Midnight EP</a>',
                ALBUM_URL: ALBUM_PAGE,
            }
        )
        result = await EmbedResolver(client, settings).resolve("https://kidlightbulbs.bandcamp.com/music")
        assert result.status is EmbedStatus.FOUND
        assert result.item_id == "1234567"

    @pytest.mark.asyncio
    async def test_single_track_artist(self, settings) -> None:
        page = '<title>Kid Lightbulbs</title><div data-item-id="track-888"></div>'
        client = routed_client({"https://kidlightbulbs.bandcamp.com": page})
        result = await EmbedResolver(client, settings).resolve("https://kidlightbulbs.bandcamp.com")

        assert result.status is EmbedStatus.FOUND
        assert result.item_type is ReleaseType.TRACK
        assert result.item_id == "888"

    @pytest.mark.asyncio
    async def test_unreachable_page_not_found(self, settings) -> None:
        result = await EmbedResolver(routed_client({}), settings).resolve(ALBUM_URL)
        assert result.status is EmbedStatus.NOT_FOUND

    @pytest.mark.asyncio
    async def test_page_without_id_not_found(self, settings) -> None:
        resolver = EmbedResolver(routed_client({ALBUM_URL: "<title>x</title>"}), settings)
        assert (await resolver.resolve(ALBUM_URL)).status is EmbedStatus.NOT_FOUND

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["", "   ", "not a url", "ftp://kid.bandcamp.com/album/x", "/album/x"])
    async def test_invalid_url(self, settings, url: str) -> None:
        client = routed_client({})
        with pytest.raises(InvalidURLError):
            await EmbedResolver(client, settings).resolve(url)
        client.get.assert_not_awaited()
