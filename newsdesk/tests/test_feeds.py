import json

import httpx
import pytest

from newsdesk.errors import FetchError
from newsdesk.feeds import clean_title, fetch_feed_items, parse_feed
from newsdesk.fetcher.http_client import AsyncHTTPClient

JSON_FEED = {
    "version": "https://jsonfeed.org/version/1.1",
    "title": "Agro - rss.app",
    "items": [
        {
            "id": "1",
            "url": "https://www.diario.com.ar/agro/nota-1",
            "title": "Cosecha &amp; <b>récord</b>",
            "date_published": "2024-03-01T10:00:00-03:00",
            "attachments": [
                {"url": "https://cdn.example.com/portada.jpg", "mime_type": "image/jpeg"},
                {"url": "https://cdn.example.com/audio.mp3", "mime_type": "audio/mpeg"},
            ],
            "image": "https://cdn.example.com/extra.jpg",
        },
        {"id": "2", "external_url": "https://www.diario.com.ar/agro/nota-2", "title": "Segunda"},
        {"id": "3", "url": "https://www.diario.com.ar/agro/nota-1", "title": "Duplicada"},
        {"id": "no es una url"},
        "basura",
    ],
}

RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
<channel>
    <title>Diario RSS</title>
    <item>
        <title>Primera nota</title>
        <link>https://www.diario.com.ar/nota-a</link>
        <pubDate>Fri, 01 Mar 2024 13:00:00 GMT</pubDate>
        <media:content url="https://cdn.example.com/a.jpg" medium="image" />
        <enclosure url="https://cdn.example.com/b.jpg" type="image/jpeg" length="100" />
    </item>
    <item>
        <title>Segunda nota</title>
        <link>https://www.diario.com.ar/nota-b</link>
    </item>
</channel>
</rss>
"""


def test_parse_json_feed():
    items = parse_feed(json.dumps(JSON_FEED).encode())

    assert [item.url_str for item in items] == [
        "https://www.diario.com.ar/agro/nota-1",
        "https://www.diario.com.ar/agro/nota-2",
    ]
    first = items[0]
    assert first.title == "Cosecha & récord"
    assert first.attachments == ["https://cdn.example.com/portada.jpg", "https://cdn.example.com/extra.jpg"]
    assert first.published is not None
    assert first.source == "Agro - rss.app"


def test_parse_json_feed_with_explicit_source():
    items = parse_feed(json.dumps(JSON_FEED).encode(), source="Agro")

    assert {item.source for item in items} == {"Agro"}


def test_parse_rss_feed():
    items = parse_feed(RSS_FEED)

    assert [item.url_str for item in items] == [
        "https://www.diario.com.ar/nota-a",
        "https://www.diario.com.ar/nota-b",
    ]
    assert items[0].title == "Primera nota"
    assert items[0].attachments == ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"]
    assert items[0].source == "Diario RSS"
    assert items[1].attachments == []


def test_parse_garbage_returns_no_items():
    assert parse_feed(b"esto no es un feed") == []


@pytest.mark.parametrize("raw, expected", [
    ("<p>Título   con <em>marcas</em></p>", "Título con marcas"),
    ("Precios &quot;récord&quot;", 'Precios "récord"'),
    (None, ""),
])
def test_clean_title(raw, expected):
    assert clean_title(raw) == expected


@pytest.mark.asyncio
async def test_fetch_feed_items_applies_limit():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=JSON_FEED)

    async with AsyncHTTPClient(transport=httpx.MockTransport(handler)) as client:
        items = await fetch_feed_items("https://rss.example.com/agro.json", client, limit=1)

    assert len(items) == 1


@pytest.mark.asyncio
async def test_fetch_feed_items_http_error():
    async with AsyncHTTPClient(transport=httpx.MockTransport(lambda request: httpx.Response(500))) as client:
        with pytest.raises(FetchError) as exc_info:
            await fetch_feed_items("https://rss.example.com/agro.json", client)

    assert exc_info.value.cause == "HTTP 500"
