"""
Feed sources for newsdesk.

Sections are fed by JSON Feed documents (the rss.app `v1.1` shape) or plain
RSS/Atom feeds. Both are reduced to FeedItem values: article URL, clean
title, publication date and any attached image URLs.
"""
import asyncio
import html
import json
from datetime import datetime
from typing import Any, Dict, List, Optional

import bleach
import feedparser
import httpx
import structlog
from dateutil import parser as date_parser
from pydantic import ValidationError

from newsdesk.errors import FetchError
from newsdesk.fetcher.http_client import AsyncHTTPClient
from newsdesk.models.feed_item import FeedItem

# Set up structured logger
logger = structlog.get_logger()

FEED_ACCEPT = "application/feed+json, application/json, application/rss+xml, application/atom+xml, */*;q=0.8"


def clean_title(title: Optional[str]) -> str:
    """Strip tags and entities from a feed title."""
    if not title:
        return ""
    text = bleach.clean(title, tags=[], strip=True)
    return " ".join(html.unescape(text).split())


def _parse_date(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError):
        return None


def _json_attachments(item: Dict[str, Any]) -> List[str]:
    urls = []
    for attachment in item.get("attachments") or []:
        if isinstance(attachment, dict) and attachment.get("url"):
            mime_type = attachment.get("mime_type") or ""
            if not mime_type or mime_type.startswith("image/"):
                urls.append(attachment["url"])
        elif isinstance(attachment, str):
            urls.append(attachment)
    for key in ("image", "banner_image"):
        if isinstance(item.get(key), str):
            urls.append(item[key])
    return urls


def _items_from_json(data: Dict[str, Any], source: str) -> List[Dict[str, Any]]:
    source = source or data.get("title") or ""
    items = []
    for item in data.get("items") or []:
        if not isinstance(item, dict):
            continue
        items.append({
            "url": item.get("url") or item.get("external_url") or item.get("id"),
            "title": clean_title(item.get("title")),
            "attachments": _json_attachments(item),
            "published": _parse_date(item.get("date_published")),
            "source": source,
        })
    return items


def _entry_attachments(entry: Any) -> List[str]:
    urls = []
    for media in entry.get("media_content", []) or []:
        if media.get("url"):
            urls.append(media["url"])
    for enclosure in entry.get("enclosures", []) or []:
        enclosure_type = enclosure.get("type") or ""
        if enclosure.get("href") and (not enclosure_type or enclosure_type.startswith("image/")):
            urls.append(enclosure["href"])
    for thumbnail in entry.get("media_thumbnail", []) or []:
        if thumbnail.get("url"):
            urls.append(thumbnail["url"])
    return urls


def _items_from_xml(content: bytes, source: str) -> List[Dict[str, Any]]:
    feed = feedparser.parse(content)
    if getattr(feed, "bozo", False) and not feed.entries:
        logger.warning("Feed parsing error", error=str(getattr(feed, "bozo_exception", "")))
        return []

    source = source or feed.feed.get("title", "")
    items = []
    for entry in feed.entries:
        items.append({
            "url": entry.get("link") or entry.get("id"),
            "title": clean_title(entry.get("title")),
            "attachments": _entry_attachments(entry),
            "published": _parse_date(entry.get("published") or entry.get("updated")),
            "source": source,
        })
    return items


def parse_feed(content: bytes, source: str = "") -> List[FeedItem]:
    """
    Parse a JSON Feed or RSS/Atom document into feed items.

    Items without a valid absolute URL are skipped and duplicate URLs keep
    their first occurrence.

    Args:
        content: Raw feed bytes
        source: Source name recorded on each item (defaults to the feed title)

    Returns:
        List[FeedItem]: Items in feed order
    """
    raw_items: List[Dict[str, Any]]
    try:
        data = json.loads(content)
    except (ValueError, UnicodeDecodeError):
        data = None

    if isinstance(data, dict) and isinstance(data.get("items"), list):
        raw_items = _items_from_json(data, source)
    else:
        raw_items = _items_from_xml(content, source)

    items: List[FeedItem] = []
    seen = set()
    for raw in raw_items:
        if not raw.get("url"):
            continue
        try:
            item = FeedItem.model_validate(raw)
        except ValidationError as e:
            logger.debug("Skipping invalid feed item", url=raw.get("url"), error=str(e))
            continue
        if item.url_str in seen:
            continue
        seen.add(item.url_str)
        items.append(item)

    logger.debug("Parsed feed", items=len(items))
    return items


async def fetch_feed_items(
    url: str,
    client: AsyncHTTPClient,
    source: str = "",
    limit: Optional[int] = None,
) -> List[FeedItem]:
    """
    Fetch and parse a section feed.

    Transient network errors are retried by the client.

    Args:
        url: Feed URL
        client: Shared HTTP client
        source: Source name recorded on each item
        limit: Maximum number of items returned

    Returns:
        List[FeedItem]: Items in feed order

    Raises:
        FetchError: If the feed cannot be fetched
    """
    logger.debug("Fetching feed", url=url)
    try:
        response = await client.get(url, headers={"Accept": FEED_ACCEPT})
    except httpx.HTTPStatusError as e:
        raise FetchError(url, f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise FetchError(url, e) from e

    # feedparser is CPU-bound
    loop = asyncio.get_running_loop()
    items = await loop.run_in_executor(None, parse_feed, response.content, source)
    if limit is not None:
        items = items[:limit]

    logger.info("Fetched feed", url=url, items=len(items))
    return items
