"""
Metadata extraction module for newsdesk.

This module derives the title, bajada (summary), volanta (overline),
publication date and source name of an article from Open Graph and Twitter
Card meta tags, headings and common category markup. Every field falls back
to an empty value; nothing here raises.
"""
from datetime import datetime, timezone
from typing import Iterable, Optional, Union
from urllib.parse import urlparse

import structlog
from bs4 import BeautifulSoup
from dateutil import parser as date_parser

from newsdesk.models.document import RawDocument
from newsdesk.models.metadata import ArticleMetadata

# Set up structured logger
logger = structlog.get_logger()

# (attribute, value) pairs tried in order
TITLE_META = [('property', 'og:title'), ('name', 'twitter:title'), ('property', 'twitter:title')]
DESCRIPTION_META = [
    ('property', 'og:description'),
    ('name', 'description'),
    ('name', 'twitter:description'),
    ('property', 'twitter:description'),
]

# Category-ish elements used as the volanta, most specific first
OVERLINE_SELECTORS = [
    '.category',
    '.section',
    '[rel="category"]',
    '.article-section',
    '.article-category',
]


def _meta_content(soup: BeautifulSoup, candidates: Iterable[tuple]) -> str:
    for attribute, value in candidates:
        meta = soup.find('meta', attrs={attribute: value})
        if meta is not None:
            content = (meta.get('content') or '').strip()
            if content:
                return content
    return ''


def extract_title(soup: BeautifulSoup, fallback_title: str = '') -> str:
    """
    Resolve the article title.

    Order: og:title, twitter:title, first <h1>, fallback title.
    """
    title = _meta_content(soup, TITLE_META)
    if title:
        return title

    h1 = soup.find('h1')
    if h1 is not None:
        text = h1.get_text(' ', strip=True)
        if text:
            return text

    return fallback_title.strip()


def extract_description(soup: BeautifulSoup) -> str:
    """
    Resolve the bajada.

    Order: og:description, meta description, twitter:description.
    """
    return _meta_content(soup, DESCRIPTION_META)


def extract_overline(soup: BeautifulSoup) -> str:
    """Resolve the volanta from category markup, then article:section."""
    for selector in OVERLINE_SELECTORS:
        element = soup.select_one(selector)
        if element is not None:
            text = element.get_text(' ', strip=True)
            if text:
                return text
    return _meta_content(soup, [('property', 'article:section')])


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a date string into a UTC-aware datetime.

    Returns:
        Optional[datetime]: Parsed date, or None when the string is invalid
    """
    if not value or not value.strip():
        return None
    try:
        parsed = date_parser.parse(value.strip())
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError) as e:
        logger.debug("Error parsing date", value=value, error=str(e))
        return None


def extract_publish_date(soup: BeautifulSoup) -> Optional[datetime]:
    """Publication date from article:published_time or the first <time datetime>."""
    meta = soup.find('meta', attrs={'property': 'article:published_time'})
    if meta is not None and meta.get('content'):
        published = parse_date(meta['content'])
        if published is not None:
            return published

    time_elem = soup.find('time', attrs={'datetime': True})
    if time_elem is not None:
        return parse_date(time_elem.get('datetime'))

    return None


def extract_source_name(soup: BeautifulSoup, url: str) -> str:
    """Site name from og:site_name, else the host of the URL without www."""
    site_name = _meta_content(soup, [('property', 'og:site_name')])
    if site_name:
        return site_name
    host = urlparse(url).netloc if url else ''
    return host[4:] if host.startswith('www.') else host


def extract_metadata(
    document: Union[RawDocument, str],
    fallback_title: str = '',
    fallback_url: str = '',
) -> ArticleMetadata:
    """
    Extract article metadata from HTML.

    Args:
        document: Fetched document or raw HTML
        fallback_title: Title to use when the page has none (e.g. the feed title)
        fallback_url: URL used for the source name when the document has none

    Returns:
        ArticleMetadata: Extracted metadata; unknown fields are empty
    """
    url = document.url if isinstance(document, RawDocument) else fallback_url
    html_content = document.html if isinstance(document, RawDocument) else document

    try:
        soup = BeautifulSoup(html_content or '', 'html.parser')
        metadata = ArticleMetadata(
            title=extract_title(soup, fallback_title),
            summary_text=extract_description(soup),
            overline=extract_overline(soup),
            publish_date=extract_publish_date(soup),
            source_name=extract_source_name(soup, url or fallback_url),
        )
    except Exception as e:
        logger.warning("Error extracting metadata", url=url, error=str(e))
        return ArticleMetadata(
            title=fallback_title,
            source_name=extract_source_name(BeautifulSoup('', 'html.parser'), url or fallback_url),
        )

    if not metadata.is_complete:
        logger.debug(
            "Metadata incomplete",
            url=url,
            has_title=bool(metadata.title),
            has_summary=bool(metadata.summary_text),
            has_overline=bool(metadata.overline),
        )
    return metadata
