"""
Article parser module for newsdesk.

This module extracts the readable body text of a news article from raw HTML.
It strips page chrome with a selector denylist, picks the most likely main
content container from a prioritized selector list, and joins its paragraphs.
readability-lxml is used as a fallback when the selector pass finds nothing.
"""
import re
from typing import List, Union

import structlog
from bs4 import BeautifulSoup, Comment, Tag
from readability import Document

from newsdesk.errors import ExtractionInsufficient
from newsdesk.models.document import RawDocument

# Set up structured logger
logger = structlog.get_logger()

# Paragraphs at or below this length are treated as boilerplate
MIN_PARAGRAPH_LENGTH = 20

# Callers abandon articles whose extracted text is shorter than this
MIN_TEXT_LENGTH = 50

# HTML elements removed outright before looking for content
NOISE_ELEMENTS = ['script', 'style', 'noscript', 'template', 'svg']

# Page chrome removed by selector
NOISE_SELECTORS = [
    'header:not(article header)',
    'footer:not(article footer)',
    'nav', '.nav', '.navigation', '.menu',
    '.sidebar', '.aside', 'aside',
    '.ads', '.ad-container', '[class^="ad-"]', '[class*=" ad-"]', '[id^="ad-"]',
    '[class*="banner"]',
    '.social-share', '.related-articles',
    '.comments', '#comments',
    '.widget', '.popup', '.modal',
    '.newsletter', '.subscription', '.cookie-notice',
]

# CSS selectors for the main article container, most specific first
ARTICLE_SELECTORS = [
    'article',
    '.article-content',
    '.article-body',
    '.post-content',
    '.entry-content',
    '[itemprop="articleBody"]',
    '.story-content',
    'main',
    '#main-content',
    '.post',
    '.content',
]

URL_PATTERN = re.compile(r'https?://\S+')
MARKDOWN_IMAGE_PATTERN = re.compile(r'!\[[^\]]*\]\([^)]*\)')
MARKDOWN_LINK_PATTERN = re.compile(r'\[([^\]]+)\]\([^)]*\)')
EMPTY_BRACKETS_PATTERN = re.compile(r'\[\s*\]')
SENTENCE_BREAK_PATTERN = re.compile(r'\.\s+')
PARAGRAPH_BREAK_PATTERN = re.compile(r'\n\s*\n')


def _html_of(document: Union[RawDocument, str]) -> str:
    return document.html if isinstance(document, RawDocument) else document


def remove_noise(soup: BeautifulSoup) -> None:
    """Remove scripts, comments and page chrome from a parsed document in place."""
    for element in NOISE_ELEMENTS:
        for node in soup.find_all(element):
            if not node.decomposed:
                node.decompose()

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for selector in NOISE_SELECTORS:
        try:
            nodes = soup.select(selector)
        except Exception as e:
            logger.debug("Skipping unsupported noise selector", selector=selector, error=str(e))
            continue
        for node in nodes:
            if not node.decomposed:
                node.decompose()


def find_main_content(soup: BeautifulSoup) -> Tag:
    """
    Find the main content container of an article.

    Args:
        soup: Parsed (and cleaned) document

    Returns:
        Tag: First element matching ARTICLE_SELECTORS, else body, else the document
    """
    for selector in ARTICLE_SELECTORS:
        element = soup.select_one(selector)
        if element is not None:
            logger.debug("Found main content area", selector=selector)
            return element

    logger.debug("No main content area found, using document body")
    return soup.body or soup


def extract_paragraphs(
    container: Tag,
    min_length: int = MIN_PARAGRAPH_LENGTH,
) -> List[str]:
    """
    Collect paragraph texts longer than `min_length` from a container.

    Args:
        container: Element to search
        min_length: Paragraphs at or below this length are skipped

    Returns:
        List[str]: Paragraph texts with whitespace collapsed
    """
    paragraphs = []
    for p in container.find_all('p'):
        text = re.sub(r'\s+', ' ', p.get_text(' ', strip=True)).strip()
        if len(text) > min_length:
            paragraphs.append(text)
    return paragraphs


def split_text_units(text: str, min_length: int = MIN_PARAGRAPH_LENGTH) -> List[str]:
    """
    Clean raw text and break it into body paragraphs.

    Strips URLs and markdown image syntax, unwraps markdown links, collapses
    whitespace and re-breaks each blank-line separated block on sentence
    boundaries, dropping fragments of `min_length` characters or fewer.

    Args:
        text: Raw article text
        min_length: Minimum fragment length to keep

    Returns:
        List[str]: Paragraphs in reading order
    """
    if not text:
        return []

    text = MARKDOWN_IMAGE_PATTERN.sub('', text)
    text = MARKDOWN_LINK_PATTERN.sub(r'\1', text)
    text = URL_PATTERN.sub('', text)

    paragraphs = []
    for block in PARAGRAPH_BREAK_PATTERN.split(text):
        block = EMPTY_BRACKETS_PATTERN.sub('', re.sub(r'\s+', ' ', block))
        fragments = [fragment.strip() for fragment in SENTENCE_BREAK_PATTERN.split(block)]
        fragments = [fragment for fragment in fragments if len(fragment) > min_length]
        # The split consumes the period of every fragment but the last
        paragraphs.extend(fragment + '.' for fragment in fragments[:-1])
        paragraphs.extend(fragments[-1:])
    return paragraphs


def clean_article_text(text: str, min_length: int = MIN_PARAGRAPH_LENGTH) -> str:
    """
    Clean and normalize extracted article text.

    Returns:
        str: Clean text with paragraphs separated by blank lines
    """
    return '\n\n'.join(split_text_units(text, min_length)).strip()


def _text_from_container(container: Tag, min_length: int) -> str:
    paragraphs = extract_paragraphs(container, min_length)
    if paragraphs:
        raw = '\n\n'.join(paragraphs)
    else:
        # No <p> markup: take all text and let sentence splitting structure it
        raw = container.get_text(' ', strip=True)
    return clean_article_text(raw, min_length)


def extract_with_readability(html_content: str, min_length: int = MIN_PARAGRAPH_LENGTH) -> str:
    """
    Extract text using readability-lxml's main-content heuristic.

    Returns:
        str: Clean text, or "" if readability fails
    """
    try:
        summary_html = Document(html_content).summary()
    except Exception as e:
        logger.debug("Readability extraction failed", error=str(e))
        return ""
    soup = BeautifulSoup(summary_html, 'html.parser')
    return _text_from_container(soup, min_length)


def extract_text(
    document: Union[RawDocument, str],
    min_length: int = MIN_PARAGRAPH_LENGTH,
) -> str:
    """
    Extract the main readable text of an article.

    Args:
        document: Fetched document or raw HTML
        min_length: Paragraphs at or below this length are skipped

    Returns:
        str: Article text with paragraphs separated by blank lines, or ""
            when nothing readable was found. Never raises.
    """
    html_content = _html_of(document)
    if not html_content or not html_content.strip():
        return ""

    try:
        soup = BeautifulSoup(html_content, 'html.parser')
        remove_noise(soup)
        text = _text_from_container(find_main_content(soup), min_length)
    except Exception as e:
        logger.warning("Error extracting article text", error=str(e))
        text = ""

    if not text:
        text = extract_with_readability(html_content, min_length)

    return text


def check_text_quality(
    text: str,
    url: str,
    min_text_length: int = MIN_TEXT_LENGTH,
) -> str:
    """
    Reject extracted text that is too short to be an article.

    Args:
        text: Extracted text
        url: Article URL, for the error
        min_text_length: Minimum accepted length

    Returns:
        str: The text, unchanged

    Raises:
        ExtractionInsufficient: If the text is shorter than the minimum
    """
    length = len(text.strip()) if text else 0
    if length < min_text_length:
        raise ExtractionInsufficient(url, length, min_text_length)
    return text

