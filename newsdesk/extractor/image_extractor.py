"""
Image extractor module for newsdesk.

This module finds the featured image and the in-article images of a news
page. In-article images are annotated with the number of body paragraphs that
precede them, which is what the structurer uses to interleave them with text.
"""
from typing import Iterable, List, Optional, Union
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup, Tag

from newsdesk.extractor.article_parser import (
    MIN_PARAGRAPH_LENGTH,
    find_main_content,
    remove_noise,
    split_text_units,
)
from newsdesk.models.document import RawDocument
from newsdesk.models.image import ImageRef

# Set up structured logger
logger = structlog.get_logger()

MAX_ARTICLE_IMAGES = 4

# Substrings of an image URL that mark it as page decoration
DECORATION_MARKERS = ('logo', 'icon', 'avatar', 'sprite', 'pixel', 'spacer', 'placeholder')


def _dimension(value) -> Optional[int]:
    try:
        return int(str(value).replace('px', '').strip()) if value else None
    except ValueError:
        return None


def _image_source(img: Tag) -> str:
    for attribute in ('src', 'data-src', 'data-lazy-src', 'data-original'):
        src = img.get(attribute)
        if src and isinstance(src, str) and not src.startswith('data:'):
            return src.strip()
    return ''


def is_content_image(img: Tag, src: str, min_width: int = 100, min_height: int = 100) -> bool:
    """Whether an <img> looks like editorial content rather than decoration."""
    if not src:
        return False

    lowered = src.lower()
    if any(marker in lowered for marker in DECORATION_MARKERS):
        return False

    width = _dimension(img.get('width'))
    height = _dimension(img.get('height'))
    if (width is not None and width < min_width) or (height is not None and height < min_height):
        return False
    return True


def _caption_for(img: Tag) -> str:
    figure = img.find_parent('figure')
    if figure is None:
        return ''
    caption = figure.find('figcaption')
    return caption.get_text(' ', strip=True) if caption is not None else ''


def extract_article_images(
    document: Union[RawDocument, str],
    base_url: str = '',
    limit: int = MAX_ARTICLE_IMAGES,
    min_paragraph_length: int = MIN_PARAGRAPH_LENGTH,
) -> List[ImageRef]:
    """
    Extract in-article images from the main content container.

    Each image is annotated with the number of body paragraphs that precede
    it in document order, counted the way `extract_text` breaks the text so
    a multi-sentence <p> counts once per sentence.

    Args:
        document: Fetched document or raw HTML
        base_url: Base URL for resolving relative image URLs
        limit: Maximum number of images returned
        min_paragraph_length: Paragraphs at or below this length are not counted

    Returns:
        List[ImageRef]: Images in document order, at most `limit`
    """
    if isinstance(document, RawDocument):
        html_content = document.html
        base_url = base_url or document.url
    else:
        html_content = document

    if not html_content or limit <= 0:
        return []

    try:
        soup = BeautifulSoup(html_content, 'html.parser')
        remove_noise(soup)
        container = find_main_content(soup)

        images: List[ImageRef] = []
        seen = set()
        paragraphs_seen = 0
        for element in container.find_all(['p', 'img']):
            if element.name == 'p':
                text = ' '.join(element.get_text(' ', strip=True).split())
                if len(text) > min_paragraph_length:
                    paragraphs_seen += len(split_text_units(text, min_paragraph_length))
                continue

            src = _image_source(element)
            if not is_content_image(element, src):
                continue
            url = urljoin(base_url, src) if base_url else src
            if url in seen:
                continue
            seen.add(url)

            images.append(ImageRef(
                url=url,
                alt_text=element.get('alt') or '',
                caption=_caption_for(element),
                after_paragraph=paragraphs_seen,
            ))
            if len(images) >= limit:
                break

        logger.debug("Extracted article images", count=len(images))
        return images

    except Exception as e:
        logger.error("Error extracting images", error=str(e))
        return []


def extract_featured_image(document: Union[RawDocument, str], base_url: str = '') -> str:
    """
    Featured image URL from og:image or twitter:image.

    Returns:
        str: Absolute image URL, or "" if the page declares none
    """
    if isinstance(document, RawDocument):
        html_content = document.html
        base_url = base_url or document.url
    else:
        html_content = document

    soup = BeautifulSoup(html_content or '', 'html.parser')
    for attribute, value in (('property', 'og:image'), ('name', 'twitter:image'), ('property', 'twitter:image')):
        meta = soup.find('meta', attrs={attribute: value})
        content = (meta.get('content') or '').strip() if meta is not None else ''
        if content and not content.startswith('data:'):
            return urljoin(base_url, content) if base_url else content
    return ''


def images_from_attachments(urls: Iterable[str], limit: int = MAX_ARTICLE_IMAGES) -> List[ImageRef]:
    """
    Build in-article images from feed attachment URLs.

    The first URL is the featured image and is skipped here; the next `limit`
    are placed after paragraphs 0, 2, 4 and so on.

    Args:
        urls: Attachment URLs, featured image first
        limit: Maximum number of in-article images

    Returns:
        List[ImageRef]: In-article images
    """
    remaining = [url for url in urls if url][1:limit + 1]
    return [
        ImageRef(url=url, position=f"after-paragraph-{index * 2}")
        for index, url in enumerate(remaining)
    ]


def build_image_captions_block(images: Iterable[ImageRef]) -> str:
    """
    Markdown list describing images, appended to AI prompts.

    Returns:
        str: One line per image, or "" when there are none
    """
    lines = []
    for index, image in enumerate(images, start=1):
        description = image.caption or image.alt_text or "sin descripción"
        lines.append(f"- Imagen {index} ({image.annotation}): {description}")
    if not lines:
        return ""
    return "Imágenes del artículo:\n" + "\n".join(lines)
