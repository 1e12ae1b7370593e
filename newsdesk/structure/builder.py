"""
Content structurer for newsdesk.

Builds the ordered block sequence of an article from its metadata, body
text, in-article images and embeds. Ordering is driven entirely by numeric
`order` keys so that images can sit between paragraphs:

- header blocks: volanta -4, title -3, bajada -2, featured image -1
- paragraph i (0-based): i
- image placed after paragraph N: min(N, paragraph count) - 0.5
- embeds: paragraph count + k, in platform order
- source attribution: after the embeds

The sort is stable, so images sharing an insertion point keep the order in
which they were discovered.
"""
import re
from typing import Iterable, List, Optional
from urllib.parse import urlparse

import structlog

from newsdesk.errors import StructureInputInvalid
from newsdesk.models.content_block import (
    BajadaBlock,
    EmbedBlock,
    FeaturedImageBlock,
    InArticleImageBlock,
    SourceAttributionBlock,
    StructuredArticle,
    TextSectionBlock,
    TitleBlock,
    VolantaBlock,
)
from newsdesk.models.embed import EmbedSet
from newsdesk.models.image import DEFAULT_AFTER_PARAGRAPH, ImageRef
from newsdesk.models.metadata import ArticleMetadata
from newsdesk.structure.markdown import render_paragraph, split_paragraphs

# Set up structured logger
logger = structlog.get_logger()

UNTITLED = "Sin título"

VOLANTA_ORDER = -4.0
TITLE_ORDER = -3.0
BAJADA_ORDER = -2.0
FEATURED_IMAGE_ORDER = -1.0

SECTION_HEADING_PATTERN = re.compile(r'^#{2,3}\s+\S')
SECTION_GROUP_SIZE = 3
SECTION_GROUP_THRESHOLD = 6


def image_order(after_paragraph: Optional[int], paragraph_count: int) -> float:
    """Order key for an image; insertion points past the end clamp to the last paragraph."""
    if after_paragraph is None:
        after_paragraph = DEFAULT_AFTER_PARAGRAPH
    return min(after_paragraph, paragraph_count) - 0.5


def _attribution_text(metadata: ArticleMetadata, source_url: str) -> str:
    source = metadata.source_name
    if not source:
        host = urlparse(source_url).netloc
        source = host[4:] if host.startswith('www.') else host
    return f"Fuente: {source}" if source else "Fuente original"


def structure_article(
    metadata: ArticleMetadata,
    body_text: str,
    images: Iterable[ImageRef] = (),
    embeds: Optional[EmbedSet] = None,
    featured_image_url: str = "",
    source_url: str = "",
) -> StructuredArticle:
    """
    Build the ordered block sequence for an article.

    Args:
        metadata: Article metadata (title, bajada, volanta)
        body_text: Body as markdown, paragraphs separated by blank lines
        images: In-article images with insertion points
        embeds: Extracted social embeds
        featured_image_url: Featured image URL, if any
        source_url: Original article URL, for the attribution block

    Returns:
        StructuredArticle: Blocks sorted by order key

    Raises:
        StructureInputInvalid: If the body is empty after cleaning
    """
    if not body_text or not body_text.strip():
        raise StructureInputInvalid("Article body is empty")

    paragraphs = split_paragraphs(body_text)
    if not paragraphs:
        raise StructureInputInvalid("Article body has no paragraphs after cleaning")

    count = len(paragraphs)
    title = metadata.title or UNTITLED
    blocks = []

    if metadata.overline:
        blocks.append(VolantaBlock(order=VOLANTA_ORDER, text=metadata.overline))
    blocks.append(TitleBlock(order=TITLE_ORDER, text=title))
    if metadata.summary_text:
        blocks.append(BajadaBlock(order=BAJADA_ORDER, text=metadata.summary_text))
    if featured_image_url:
        blocks.append(FeaturedImageBlock(order=FEATURED_IMAGE_ORDER, url=featured_image_url, alt_text=title))

    for index, paragraph in enumerate(paragraphs):
        html, level = render_paragraph(paragraph)
        blocks.append(TextSectionBlock(order=float(index), text=paragraph, html=html, level=level))

    for image in images:
        if image.url == featured_image_url:
            continue
        blocks.append(InArticleImageBlock(
            order=image_order(image.after_paragraph, count),
            url=image.url,
            alt_text=image.alt_text,
            caption=image.caption,
        ))

    position = count
    if embeds is not None:
        for embed in embeds.found():
            blocks.append(EmbedBlock(order=float(position), platform=embed.platform, html=embed.canonical_html))
            position += 1

    if source_url:
        blocks.append(SourceAttributionBlock(
            order=float(position),
            url=source_url,
            text=_attribution_text(metadata, source_url),
        ))

    blocks.sort(key=lambda block: block.order)
    logger.debug(
        "Structured article",
        title=title,
        paragraphs=count,
        blocks=len(blocks),
    )
    return StructuredArticle(title=title, source_url=source_url, blocks=tuple(blocks))


def split_article_into_sections(text: str) -> List[str]:
    """
    Group article paragraphs into sections for preview rendering.

    A `##`/`###` heading starts a new section. Without headings, bodies of
    more than six paragraphs are grouped three at a time; shorter bodies are
    a single section.

    Args:
        text: Article body as markdown

    Returns:
        List[str]: Sections, paragraphs separated by blank lines
    """
    if not text or not text.strip():
        return []

    paragraphs = split_paragraphs(text)
    if any(SECTION_HEADING_PATTERN.match(paragraph) for paragraph in paragraphs):
        sections: List[List[str]] = []
        for paragraph in paragraphs:
            if SECTION_HEADING_PATTERN.match(paragraph) or not sections:
                sections.append([])
            sections[-1].append(paragraph)
        return ['\n\n'.join(section) for section in sections]

    if len(paragraphs) > SECTION_GROUP_THRESHOLD:
        return [
            '\n\n'.join(paragraphs[i:i + SECTION_GROUP_SIZE])
            for i in range(0, len(paragraphs), SECTION_GROUP_SIZE)
        ]

    return ['\n\n'.join(paragraphs)]
