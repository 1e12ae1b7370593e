"""
Extractor package for newsdesk.

This package turns a fetched article page into the pieces the structurer
needs. Every extractor is a pure function of the HTML and none of them
depends on another's result.

The main components are:
- Article parser for the main readable text and the quality gate
- Metadata extractor for title, bajada, volanta, date and source
- Embed extractors for Instagram, Facebook, Twitter and YouTube
- Image extractor for the featured and in-article images
"""
from newsdesk.extractor.article_parser import (
    check_text_quality,
    clean_article_text,
    extract_text,
)
from newsdesk.extractor.embeds import extract_embed, extract_embeds
from newsdesk.extractor.image_extractor import (
    build_image_captions_block,
    extract_article_images,
    extract_featured_image,
    images_from_attachments,
)
from newsdesk.extractor.metadata import extract_metadata, extract_publish_date

__all__ = [
    "build_image_captions_block",
    "check_text_quality",
    "clean_article_text",
    "extract_article_images",
    "extract_embed",
    "extract_embeds",
    "extract_featured_image",
    "extract_metadata",
    "extract_publish_date",
    "extract_text",
    "images_from_attachments",
]
