"""
Central re-exports for the newsdesk data models.
"""
from .content_block import (
    BajadaBlock,
    ContentBlock,
    EmbedBlock,
    FeaturedImageBlock,
    InArticleImageBlock,
    SourceAttributionBlock,
    StructuredArticle,
    TextSectionBlock,
    TitleBlock,
    VolantaBlock,
)
from .document import RawDocument
from .embed import EmbedPlatform, EmbedSet, ExtractedEmbed
from .feed_item import FeedItem
from .image import ImageRef
from .metadata import ArticleMetadata
from .record import FIELD_MAP, ArticleRecord

__all__ = [
    "ArticleMetadata",
    "ArticleRecord",
    "BajadaBlock",
    "ContentBlock",
    "EmbedBlock",
    "EmbedPlatform",
    "EmbedSet",
    "ExtractedEmbed",
    "FIELD_MAP",
    "FeaturedImageBlock",
    "FeedItem",
    "ImageRef",
    "InArticleImageBlock",
    "RawDocument",
    "SourceAttributionBlock",
    "StructuredArticle",
    "TextSectionBlock",
    "TitleBlock",
    "VolantaBlock",
]
