"""
Social media embed extraction.

Each platform is extracted independently from the same HTML; a failure or
miss on one platform never affects the others.
"""
from typing import Dict, Union

import structlog

from newsdesk.extractor.embeds.base import EmbedRules, extract_embed
from newsdesk.extractor.embeds.facebook import FACEBOOK_RULES, extract_facebook_embed
from newsdesk.extractor.embeds.instagram import INSTAGRAM_RULES, extract_instagram_embed
from newsdesk.extractor.embeds.twitter import TWITTER_RULES, extract_twitter_embed
from newsdesk.extractor.embeds.youtube import (
    YOUTUBE_RULES,
    extract_youtube_embed,
    youtube_iframe,
    youtube_video_id,
)
from newsdesk.models.document import RawDocument
from newsdesk.models.embed import EmbedPlatform, EmbedSet

logger = structlog.get_logger()

EMBED_RULES: Dict[EmbedPlatform, EmbedRules] = {
    EmbedPlatform.INSTAGRAM: INSTAGRAM_RULES,
    EmbedPlatform.FACEBOOK: FACEBOOK_RULES,
    EmbedPlatform.TWITTER: TWITTER_RULES,
    EmbedPlatform.YOUTUBE: YOUTUBE_RULES,
}


def extract_embeds(document: Union[RawDocument, str]) -> EmbedSet:
    """
    Run every platform extractor over the same HTML.

    Args:
        document: Fetched document or raw HTML

    Returns:
        EmbedSet: One entry per platform, None where nothing was found
    """
    found = {
        platform: extract_embed(document, rules)
        for platform, rules in EMBED_RULES.items()
    }
    embeds = EmbedSet.from_mapping(found)
    logger.debug("Extracted embeds", **embeds.summary())
    return embeds


__all__ = [
    "EMBED_RULES",
    "EmbedRules",
    "extract_embed",
    "extract_embeds",
    "extract_facebook_embed",
    "extract_instagram_embed",
    "extract_twitter_embed",
    "extract_youtube_embed",
    "youtube_iframe",
    "youtube_video_id",
]
