"""
Instagram embed extraction.
"""
import html
import re
from typing import Optional, Union

from newsdesk.extractor.embeds.base import EmbedRules, extract_embed
from newsdesk.models.document import RawDocument
from newsdesk.models.embed import EmbedPlatform

POST_PATTERN = re.compile(r'instagram\.com/(p|reel)/([\w-]+)')


def build_instagram_embed(href: str) -> Optional[str]:
    """Canonical blockquote for a /p/<id>/ or /reel/<id>/ link."""
    match = POST_PATTERN.search(href)
    if not match:
        return None
    kind, post_id = match.groups()
    permalink = html.escape(f"https://www.instagram.com/{kind}/{post_id}/", quote=True)
    return (
        f'<blockquote class="instagram-media" data-instgrm-permalink="{permalink}" '
        f'data-instgrm-version="14"></blockquote>'
    )


INSTAGRAM_RULES = EmbedRules(
    platform=EmbedPlatform.INSTAGRAM,
    native_selectors=(
        'blockquote.instagram-media, '
        'blockquote[data-instgrm-permalink], '
        'blockquote[data-instgrm-captioned]',
        'iframe[src*="instagram.com"]',
    ),
    link_selector='a[href*="instagram.com/"]',
    build_from_link=build_instagram_embed,
    denied_classes=('share', 'follow'),
)


def extract_instagram_embed(document: Union[RawDocument, str]) -> Optional[str]:
    """Instagram embed HTML, or None."""
    return extract_embed(document, INSTAGRAM_RULES)
