"""
Facebook embed extraction.

Facebook pages are full of like/share buttons that use the same markup as
genuine post embeds, so this platform carries the widest denylist: widget
classes on the element or up to three ancestors, like-button attributes and
plugin iframe URLs.
"""
import html
import re
from typing import Optional, Union

from newsdesk.extractor.embeds.base import EmbedRules, extract_embed
from newsdesk.models.document import RawDocument
from newsdesk.models.embed import EmbedPlatform

POST_PATTERNS = [
    re.compile(r'facebook\.com/[^/?#]+/posts/'),
    re.compile(r'facebook\.com/[^/?#]+/videos/'),
    re.compile(r'facebook\.com/permalink\.php'),
    re.compile(r'facebook\.com/photo\.php'),
    re.compile(r'facebook\.com/video\.php'),
]


def build_facebook_embed(href: str) -> Optional[str]:
    """Canonical fb-post container for a post, photo or video link."""
    if not any(pattern.search(href) for pattern in POST_PATTERNS):
        return None
    data_href = html.escape(href, quote=True)
    return f'<div class="fb-post" data-href="{data_href}" data-width="500"></div>'


FACEBOOK_RULES = EmbedRules(
    platform=EmbedPlatform.FACEBOOK,
    native_selectors=(
        'div.fb-post, '
        'div.fb-video, '
        'div[class*="facebook"], '
        'div[data-href*="facebook.com"]',
        'iframe[src*="facebook.com"]',
    ),
    link_selector='a[href*="facebook.com/"]',
    build_from_link=build_facebook_embed,
    denied_classes=('share', 'like', 'follow', 'social-button'),
    denied_attributes=(
        ('data-layout', ('button', 'button_count', 'box_count')),
        ('data-action', ('like', 'recommend')),
        ('data-share', ('true',)),
    ),
    denied_src=(
        '/plugins/like.php',
        '/plugins/share_button.php',
        '/plugins/follow.php',
        '/plugins/page.php',
    ),
    denied_markup=('plugins/like.php', 'bottomFacebookLike', 'data-layout="button"'),
    denied_ancestor_classes=('share', 'social', 'like'),
    ancestor_depth=3,
    link_ancestor_depth=1,
)


def extract_facebook_embed(document: Union[RawDocument, str]) -> Optional[str]:
    """Facebook embed HTML, or None."""
    return extract_embed(document, FACEBOOK_RULES)
