"""
Twitter / X embed extraction.
"""
import re
from typing import Optional, Union

from newsdesk.extractor.embeds.base import EmbedRules, extract_embed
from newsdesk.models.document import RawDocument
from newsdesk.models.embed import EmbedPlatform

STATUS_PATTERN = re.compile(r'(?:^|//|\.)(?:twitter|x)\.com/(\w+)/status(?:es)?/(\d+)')


def build_twitter_embed(href: str) -> Optional[str]:
    """Canonical twitter-tweet blockquote for a status link on twitter.com or x.com."""
    match = STATUS_PATTERN.search(href)
    if not match:
        return None
    username, tweet_id = match.groups()
    return (
        '<blockquote class="twitter-tweet" data-lang="en">'
        f'<a href="https://twitter.com/{username}/status/{tweet_id}"></a>'
        '</blockquote>'
    )


TWITTER_RULES = EmbedRules(
    platform=EmbedPlatform.TWITTER,
    native_selectors=(
        'blockquote.twitter-tweet, '
        'blockquote[data-tweet-id], '
        'blockquote[class*="twitter"]',
        'iframe[src*="twitter.com"], iframe[src*="platform.twitter.com"]',
    ),
    link_selector='a[href*="twitter.com/"], a[href*="x.com/"]',
    build_from_link=build_twitter_embed,
    denied_classes=('share', 'follow', 'hashtag', 'mention'),
    denied_src=('follow_button', 'tweet_button', 'share'),
    denied_markup=('share-button', 'twitter-share', 'twitter-follow', 'twitter-hashtag'),
)


def extract_twitter_embed(document: Union[RawDocument, str]) -> Optional[str]:
    """Twitter embed HTML, or None."""
    return extract_embed(document, TWITTER_RULES)
