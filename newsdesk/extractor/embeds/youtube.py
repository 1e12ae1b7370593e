"""
YouTube embed extraction.

Every form of YouTube reference (embed iframes, player containers carrying a
data-video-id, watch/short/youtu.be links) is reduced to the same canonical
iframe once the video id is known.
"""
import re
from typing import Optional, Union
from urllib.parse import parse_qs, urlparse

from bs4 import Tag

from newsdesk.extractor.embeds.base import EmbedRules, class_string, extract_embed
from newsdesk.models.document import RawDocument
from newsdesk.models.embed import EmbedPlatform

VIDEO_ID_PATTERN = re.compile(r'[A-Za-z0-9_-]{6,}')
PATH_ID_PATTERN = re.compile(r'^/(?:embed|shorts|live|v)/([^/?#]+)')
YOUTUBE_HOSTS = ('youtube.com', 'youtube-nocookie.com')


def youtube_video_id(url: str) -> Optional[str]:
    """
    Extract the video id from any YouTube URL form.

    Handles youtube.com/watch?v=ID, youtu.be/ID, /embed/ID, /shorts/ID and
    /live/ID, with or without scheme.

    Returns:
        Optional[str]: Video id, or None if the URL is not a video URL
    """
    if not url:
        return None
    parsed = urlparse(url if '//' in url else f'//{url}')
    host = parsed.netloc.lower().split(':')[0]
    for prefix in ('www.', 'm.', 'music.'):
        if host.startswith(prefix):
            host = host[len(prefix):]
            break

    candidate = None
    if host == 'youtu.be':
        candidate = parsed.path.strip('/').split('/')[0]
    elif any(host == known or host.endswith('.' + known) for known in YOUTUBE_HOSTS):
        if parsed.path.rstrip('/') == '/watch':
            candidate = parse_qs(parsed.query).get('v', [''])[0]
        else:
            match = PATH_ID_PATTERN.match(parsed.path)
            if match:
                candidate = match.group(1)

    if candidate and VIDEO_ID_PATTERN.fullmatch(candidate):
        return candidate
    return None


def youtube_iframe(video_id: str) -> str:
    """Canonical embed iframe for a video id."""
    return (
        f'<iframe width="560" height="315" src="https://www.youtube.com/embed/{video_id}" '
        'frameborder="0" allow="accelerometer; autoplay; clipboard-write; encrypted-media; '
        'gyroscope; picture-in-picture" allowfullscreen></iframe>'
    )


def build_youtube_embed(href: str) -> Optional[str]:
    video_id = youtube_video_id(href)
    return youtube_iframe(video_id) if video_id else None


def _is_player_container(element: Tag) -> bool:
    if element.name == 'iframe':
        return True
    if element.select_one('iframe[src*="youtube"]') is not None:
        return True
    if element.get('data-video-id'):
        return True
    return 'player' in class_string(element)


def render_youtube_native(element: Tag) -> Optional[str]:
    """Canonical iframe when the id can be recovered, else the original markup."""
    iframe = element if element.name == 'iframe' else element.select_one('iframe[src*="youtube"]')
    if iframe is not None:
        video_id = youtube_video_id(iframe.get('src') or '')
        return youtube_iframe(video_id) if video_id else str(iframe)

    video_id = element.get('data-video-id')
    if isinstance(video_id, str) and VIDEO_ID_PATTERN.fullmatch(video_id.strip()):
        return youtube_iframe(video_id.strip())
    return str(element)


YOUTUBE_RULES = EmbedRules(
    platform=EmbedPlatform.YOUTUBE,
    native_selectors=(
        'iframe[src*="youtube.com/embed"], '
        'iframe[src*="youtube-nocookie.com/embed"], '
        'iframe[src*="youtu.be"]',
        'div[class*="youtube"], div[id*="youtube"]',
    ),
    link_selector='a[href*="youtube.com/"], a[href*="youtu.be/"]',
    build_from_link=build_youtube_embed,
    render_native=render_youtube_native,
    accept_native=_is_player_container,
    denied_classes=('share', 'subscribe'),
)


def extract_youtube_embed(document: Union[RawDocument, str]) -> Optional[str]:
    """YouTube embed HTML, or None."""
    return extract_embed(document, YOUTUBE_RULES)
