import pytest
from unittest.mock import patch

from newsdesk.extractor.article_parser import extract_text
from newsdesk.extractor.embeds import (
    EMBED_RULES,
    extract_embed,
    extract_embeds,
    extract_facebook_embed,
    extract_instagram_embed,
    extract_twitter_embed,
    extract_youtube_embed,
    youtube_iframe,
    youtube_video_id,
)
from newsdesk.models.document import RawDocument
from newsdesk.models.embed import EmbedPlatform

PLAIN_HTML = """
<html><body><article>
    <p>Una nota sin contenido de redes sociales, solamente texto corrido.</p>
    <a href="https://www.diario.com.ar/otra-nota">Otra nota</a>
</article></body></html>
"""

MALFORMED_HTML = (
    "<html><body><article><p>El gobierno anunció nuevas medidas para el sector agropecuario"
    "<div><span>sin cerrar</article></p><<>>&& <div class=\"broken\" <p"
)


@pytest.mark.parametrize("platform", list(EmbedPlatform))
def test_no_embed_markup_returns_none(platform):
    assert extract_embed(PLAIN_HTML, EMBED_RULES[platform]) is None


def test_extract_embeds_without_embeds():
    embeds = extract_embeds(PLAIN_HTML)

    assert list(embeds.found()) == []
    assert embeds.summary() == {
        "instagram": False,
        "facebook": False,
        "twitter": False,
        "youtube": False,
    }


def test_facebook_like_widget_is_ignored():
    html = """
    <div class="fb-like" data-href="https://www.facebook.com/diario" data-layout="button_count"
         data-action="like" data-share="true"></div>
    <iframe src="https://www.facebook.com/plugins/like.php?href=https%3A%2F%2Fwww.facebook.com%2Fdiario"></iframe>
    """
    assert extract_facebook_embed(html) is None


def test_facebook_post_found_after_like_widget():
    html = """
    <div class="fb-like" data-href="https://www.facebook.com/diario" data-layout="button"></div>
    <div class="fb-post" data-href="https://www.facebook.com/diario/posts/123456"></div>
    """
    result = extract_facebook_embed(html)

    assert result is not None
    assert "fb-post" in result
    assert "posts/123456" in result


def test_facebook_widget_inside_share_bar_is_ignored():
    html = """
    <div class="share-bar"><div class="wrapper"><div>
        <div class="fb-post" data-href="https://www.facebook.com/diario/posts/1"></div>
    </div></div></div>
    """
    assert extract_facebook_embed(html) is None


def test_facebook_post_link_is_canonicalized():
    html = '<p>Ver <a href="https://www.facebook.com/diario/posts/987654">la publicación</a></p>'

    result = extract_facebook_embed(html)

    assert result == (
        '<div class="fb-post" data-href="https://www.facebook.com/diario/posts/987654" '
        'data-width="500"></div>'
    )


def test_facebook_share_link_is_ignored():
    html = """
    <div class="social-share">
        <a href="https://www.facebook.com/diario/posts/1">Compartir</a>
    </div>
    <a href="https://www.facebook.com/sharer/sharer.php?u=https://diario.com.ar">Compartir</a>
    """
    assert extract_facebook_embed(html) is None


@pytest.mark.parametrize("href", [
    "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
    "https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42s",
    "https://youtu.be/dQw4w9WgXcQ",
    "https://m.youtube.com/shorts/dQw4w9WgXcQ",
])
def test_youtube_link_becomes_canonical_iframe(href):
    html = f'<p>Mirá el video <a href="{href}">acá</a></p>'

    result = extract_youtube_embed(html)

    assert result == youtube_iframe("dQw4w9WgXcQ")
    assert 'src="https://www.youtube.com/embed/dQw4w9WgXcQ"' in result


def test_youtube_iframe_is_canonicalized():
    html = '<iframe width="100%" src="https://www.youtube.com/embed/abcdefghijk?autoplay=1&rel=0"></iframe>'

    assert extract_youtube_embed(html) == youtube_iframe("abcdefghijk")


def test_youtube_player_container_with_video_id():
    html = '<div class="youtube-player" data-video-id="abcdefghijk"></div>'

    assert extract_youtube_embed(html) == youtube_iframe("abcdefghijk")


def test_youtube_channel_link_is_not_an_embed():
    html = '<a href="https://www.youtube.com/@diario">Nuestro canal</a>'

    assert extract_youtube_embed(html) is None


@pytest.mark.parametrize("url, expected", [
    ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("youtube.com/embed/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://www.youtube-nocookie.com/embed/dQw4w9WgXcQ?start=3", "dQw4w9WgXcQ"),
    ("https://youtu.be/dQw4w9WgXcQ?si=abc", "dQw4w9WgXcQ"),
    ("https://www.youtube.com/feed/trending", None),
    ("https://vimeo.com/12345678", None),
    ("", None),
])
def test_youtube_video_id(url, expected):
    assert youtube_video_id(url) == expected


def test_instagram_blockquote_is_returned():
    html = """
    <blockquote class="instagram-media" data-instgrm-permalink="https://www.instagram.com/p/C1a2b3c4/">
        <a href="https://www.instagram.com/p/C1a2b3c4/">Ver esta publicación</a>
    </blockquote>
    """
    result = extract_instagram_embed(html)

    assert result is not None
    assert result.startswith("<blockquote")
    assert "instagram-media" in result


def test_instagram_link_is_canonicalized():
    html = '<a href="https://www.instagram.com/p/C1a2b3c4/?utm_source=ig_web">post</a>'

    result = extract_instagram_embed(html)

    assert 'data-instgrm-permalink="https://www.instagram.com/p/C1a2b3c4/"' in result
    assert 'class="instagram-media"' in result


def test_instagram_profile_link_is_ignored():
    html = '<a class="follow-us" href="https://www.instagram.com/diario/">Seguinos</a>'

    assert extract_instagram_embed(html) is None


def test_twitter_blockquote_is_returned():
    html = """
    <blockquote class="twitter-tweet"><p>Texto del tuit</p>
    <a href="https://twitter.com/usuario/status/1234567890">March 1, 2024</a></blockquote>
    """
    result = extract_twitter_embed(html)

    assert result is not None
    assert "twitter-tweet" in result


def test_x_status_link_is_canonicalized():
    html = '<a href="https://x.com/usuario/status/1234567890">tuit</a>'

    result = extract_twitter_embed(html)

    assert result == (
        '<blockquote class="twitter-tweet" data-lang="en">'
        '<a href="https://twitter.com/usuario/status/1234567890"></a>'
        '</blockquote>'
    )


def test_twitter_share_and_hashtag_links_are_ignored():
    html = """
    <a class="twitter-share-button" href="https://twitter.com/intent/tweet?text=hola">Tweet</a>
    <a href="https://twitter.com/hashtag/cosecha">#cosecha</a>
    <a class="twitter-follow-button" href="https://twitter.com/diario">Seguir</a>
    """
    assert extract_twitter_embed(html) is None


def test_unrelated_domain_is_not_twitter():
    html = '<a href="https://www.fox.com/usuario/status/1234567890">nota</a>'

    assert extract_twitter_embed(html) is None


def test_extract_embeds_is_independent_per_platform():
    html = """
    <blockquote class="instagram-media" data-instgrm-permalink="https://www.instagram.com/p/C1a2b3c4/"></blockquote>
    <a href="https://youtu.be/dQw4w9WgXcQ">video</a>
    """
    embeds = extract_embeds(RawDocument(url="https://diario.com.ar/nota", html=html))

    assert embeds.get(EmbedPlatform.INSTAGRAM) is not None
    assert embeds.get(EmbedPlatform.YOUTUBE) == youtube_iframe("dQw4w9WgXcQ")
    assert embeds.get(EmbedPlatform.FACEBOOK) is None
    assert embeds.get(EmbedPlatform.TWITTER) is None
    assert [embed.platform for embed in embeds.found()] == [EmbedPlatform.INSTAGRAM, EmbedPlatform.YOUTUBE]


@pytest.mark.parametrize("platform", list(EmbedPlatform))
def test_malformed_html_returns_none(platform):
    assert extract_embed(MALFORMED_HTML, EMBED_RULES[platform]) is None


def test_malformed_html_still_yields_text():
    text = extract_text(MALFORMED_HTML)

    assert text
    assert "El gobierno anunció nuevas medidas" in text


def test_parser_failure_is_contained():
    with patch("newsdesk.extractor.embeds.base.BeautifulSoup", side_effect=RuntimeError("boom")):
        embeds = extract_embeds('<blockquote class="instagram-media"></blockquote>')

    assert list(embeds.found()) == []
