"""
Shared embed extraction algorithm.

Each platform is described by an immutable EmbedRules table; `extract_embed`
applies the same steps to every platform:

1. Native embed markup (blockquotes, containers, iframes), tried in the
   order the rule groups are listed. First genuine match wins.
2. Failing that, plain links to a post or video are turned into a minimal
   canonical embed snippet.
3. Candidates that look like share/like/follow widgets are skipped, judged
   by element classes, attributes, iframe src, final markup and, where the
   rules ask for it, the classes of their ancestors.

Any exception is logged and treated as "nothing found" for that platform.
"""
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Union

import structlog
from bs4 import BeautifulSoup, Tag

from newsdesk.models.document import RawDocument
from newsdesk.models.embed import EmbedPlatform

# Set up structured logger
logger = structlog.get_logger()


@dataclass(frozen=True)
class EmbedRules:
    """Selectors, renderers and denylists for one platform."""
    platform: EmbedPlatform
    # CSS selector groups for native markup, highest trust first
    native_selectors: Tuple[str, ...]
    link_selector: str
    # href -> canonical snippet, or None when the link is not a post/video
    build_from_link: Callable[[str], Optional[str]]
    # element -> HTML to return; defaults to the element's outer HTML
    render_native: Optional[Callable[[Tag], Optional[str]]] = None
    # extra acceptance test for native candidates
    accept_native: Optional[Callable[[Tag], bool]] = None
    denied_classes: Tuple[str, ...] = ()
    denied_attributes: Tuple[Tuple[str, Tuple[str, ...]], ...] = ()
    denied_src: Tuple[str, ...] = ()
    denied_markup: Tuple[str, ...] = ()
    denied_ancestor_classes: Tuple[str, ...] = ()
    ancestor_depth: int = 0
    link_ancestor_depth: int = 0


def class_string(element: Tag) -> str:
    """Lower-cased class attribute of an element as a single string."""
    classes = element.get('class') if isinstance(element, Tag) else None
    if not classes:
        return ''
    if isinstance(classes, str):
        return classes.lower()
    return ' '.join(classes).lower()


def has_denied_ancestor(element: Tag, substrings: Tuple[str, ...], depth: int) -> bool:
    """Check up to `depth` parent levels for a class containing a denied substring."""
    if not substrings or depth <= 0:
        return False
    parent = element.parent
    for _ in range(depth):
        if parent is None or isinstance(parent, BeautifulSoup):
            return False
        classes = class_string(parent)
        if any(substring in classes for substring in substrings):
            return True
        parent = parent.parent
    return False


def is_denied_element(element: Tag, rules: EmbedRules, ancestor_depth: int) -> bool:
    """Whether an element is a social widget rather than embedded content."""
    classes = class_string(element)
    if any(substring in classes for substring in rules.denied_classes):
        return True

    for attribute, values in rules.denied_attributes:
        value = element.get(attribute)
        if isinstance(value, str) and value.strip().lower() in values:
            return True

    src = element.get('src') or ''
    if isinstance(src, str) and any(substring in src for substring in rules.denied_src):
        return True

    return has_denied_ancestor(element, rules.denied_ancestor_classes, ancestor_depth)


def has_denied_markup(html_snippet: str, rules: EmbedRules) -> bool:
    return any(marker in html_snippet for marker in rules.denied_markup)


def _first_native(soup: BeautifulSoup, rules: EmbedRules) -> Optional[str]:
    for selector in rules.native_selectors:
        for element in soup.select(selector):
            if is_denied_element(element, rules, rules.ancestor_depth):
                continue
            if rules.accept_native is not None and not rules.accept_native(element):
                continue
            rendered = rules.render_native(element) if rules.render_native else str(element)
            if rendered and not has_denied_markup(rendered, rules):
                return rendered
    return None


def _first_from_link(soup: BeautifulSoup, rules: EmbedRules) -> Optional[str]:
    for link in soup.select(rules.link_selector):
        href = link.get('href')
        if not href or not isinstance(href, str):
            continue
        if is_denied_element(link, rules, rules.link_ancestor_depth):
            continue
        rendered = rules.build_from_link(href.strip())
        if rendered and not has_denied_markup(rendered, rules):
            return rendered
    return None


def extract_embed(document: Union[RawDocument, str], rules: EmbedRules) -> Optional[str]:
    """
    Find the first genuine embed for a platform.

    Args:
        document: Fetched document or raw HTML
        rules: Platform rules

    Returns:
        Optional[str]: Canonical embed HTML, or None if not found
    """
    html_content = document.html if isinstance(document, RawDocument) else document
    if not html_content:
        return None

    try:
        soup = BeautifulSoup(html_content, 'html.parser')

        embed_html = _first_native(soup, rules)
        if embed_html:
            logger.debug("Found native embed", platform=rules.platform.value, html=embed_html[:100])
            return embed_html

        embed_html = _first_from_link(soup, rules)
        if embed_html:
            logger.debug("Created embed from link", platform=rules.platform.value, html=embed_html[:100])
        return embed_html

    except Exception as e:
        logger.warning("Error extracting embed", platform=rules.platform.value, error=str(e))
        return None
