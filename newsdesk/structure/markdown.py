"""
Minimal markdown handling for article bodies.

Rewritten bodies use a small markdown subset: `#`/`##`/`###` headings,
`>` quotes, `-`/`*` bullet lists, `**bold**` and `*italic*`. Raw HTML in the
text is stripped with bleach before any markup is produced.
"""
import re
from typing import List, Tuple

import bleach

MARKDOWN_IMAGE_PATTERN = re.compile(r'!\[[^\]]*\]\([^)]*\)')
MARKDOWN_LINK_PATTERN = re.compile(r'\[([^\]]+)\]\([^)]*\)')
BARE_URL_PATTERN = re.compile(r'(?<!\w)https?://[^\s)]+')
EMPTY_PARENS_PATTERN = re.compile(r'\(\s*\)')
INNER_SPACES_PATTERN = re.compile(r'[ \t]{2,}')
PARAGRAPH_BREAK_PATTERN = re.compile(r'\n\s*\n')

HEADING_PATTERN = re.compile(r'^(#{1,3})\s+(.+)$')
QUOTE_PATTERN = re.compile(r'^>\s?(.*)$')
LIST_ITEM_PATTERN = re.compile(r'^[-*]\s+(.+)$')
BOLD_PATTERN = re.compile(r'\*\*(.+?)\*\*')
ITALIC_PATTERN = re.compile(r'(?<![*\w])\*(?![\s*])(.+?)(?<![\s*])\*(?![*\w])')


def clean_markdown(text: str) -> str:
    """Remove markdown images and bare URLs, and unwrap markdown links to their text."""
    text = MARKDOWN_IMAGE_PATTERN.sub('', text)
    text = MARKDOWN_LINK_PATTERN.sub(r'\1', text)
    text = BARE_URL_PATTERN.sub('', text)
    text = EMPTY_PARENS_PATTERN.sub('', text)
    return INNER_SPACES_PATTERN.sub(' ', text)


def split_paragraphs(text: str) -> List[str]:
    """
    Split cleaned markdown into paragraphs on blank lines.

    Lines inside a paragraph are stripped; paragraphs that end up empty are
    dropped. A heading line is always a paragraph of its own, even when the
    text that follows it has no blank line in between.
    """
    paragraphs = []
    for chunk in PARAGRAPH_BREAK_PATTERN.split(clean_markdown(text or '')):
        lines: List[str] = []
        for line in (line.strip() for line in chunk.splitlines()):
            if not line:
                continue
            if HEADING_PATTERN.match(line):
                if lines:
                    paragraphs.append('\n'.join(lines))
                    lines = []
                paragraphs.append(line)
            else:
                lines.append(line)
        if lines:
            paragraphs.append('\n'.join(lines))
    return paragraphs


def render_inline(text: str) -> str:
    """Strip raw tags, escape the rest, then apply bold and italic."""
    safe = bleach.clean(text, tags=[], attributes={}, strip=True)
    safe = BOLD_PATTERN.sub(r'<strong>\1</strong>', safe)
    safe = ITALIC_PATTERN.sub(r'<em>\1</em>', safe)
    return safe


def render_paragraph(paragraph: str) -> Tuple[str, int]:
    """
    Render one markdown paragraph to HTML.

    A paragraph that opens with a heading line renders as the heading
    followed by the rest of its lines.

    Args:
        paragraph: Paragraph text (no blank lines)

    Returns:
        Tuple[str, int]: HTML and heading level (0 for non-headings)
    """
    lines = paragraph.splitlines()

    heading = HEADING_PATTERN.match(lines[0]) if lines else None
    if heading:
        level = len(heading.group(1))
        html = f'<h{level}>{render_inline(heading.group(2).strip())}</h{level}>'
        if len(lines) > 1:
            rest, _ = render_paragraph('\n'.join(lines[1:]))
            html += rest
        return html, level

    quotes = [QUOTE_PATTERN.match(line) for line in lines]
    if lines and all(quotes):
        body = ' '.join(match.group(1).strip() for match in quotes).strip()
        return f'<blockquote><p>{render_inline(body)}</p></blockquote>', 0

    items = [LIST_ITEM_PATTERN.match(line) for line in lines]
    if lines and all(items):
        rendered = ''.join(f'<li>{render_inline(match.group(1).strip())}</li>' for match in items)
        return f'<ul>{rendered}</ul>', 0

    return f'<p>{render_inline(" ".join(lines))}</p>', 0
