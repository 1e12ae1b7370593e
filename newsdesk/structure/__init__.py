"""
Structure package for newsdesk.

Turns extracted (or rewritten) article parts into an ordered sequence of
typed content blocks.
"""
from newsdesk.structure.builder import (
    UNTITLED,
    image_order,
    split_article_into_sections,
    structure_article,
)
from newsdesk.structure.markdown import clean_markdown, render_paragraph, split_paragraphs

__all__ = [
    "UNTITLED",
    "clean_markdown",
    "image_order",
    "render_paragraph",
    "split_article_into_sections",
    "split_paragraphs",
    "structure_article",
]
