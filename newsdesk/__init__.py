"""
newsdesk

A batch pipeline that turns news article URLs from section feeds into
structured, rewritten articles stored in the newsroom record store.
"""

__version__ = "0.1.0"
__description__ = "Fetch, extract, rewrite and structure news articles for a newsroom"

# Version info tuple
VERSION_INFO = tuple(map(int, __version__.split('.')))
