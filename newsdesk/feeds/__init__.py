"""
Feed input for newsdesk.
"""
from newsdesk.feeds.sources import clean_title, fetch_feed_items, parse_feed

__all__ = ["clean_title", "fetch_feed_items", "parse_feed"]
