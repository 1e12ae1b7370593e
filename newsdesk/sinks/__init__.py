"""
Record-store sinks for newsdesk.
"""
from newsdesk.sinks.airtable import AirtableSink
from newsdesk.sinks.base import chunked
from newsdesk.sinks.supabase import SupabaseSink, generate_slug

__all__ = ["AirtableSink", "SupabaseSink", "chunked", "generate_slug"]
