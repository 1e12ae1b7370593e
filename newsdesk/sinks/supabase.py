"""
Supabase sink for newsdesk.

Articles are upserted into the Supabase `articles` table through its
PostgREST endpoint, keyed on the Airtable record id so that re-publishing a
record updates the existing row.
"""
import json
import re
import unicodedata
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
import structlog

from newsdesk.config import SectionConfig, SupabaseConfig
from newsdesk.errors import SinkError
from newsdesk.fetcher.http_client import AsyncHTTPClient
from newsdesk.models.embed import EmbedPlatform
from newsdesk.models.record import ArticleRecord
from newsdesk.sinks.base import sink_error_from

logger = structlog.get_logger()


def generate_slug(title: str) -> str:
    """
    URL slug for a title: lower case, accents removed, words joined by hyphens.

    >>> generate_slug("Economía: la inflación bajó")
    'economia-la-inflacion-bajo'
    """
    normalized = unicodedata.normalize("NFD", title.lower())
    without_accents = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    slug = re.sub(r"[^\w\s-]", "", without_accents, flags=re.ASCII)
    slug = re.sub(r"\s+", "-", slug.strip())
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


class SupabaseSink:
    """Publishes article records to Supabase."""

    name = "supabase"

    def __init__(self, config: SupabaseConfig, client: AsyncHTTPClient):
        if not config.url or not config.service_key:
            raise ValueError("Supabase url and service_key are required")
        self.config = config
        self.client = client

    @property
    def table_url(self) -> str:
        return f"{self.config.url.rstrip('/')}/rest/v1/{self.config.table}"

    @property
    def _headers(self) -> Dict[str, str]:
        key = self.config.service_key.get_secret_value()
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            "Prefer": "resolution=merge-duplicates,return=representation",
        }

    def build_row(
        self,
        record: ArticleRecord,
        airtable_id: str,
        section: SectionConfig,
        published: bool = False,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Map a record onto the `articles` table schema.

        Args:
            record: Article record
            airtable_id: Id of the corresponding Airtable record
            section: Section the article belongs to
            published: Publish immediately instead of saving as draft
            now: Timestamp to use (defaults to the current UTC time)

        Returns:
            Dict[str, Any]: Row ready for upsert
        """
        timestamp = (now or datetime.now(timezone.utc)).isoformat()
        social_media = {
            platform.value: record.embed_for(platform) or None
            for platform in EmbedPlatform.ordered()
        }
        image_url = record.img_url.split(",")[0].strip() if record.img_url else ""
        return {
            "title": record.title,
            "content": record.article,
            "excerpt": record.excerpt,
            "overline": record.overline,
            "section_id": section.id,
            "section_name": section.name,
            "slug": generate_slug(record.title),
            "image_url": image_url,
            "source_url": record.url,
            "social_media": json.dumps(social_media, ensure_ascii=False),
            "airtable_id": airtable_id,
            "created_at": timestamp,
            "updated_at": timestamp,
            "status": "published" if published else "draft",
            "published_at": timestamp if published else None,
        }

    async def publish_article(
        self,
        record: ArticleRecord,
        airtable_id: str,
        section: SectionConfig,
        published: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """
        Upsert an article row.

        Returns:
            Dict[str, Any]: The stored row as returned by PostgREST

        Raises:
            SinkError: If the request fails or returns no row
        """
        if published is None:
            published = self.config.publish_immediately
        row = self.build_row(record, airtable_id, section, published=published)

        try:
            response = await self.client.post(
                self.table_url,
                json=row,
                headers=self._headers,
                params={"on_conflict": "airtable_id"},
            )
            data = response.json()
        except httpx.HTTPError as e:
            logger.error("Supabase upsert failed", airtable_id=airtable_id, error=str(e))
            raise sink_error_from(self.name, e) from e
        except ValueError as e:
            raise SinkError(self.name, f"Invalid JSON response: {e}") from e

        if not isinstance(data, list) or not data:
            raise SinkError(self.name, "Upsert returned no rows")

        stored = data[0]
        logger.info(
            "Published article to Supabase",
            airtable_id=airtable_id,
            article_id=stored.get("id"),
            status=stored.get("status", row["status"]),
        )
        return stored
