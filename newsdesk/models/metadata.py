"""
ArticleMetadata model for title, bajada, volanta and related fields.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ArticleMetadata(BaseModel):
    """
    Metadata derived once per document.

    String fields default to "" which callers must read as "unknown".
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    title: str = ""
    summary_text: str = ""  # bajada
    overline: str = ""  # volanta
    publish_date: Optional[datetime] = None
    source_name: str = ""

    @field_validator("publish_date", mode="before")
    @classmethod
    def ensure_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Ensure the publish date is timezone aware (UTC when unspecified)."""
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def is_complete(self) -> bool:
        return bool(self.title and self.summary_text and self.overline)

    @property
    def publish_date_iso(self) -> str:
        """ISO-8601 instant in UTC, or "" when unknown."""
        if self.publish_date is None:
            return ""
        return self.publish_date.astimezone(timezone.utc).isoformat()
