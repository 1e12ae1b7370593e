"""
FeedItem model: one article URL discovered in a feed or submitted by hand.
"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator


class FeedItem(BaseModel):
    """
    Input to the pipeline.

    `attachments` holds pre-extracted image URLs; the first one is used as
    the featured image.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    url: HttpUrl
    title: str = ""
    attachments: List[str] = Field(default_factory=list)
    published: Optional[datetime] = None
    source: str = ""

    @field_validator("attachments")
    @classmethod
    def normalize_attachments(cls, v: List[str]) -> List[str]:
        """Drop empty and duplicate attachment URLs, keeping order."""
        seen = set()
        result = []
        for url in v:
            url = url.strip()
            if url and url not in seen:
                seen.add(url)
                result.append(url)
        return result

    @field_validator("published", mode="before")
    @classmethod
    def ensure_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def url_str(self) -> str:
        return str(self.url)
