"""
RawDocument model: the HTML of a single fetched page.
"""
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class RawDocument(BaseModel):
    """
    HTML string plus the URL it came from.

    Created once per fetch and discarded after extraction.
    """
    model_config = ConfigDict(frozen=True)

    url: str
    html: str
    status_code: int = 200
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def __len__(self) -> int:
        return len(self.html)
