"""
Airtable sink for newsdesk.

Records are created through the Airtable REST API in batches of at most ten,
which is the per-request limit of the API.
"""
from typing import List, Sequence
from urllib.parse import quote

import httpx
import structlog

from newsdesk.config import AirtableConfig, SectionConfig
from newsdesk.errors import SinkError
from newsdesk.fetcher.http_client import AsyncHTTPClient
from newsdesk.models.record import ArticleRecord
from newsdesk.sinks.base import chunked, sink_error_from

logger = structlog.get_logger()


class AirtableSink:
    """Creates article records in a section's Airtable table."""

    name = "airtable"

    def __init__(self, config: AirtableConfig, client: AsyncHTTPClient):
        """
        Initialize the sink.

        Args:
            config: Airtable configuration (base id, token, batch size)
            client: Shared HTTP client
        """
        if not config.base_id or not config.token:
            raise ValueError("Airtable base_id and token are required")
        self.config = config
        self.client = client

    def table_url(self, table_name: str) -> str:
        return f"{self.config.api_url.rstrip('/')}/{self.config.base_id}/{quote(table_name, safe='')}"

    @property
    def _headers(self):
        return {
            "Authorization": f"Bearer {self.config.token.get_secret_value()}",
            "Content-Type": "application/json",
        }

    async def insert_records(self, records: Sequence[ArticleRecord], section: SectionConfig) -> List[str]:
        """
        Create records in the section's table.

        Args:
            records: Records to create
            section: Target section; its id is written to the `section` field

        Returns:
            List[str]: Airtable record ids, in input order

        Raises:
            SinkError: If any request fails
        """
        if not records:
            return []

        url = self.table_url(section.table_name)
        created_ids: List[str] = []
        for batch in chunked(list(records), self.config.batch_size):
            payload = {
                "records": [
                    {"fields": record.model_copy(update={"section": section.id}).to_fields()}
                    for record in batch
                ],
                "typecast": True,
            }
            try:
                # Record creation is not idempotent, so a timed-out batch is never resent
                response = await self.client.post(url, json=payload, headers=self._headers, with_retry=False)
                data = response.json()
            except httpx.HTTPError as e:
                logger.error("Airtable insert failed", section=section.id, error=str(e))
                raise sink_error_from(self.name, e) from e
            except ValueError as e:
                raise SinkError(self.name, f"Invalid JSON response: {e}") from e

            batch_ids = [created.get("id") for created in data.get("records", [])]
            created_ids.extend(record_id for record_id in batch_ids if record_id)
            logger.info("Inserted records into Airtable", section=section.id, count=len(batch_ids))

        return created_ids
