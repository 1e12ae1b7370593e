"""
Processed-URL state for newsdesk sections.

Each section keeps a JSON file listing the article URLs already sent to the
record store, so that repeated runs over the same feed only pick up new
items. Writes go to a temporary file that is then renamed over the old one.
"""
import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Set

import aiofiles
import aiofiles.os
import structlog

from newsdesk.config import StateConfig

# Set up structured logger
logger = structlog.get_logger()


class SectionStateStore:
    """JSON-file store of processed article URLs, one file per section."""

    def __init__(self, config: StateConfig):
        self.enabled = config.enabled
        self.max_urls = config.max_urls_per_section
        self.state_dir = Path(config.state_dir)
        self._locks: Dict[str, asyncio.Lock] = {}

    def _path(self, section_id: str) -> Path:
        safe_id = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in section_id)
        return self.state_dir / f"{safe_id}.json"

    def _lock(self, section_id: str) -> asyncio.Lock:
        if section_id not in self._locks:
            self._locks[section_id] = asyncio.Lock()
        return self._locks[section_id]

    async def _read(self, section_id: str) -> List[str]:
        path = self._path(section_id)
        if not path.exists():
            return []
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                data = json.loads(await f.read())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Unreadable section state, starting fresh", section=section_id, error=str(e))
            return []
        urls = data.get("processed_urls", []) if isinstance(data, dict) else []
        return [url for url in urls if isinstance(url, str)]

    async def processed_urls(self, section_id: str) -> Set[str]:
        """URLs already processed for a section."""
        if not self.enabled:
            return set()
        return set(await self._read(section_id))

    async def mark_processed(self, section_id: str, urls: Iterable[str]) -> None:
        """
        Add URLs to a section's processed list.

        The list keeps the most recent `max_urls_per_section` entries.
        """
        if not self.enabled:
            return
        new_urls = [url for url in urls if url]
        if not new_urls:
            return

        async with self._lock(section_id):
            existing = await self._read(section_id)
            merged = list(existing)
            seen = set(existing)
            for url in new_urls:
                if url not in seen:
                    seen.add(url)
                    merged.append(url)
            merged = merged[-self.max_urls:]

            self.state_dir.mkdir(parents=True, exist_ok=True)
            path = self._path(section_id)
            tmp_path = path.with_suffix(".json.tmp")
            payload = {
                "processed_urls": merged,
                "last_run": datetime.now(timezone.utc).isoformat(),
            }
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(payload, ensure_ascii=False, indent=2))
            await aiofiles.os.replace(tmp_path, path)

        logger.debug("Updated section state", section=section_id, added=len(new_urls), total=len(merged))
