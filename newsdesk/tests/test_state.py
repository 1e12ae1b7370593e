import json

import pytest

from newsdesk.config import StateConfig
from newsdesk.state import SectionStateStore


@pytest.fixture
def store(tmp_path) -> SectionStateStore:
    return SectionStateStore(StateConfig(state_dir=str(tmp_path), max_urls_per_section=3))


@pytest.mark.asyncio
async def test_unknown_section_has_no_urls(store):
    assert await store.processed_urls("agro") == set()


@pytest.mark.asyncio
async def test_mark_processed_round_trip(store, tmp_path):
    await store.mark_processed("agro", ["https://diario.com.ar/a", "https://diario.com.ar/b"])
    await store.mark_processed("agro", ["https://diario.com.ar/b", "https://diario.com.ar/c"])

    assert await store.processed_urls("agro") == {
        "https://diario.com.ar/a",
        "https://diario.com.ar/b",
        "https://diario.com.ar/c",
    }
    data = json.loads((tmp_path / "agro.json").read_text(encoding="utf-8"))
    assert data["processed_urls"] == ["https://diario.com.ar/a", "https://diario.com.ar/b", "https://diario.com.ar/c"]
    assert "last_run" in data


@pytest.mark.asyncio
async def test_oldest_urls_are_dropped(store):
    await store.mark_processed("agro", [f"https://diario.com.ar/{i}" for i in range(5)])

    assert await store.processed_urls("agro") == {
        "https://diario.com.ar/2",
        "https://diario.com.ar/3",
        "https://diario.com.ar/4",
    }


@pytest.mark.asyncio
async def test_sections_are_separate(store):
    await store.mark_processed("agro", ["https://diario.com.ar/a"])

    assert await store.processed_urls("deportes") == set()


@pytest.mark.asyncio
async def test_corrupt_state_starts_fresh(store, tmp_path):
    (tmp_path / "agro.json").write_text("{no json", encoding="utf-8")

    assert await store.processed_urls("agro") == set()


@pytest.mark.asyncio
async def test_disabled_store_does_nothing(tmp_path):
    store = SectionStateStore(StateConfig(enabled=False, state_dir=str(tmp_path / "state")))

    await store.mark_processed("agro", ["https://diario.com.ar/a"])

    assert await store.processed_urls("agro") == set()
    assert not (tmp_path / "state").exists()
