import json
import threading
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
import pytest_asyncio

from newsdesk.config import AirtableConfig, RetryPolicy
from newsdesk.context import PipelineContext
from newsdesk.errors import GenerationError
from newsdesk.extractor.image_extractor import extract_featured_image
from newsdesk.fetcher.http_client import AsyncHTTPClient
from newsdesk.models.embed import EmbedPlatform
from newsdesk.models.feed_item import FeedItem
from newsdesk.pipeline import items_from_urls, process_article, process_batch, run_section
from newsdesk.rewrite import ArticleRewriter


ARTICLE_URL = "https://www.diario.com.ar/economia/nota-1"
SHORT_URL = "https://www.diario.com.ar/corta"
MISSING_URL = "https://www.diario.com.ar/no-existe"
FEED_URL = "https://rss.example.com/agro.json"
AIRTABLE_URL = "https://api.airtable.com/v0/appTEST/Agro"

# Exactly 30 characters of body text
SHORT_HTML = "<html><body><article><p>Nota breve sin contenido útil.</p></article></body></html>"

FEED = {
    "version": "https://jsonfeed.org/version/1.1",
    "title": "Agro",
    "items": [
        {"id": "1", "url": ARTICLE_URL, "title": "Cosecha récord"},
        {"id": "2", "url": SHORT_URL, "title": "Nota corta"},
    ],
}


class FakeSite:
    """Mock transport handler serving articles, the feed and the Airtable API."""

    def __init__(self, article_html: str):
        self.article_html = article_html
        self.airtable_payloads = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url == ARTICLE_URL:
            return httpx.Response(200, text=self.article_html)
        if url == SHORT_URL:
            return httpx.Response(200, text=SHORT_HTML)
        if url == FEED_URL:
            return httpx.Response(200, json=FEED)
        if url == AIRTABLE_URL:
            payload = json.loads(request.content)
            self.airtable_payloads.append(payload)
            return httpx.Response(200, json={
                "records": [{"id": f"rec{i}"} for i in range(len(payload["records"]))],
            })
        return httpx.Response(404)


def fake_rewriter(*responses) -> ArticleRewriter:
    client = MagicMock()
    client.name = "gemini"
    client.generate = AsyncMock(side_effect=list(responses))
    client.close = AsyncMock()
    return ArticleRewriter([client], RetryPolicy(call_delay_seconds=0, base_delay_seconds=0, jitter_seconds=0))


@pytest.fixture
def site(article_html):
    return FakeSite(article_html)


@pytest_asyncio.fixture
async def http_client(site):
    client = AsyncHTTPClient(transport=httpx.MockTransport(site), retry_attempts=1)
    yield client
    await client.close()


@pytest.mark.asyncio
async def test_process_article_without_ai(settings, http_client):
    async with PipelineContext(settings, http_client=http_client) as context:
        processed = await process_article(FeedItem(url=ARTICLE_URL), context, section_id="agro")

    assert processed.article.block_types() == [
        "volanta",
        "title",
        "bajada",
        "featuredImage",
        "textSection",
        "inArticleImage",
        "textSection",
        "textSection",
        "embed",
        "sourceAttribution",
    ]
    assert processed.article.title == "El campo anticipa una cosecha récord"
    assert processed.embeds.get(EmbedPlatform.INSTAGRAM) is not None

    fields = processed.record.to_fields()
    assert fields["section"] == "agro"
    assert fields["imgUrl"] == "https://www.diario.com.ar/img/portada.jpg"
    assert fields["overline"] == "Agro"
    assert fields["url"] == ARTICLE_URL
    assert "ig-post" in fields


@pytest.mark.asyncio
async def test_feed_attachments_take_precedence(settings, http_client):
    item = FeedItem(
        url=ARTICLE_URL,
        attachments=["https://cdn.example.com/portada.jpg", "https://cdn.example.com/extra.jpg"],
    )
    async with PipelineContext(settings, http_client=http_client) as context:
        processed = await process_article(item, context)

    assert processed.record.img_url == "https://cdn.example.com/portada.jpg"
    assert [image.url for image in processed.article.images()] == ["https://cdn.example.com/extra.jpg"]


@pytest.mark.asyncio
async def test_featured_image_is_extracted_in_thread_pool(settings, http_client):
    threads = []

    def recording_featured_image(document):
        threads.append(threading.current_thread())
        return extract_featured_image(document)

    with patch("newsdesk.pipeline.extract_featured_image", side_effect=recording_featured_image):
        async with PipelineContext(settings, http_client=http_client) as context:
            processed = await process_article(FeedItem(url=ARTICLE_URL), context)

    assert threads and threads[0] is not threading.main_thread()
    assert processed.record.img_url == "https://www.diario.com.ar/img/portada.jpg"


@pytest.mark.asyncio
async def test_batch_isolates_failures(settings, http_client):
    items = [FeedItem(url=SHORT_URL), FeedItem(url=ARTICLE_URL), FeedItem(url=MISSING_URL)]

    async with PipelineContext(settings, http_client=http_client) as context:
        result = await process_batch(items, context, "agro")

    assert [processed.item.url_str for processed in result.succeeded] == [ARTICLE_URL]
    failures = {failed.url: failed for failed in result.failed}
    assert failures[SHORT_URL].error_type == "ExtractionInsufficient"
    assert "30 chars" in failures[SHORT_URL].reason
    assert failures[MISSING_URL].error_type == "FetchError"
    assert "HTTP 404" in failures[MISSING_URL].reason
    assert result.total == 3


@pytest.mark.asyncio
async def test_empty_batch(settings, http_client):
    async with PipelineContext(settings, http_client=http_client) as context:
        result = await process_batch([], context)

    assert result.total == 0


@pytest.mark.asyncio
async def test_ai_rewrite_and_metadata(settings, http_client):
    rewriter = fake_rewriter(
        "## Contexto\n\nPárrafo reescrito con *cursiva*.\n\nOtro párrafo reescrito con **negrita**.",
        '{"title": "Título generado", "bajada": "Bajada generada", "volanta": "Volanta generada"}',
    )
    async with PipelineContext(settings, http_client=http_client, rewriter=rewriter) as context:
        processed = await process_article(FeedItem(url=ARTICLE_URL), context)

    assert processed.article.title == "Título generado"
    assert processed.metadata.summary_text == "Bajada generada"
    assert processed.record.overline == "Volanta generada"
    assert processed.record.article.startswith("## Contexto")
    assert processed.article.text_sections()[0].html == "<h2>Contexto</h2>"


@pytest.mark.asyncio
async def test_metadata_failure_keeps_extracted_metadata(settings, http_client):
    rewriter = fake_rewriter("Párrafo reescrito de la nota.", "no es json")
    async with PipelineContext(settings, http_client=http_client, rewriter=rewriter) as context:
        processed = await process_article(FeedItem(url=ARTICLE_URL), context)

    assert processed.article.title == "El campo anticipa una cosecha récord"
    assert processed.record.article == "Párrafo reescrito de la nota."


@pytest.mark.asyncio
async def test_rewrite_failure_skips_article(settings, http_client):
    rewriter = fake_rewriter(GenerationError("caído"))
    async with PipelineContext(settings, http_client=http_client, rewriter=rewriter) as context:
        result = await process_batch([FeedItem(url=ARTICLE_URL)], context)

    assert result.succeeded == []
    assert result.failed[0].error_type == "GenerationError"


@pytest.mark.asyncio
async def test_run_section_stores_and_skips_processed(settings, section, site, http_client):
    settings = settings.model_copy(update={"airtable": AirtableConfig(base_id="appTEST", token="pat")})

    async with PipelineContext(settings, http_client=http_client) as context:
        first = await run_section(section, context)
        second = await run_section(section, context)

        processed = await context.state.processed_urls("agro")

    assert first.record_ids == ["rec0"]
    assert [failed.url for failed in first.failed] == [SHORT_URL]
    assert len(site.airtable_payloads) == 1
    assert site.airtable_payloads[0]["records"][0]["fields"]["section"] == "agro"

    # Only the article that failed is retried
    assert second.succeeded == []
    assert [failed.url for failed in second.failed] == [SHORT_URL]
    assert processed == {ARTICLE_URL}


@pytest.mark.asyncio
async def test_run_section_dry_run_writes_nothing(settings, section, site, http_client):
    settings = settings.model_copy(update={"airtable": AirtableConfig(base_id="appTEST", token="pat")})

    async with PipelineContext(settings, http_client=http_client, enable_sinks=False) as context:
        result = await run_section(section, context, dry_run=True, limit=1)
        processed = await context.state.processed_urls("agro")

    assert [processed.item.url_str for processed in result.succeeded] == [ARTICLE_URL]
    assert result.failed == []
    assert site.airtable_payloads == []
    assert processed == set()


@pytest.mark.asyncio
async def test_section_without_feed(settings, section, http_client):
    async with PipelineContext(settings, http_client=http_client) as context:
        result = await run_section(section.model_copy(update={"feed_url": None}), context)

    assert result.total == 0


def test_items_from_urls():
    items, failed = items_from_urls([ARTICLE_URL, "no es una url"])

    assert [item.url_str for item in items] == [ARTICLE_URL]
    assert failed[0].url == "no es una url"
    assert failed[0].error_type == "FetchError"
