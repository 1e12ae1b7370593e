"""
Batch driver for newsdesk.

This module contains the per-article pipeline (fetch, extract, quality gate,
AI rewrite, structure, record) and the batch and section runners built on
top of it. Articles in a batch run concurrently under a semaphore; a failing
article is recorded and skipped without affecting its siblings.
"""
import asyncio
from functools import partial
from typing import List, Optional, Sequence, Tuple

import structlog
from prometheus_client import Counter
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from newsdesk.config import SectionConfig
from newsdesk.context import PipelineContext
from newsdesk.errors import GenerationError, SinkError
from newsdesk.extractor.article_parser import check_text_quality, extract_text
from newsdesk.extractor.embeds import extract_embeds
from newsdesk.extractor.image_extractor import (
    extract_article_images,
    extract_featured_image,
    images_from_attachments,
)
from newsdesk.extractor.metadata import extract_metadata
from newsdesk.feeds.sources import fetch_feed_items
from newsdesk.fetcher.http_client import fetch_document
from newsdesk.models.content_block import StructuredArticle
from newsdesk.models.document import RawDocument
from newsdesk.models.embed import EmbedSet
from newsdesk.models.feed_item import FeedItem
from newsdesk.models.image import ImageRef
from newsdesk.models.metadata import ArticleMetadata
from newsdesk.models.record import ArticleRecord
from newsdesk.structure.builder import structure_article

# Set up structured logger
logger = structlog.get_logger()

# Define metrics
ARTICLES_PROCESSED_TOTAL = Counter('articles_processed_total', 'Total number of articles processed', ['status'])
ARTICLE_FAILURES_TOTAL = Counter('article_failures_total', 'Total number of article failures', ['error_type'])


class ProcessedArticle(BaseModel):
    """An article that made it through the whole pipeline."""
    model_config = ConfigDict(frozen=True)

    item: FeedItem
    metadata: ArticleMetadata
    embeds: EmbedSet
    article: StructuredArticle
    record: ArticleRecord


class FailedItem(BaseModel):
    """An input that was skipped, with the reason."""
    model_config = ConfigDict(frozen=True)

    url: str
    error_type: str
    reason: str


class BatchResult(BaseModel):
    """Outcome of a batch: successes and per-item failures."""
    model_config = ConfigDict(frozen=True)

    succeeded: List[ProcessedArticle] = Field(default_factory=list)
    failed: List[FailedItem] = Field(default_factory=list)
    record_ids: List[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


async def _extract_images(
    document: RawDocument,
    item: FeedItem,
    context: PipelineContext,
) -> List[ImageRef]:
    loop = asyncio.get_running_loop()
    limit = context.settings.extraction.max_article_images
    if len(item.attachments) > 1:
        return images_from_attachments(item.attachments, limit=limit)
    return await loop.run_in_executor(
        context.thread_pool,
        partial(
            extract_article_images,
            document,
            limit=limit,
            min_paragraph_length=context.settings.extraction.min_paragraph_length,
        ),
    )


async def _featured_image(document: RawDocument, item: FeedItem, context: PipelineContext) -> str:
    if item.attachments:
        return item.attachments[0]
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(context.thread_pool, extract_featured_image, document)


async def process_article(
    item: FeedItem,
    context: PipelineContext,
    section_id: str = "",
) -> ProcessedArticle:
    """
    Run one article through the pipeline.

    Args:
        item: Feed item to process
        context: Pipeline context
        section_id: Section written into the record

    Returns:
        ProcessedArticle: Structured article and its record

    Raises:
        FetchError: If the page cannot be fetched
        ExtractionInsufficient: If the extracted text is too short
        GenerationError: If every AI provider fails to rewrite the body
        StructureInputInvalid: If the body is empty after cleaning
    """
    settings = context.settings
    url = item.url_str
    logger.info("Processing article", url=url, section=section_id)

    document = await fetch_document(url, timeout=settings.fetcher.timeout_seconds, client=context.http_client)

    # Extractors are independent and CPU-bound
    loop = asyncio.get_running_loop()
    pool = context.thread_pool
    text, metadata, embeds, images, featured_image_url = await asyncio.gather(
        loop.run_in_executor(pool, partial(extract_text, document, settings.extraction.min_paragraph_length)),
        loop.run_in_executor(pool, partial(extract_metadata, document, fallback_title=item.title)),
        loop.run_in_executor(pool, extract_embeds, document),
        _extract_images(document, item, context),
        _featured_image(document, item, context),
    )

    check_text_quality(text, url, settings.extraction.min_text_length)

    body = text
    if context.rewriter is not None and context.rewriter.enabled:
        body = await context.rewriter.rewrite_text(text, images)
        try:
            generated = await context.rewriter.generate_metadata(text)
            metadata = generated.merge_into(metadata)
        except GenerationError as e:
            logger.warning("AI metadata generation failed, using extracted metadata", url=url, error=str(e))

    article = structure_article(
        metadata,
        body,
        images=images,
        embeds=embeds,
        featured_image_url=featured_image_url,
        source_url=url,
    )
    record = ArticleRecord.from_article(
        article,
        metadata_overline=metadata.overline,
        metadata_excerpt=metadata.summary_text,
        embeds=embeds,
        featured_image_url=featured_image_url,
        images=images,
        body_markdown=body,
        section=section_id,
    )

    logger.info(
        "Article processed",
        url=url,
        title=article.title,
        blocks=len(article.blocks),
        **embeds.summary(),
    )
    return ProcessedArticle(item=item, metadata=metadata, embeds=embeds, article=article, record=record)


async def process_batch(
    items: Sequence[FeedItem],
    context: PipelineContext,
    section_id: str = "",
) -> BatchResult:
    """
    Process items concurrently, collecting successes and failures.

    Concurrency is bounded by `batch.max_concurrent_articles`. A failing item
    never cancels the others.

    Args:
        items: Feed items
        context: Pipeline context
        section_id: Section written into each record

    Returns:
        BatchResult: Successes in input order and one FailedItem per failure
    """
    if not items:
        return BatchResult()

    semaphore = asyncio.Semaphore(context.settings.batch.max_concurrent_articles)

    async def _bounded(item: FeedItem) -> ProcessedArticle:
        async with semaphore:
            return await process_article(item, context, section_id)

    # Use return_exceptions=True so one failure doesn't cancel the batch
    results = await asyncio.gather(*[_bounded(item) for item in items], return_exceptions=True)

    succeeded: List[ProcessedArticle] = []
    failed: List[FailedItem] = []
    for item, result in zip(items, results):
        if isinstance(result, Exception):
            error_type = type(result).__name__
            failed.append(FailedItem(url=item.url_str, error_type=error_type, reason=str(result)))
            logger.warning("Skipping article", url=item.url_str, error_type=error_type, reason=str(result))
            ARTICLE_FAILURES_TOTAL.labels(error_type=error_type).inc()
            ARTICLES_PROCESSED_TOTAL.labels(status="failed").inc()
        elif isinstance(result, BaseException):
            raise result
        else:
            succeeded.append(result)
            ARTICLES_PROCESSED_TOTAL.labels(status="success").inc()

    logger.info(
        "Batch processing complete",
        section=section_id,
        succeeded=len(succeeded),
        failed=len(failed),
    )
    return BatchResult(succeeded=succeeded, failed=failed)


def items_from_urls(urls: Sequence[str]) -> Tuple[List[FeedItem], List[FailedItem]]:
    """
    Build feed items for manually submitted URLs.

    Returns:
        Tuple[List[FeedItem], List[FailedItem]]: (valid items, FailedItems for URLs that do not validate)
    """
    items: List[FeedItem] = []
    failed: List[FailedItem] = []
    for url in urls:
        try:
            items.append(FeedItem(url=url, source="manual"))
        except ValidationError as e:
            failed.append(FailedItem(url=url, error_type="FetchError", reason=f"Invalid URL: {e.errors()[0]['msg']}"))
    return items, failed


async def store_batch(
    result: BatchResult,
    section: SectionConfig,
    context: PipelineContext,
) -> BatchResult:
    """
    Send successful records to Airtable, then Supabase when enabled.

    Returns:
        BatchResult: The result with the created Airtable record ids

    Raises:
        SinkError: If the Airtable insert fails
    """
    if not result.succeeded:
        return result
    if context.airtable is None:
        logger.warning("No record store configured, records not stored", section=section.id)
        return result

    records = [processed.record for processed in result.succeeded]
    record_ids = await context.airtable.insert_records(records, section)

    if context.supabase is not None:
        for record, airtable_id in zip(records, record_ids):
            try:
                await context.supabase.publish_article(record, airtable_id, section)
            except SinkError as e:
                logger.error("Supabase publish failed", airtable_id=airtable_id, url=record.url, error=str(e))

    await context.state.mark_processed(section.id, [processed.item.url_str for processed in result.succeeded])
    return result.model_copy(update={"record_ids": record_ids})


async def run_section(
    section: SectionConfig,
    context: PipelineContext,
    dry_run: bool = False,
    limit: Optional[int] = None,
) -> BatchResult:
    """
    Fetch a section's feed, process new items and store the results.

    Args:
        section: Section to run
        context: Pipeline context
        dry_run: Process without writing to sinks or state
        limit: Maximum number of new items (defaults to `batch.max_items_per_feed`)

    Returns:
        BatchResult: Outcome of the run
    """
    if not section.feed_url:
        logger.warning("Section has no feed URL, skipping", section=section.id)
        return BatchResult()

    logger.info("Processing section", section=section.id, name=section.name)
    items = await fetch_feed_items(str(section.feed_url), context.http_client, source=section.name)

    processed_urls = await context.state.processed_urls(section.id)
    fresh_items = [item for item in items if item.url_str not in processed_urls]
    new_items = fresh_items[:limit or context.settings.batch.max_items_per_feed]
    logger.info(
        "Found new feed items",
        section=section.id,
        total=len(items),
        new=len(new_items),
        already_processed=len(items) - len(fresh_items),
    )

    result = await process_batch(new_items, context, section.id)
    if dry_run:
        return result
    return await store_batch(result, section, context)
