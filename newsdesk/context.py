"""
Pipeline context management.
"""
from concurrent.futures import ThreadPoolExecutor
from contextlib import AsyncExitStack
from typing import Optional

import structlog

from newsdesk.config import Settings
from newsdesk.fetcher.http_client import AsyncHTTPClient
from newsdesk.llm import build_generation_clients
from newsdesk.rewrite import ArticleRewriter
from newsdesk.sinks.airtable import AirtableSink
from newsdesk.sinks.supabase import SupabaseSink
from newsdesk.state import SectionStateStore

logger = structlog.get_logger()


class PipelineContext:
    """
    Holds the shared resources of a pipeline run.

    This class manages the lifecycle of the HTTP client, the extraction
    thread pool, the AI rewriter and the sinks. Use it as an async context
    manager, or call `initialize()` and `shutdown()` explicitly.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[AsyncHTTPClient] = None,
        rewriter: Optional[ArticleRewriter] = None,
        enable_sinks: bool = True,
    ):
        self.settings = settings
        self.exit_stack = AsyncExitStack()
        self.thread_pool: Optional[ThreadPoolExecutor] = None
        self.http_client = http_client
        self.rewriter = rewriter
        self.enable_sinks = enable_sinks
        self.airtable: Optional[AirtableSink] = None
        self.supabase: Optional[SupabaseSink] = None
        self.state = SectionStateStore(settings.state)

    async def __aenter__(self) -> "PipelineContext":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.shutdown()

    async def initialize(self) -> None:
        """Initialize all components and resources."""
        logger.info("Initializing pipeline context")

        # Extraction is CPU-bound
        self.thread_pool = ThreadPoolExecutor(
            max_workers=self.settings.batch.max_concurrent_articles,
            thread_name_prefix="newsdesk-worker",
        )

        self._init_http_client()
        self._init_rewriter()
        if self.enable_sinks:
            self._init_sinks()

        logger.info(
            "Pipeline context initialized",
            ai_enabled=self.rewriter.enabled,
            airtable=self.airtable is not None,
            supabase=self.supabase is not None,
        )

    def _init_http_client(self) -> None:
        if self.http_client is None:
            fetcher = self.settings.fetcher
            self.http_client = AsyncHTTPClient(
                user_agent=fetcher.user_agent,
                timeout=fetcher.feed_timeout_seconds,
                retry_attempts=fetcher.feed_retry_attempts,
            )
            self.exit_stack.push_async_callback(self.http_client.close)

    def _init_rewriter(self) -> None:
        if self.rewriter is None:
            clients = build_generation_clients(self.settings.llm_providers)
            self.rewriter = ArticleRewriter(clients, self.settings.retry)
            self.exit_stack.push_async_callback(self.rewriter.close)
            logger.info(
                "Generation clients initialized",
                providers=[client.name for client in clients],
            )

    def _init_sinks(self) -> None:
        if self.settings.airtable.is_configured:
            self.airtable = AirtableSink(self.settings.airtable, self.http_client)
        else:
            logger.warning("Airtable sink not configured")

        if self.settings.supabase.is_configured:
            self.supabase = SupabaseSink(self.settings.supabase, self.http_client)

    async def shutdown(self) -> None:
        """Gracefully shut down all components and resources."""
        logger.info("Shutting down pipeline context")

        await self.exit_stack.aclose()

        if self.thread_pool:
            self.thread_pool.shutdown(wait=True, cancel_futures=True)
            self.thread_pool = None

        logger.info("Pipeline context shut down")
