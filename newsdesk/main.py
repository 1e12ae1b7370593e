#!/usr/bin/env python3
"""
newsdesk - Entry Point

This module is the command line entry point. It loads settings, sets up
logging, runs the selected sections (or manually submitted URLs) through the
pipeline once and exits.
"""
import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

import structlog
from prometheus_client import start_http_server

from newsdesk.config import LogLevel, SectionConfig, Settings, load_settings
from newsdesk.context import PipelineContext
from newsdesk.errors import NewsdeskError
from newsdesk.pipeline import (
    BatchResult,
    items_from_urls,
    process_batch,
    run_section,
    store_batch,
)

# Set up structured logger
logger = structlog.get_logger()


def setup_logging(settings: Settings) -> None:
    """Set up structured logging based on configuration."""
    log_level = settings.metrics.log_level.value

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if settings.metrics.structured_logging
            else structlog.dev.ConsoleRenderer()
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Log to stderr so --dry-run output on stdout stays parseable
    numeric_level = getattr(logging, log_level, logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)
    logging.getLogger().setLevel(numeric_level)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))

    logger.info("Logging initialized", level=log_level)


def dry_run_report(results: List[BatchResult]) -> str:
    """JSON report of processed articles and skipped items."""
    report = {"articles": [], "failed": []}
    for result in results:
        for processed in result.succeeded:
            report["articles"].append({
                "url": processed.item.url_str,
                "record": processed.record.to_fields(),
                "blocks": processed.article.model_dump(mode="json")["blocks"],
            })
        report["failed"].extend(failed.model_dump() for failed in result.failed)
    return json.dumps(report, ensure_ascii=False, indent=2)


def select_sections(settings: Settings, section_ids: Optional[List[str]], run_all: bool) -> List[SectionConfig]:
    """
    Resolve the sections to run.

    Raises:
        ValueError: If a section id is unknown
    """
    if run_all:
        return sorted(
            (section for section in settings.sections if section.enabled),
            key=lambda section: section.priority,
        )
    sections = []
    for section_id in section_ids or []:
        section = settings.get_section(section_id)
        if section is None:
            raise ValueError(f"Unknown section: {section_id}")
        sections.append(section)
    return sections


async def run_urls(
    urls: List[str],
    section: Optional[SectionConfig],
    context: PipelineContext,
    dry_run: bool,
) -> BatchResult:
    """Process manually submitted URLs, storing them under `section` when given."""
    items, invalid = items_from_urls(urls)
    result = await process_batch(items, context, section.id if section else "")
    result = result.model_copy(update={"failed": invalid + result.failed})
    if dry_run:
        return result
    if section is None:
        logger.warning("No section given for submitted URLs, records not stored")
        return result
    return await store_batch(result, section, context)


async def run(settings: Settings, args: argparse.Namespace, sections: List[SectionConfig]) -> int:
    """Run the pipeline once and return the process exit code."""
    results: List[BatchResult] = []
    section_failures = 0

    async with PipelineContext(settings, enable_sinks=not args.dry_run) as context:
        if settings.metrics.prometheus_enabled:
            start_http_server(settings.metrics.prometheus_port)
            logger.info("Prometheus metrics server started", port=settings.metrics.prometheus_port)

        if args.url:
            section = sections[0] if sections else None
            try:
                results.append(await run_urls(args.url, section, context, args.dry_run))
            except NewsdeskError as e:
                logger.error("Manual submission failed", error=str(e))
                section_failures += 1
        else:
            for section in sections:
                try:
                    results.append(await run_section(section, context, dry_run=args.dry_run, limit=args.limit))
                except NewsdeskError as e:
                    logger.error("Section run failed", section=section.id, error=str(e))
                    section_failures += 1

    if args.dry_run:
        print(dry_run_report(results))

    logger.info(
        "Run complete",
        sections=len(sections),
        succeeded=sum(len(result.succeeded) for result in results),
        failed=sum(len(result.failed) for result in results),
        section_failures=section_failures,
    )
    return 1 if section_failures else 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="newsdesk - Fetch, rewrite and structure news articles into the newsroom record store"
    )

    parser.add_argument(
        "--section",
        action="append",
        default=None,
        help="Process the given section (by id); may be repeated"
    )

    parser.add_argument(
        "--all",
        action="store_true",
        help="Process every enabled section"
    )

    parser.add_argument(
        "--url",
        action="append",
        default=None,
        help="Process an article URL directly; may be repeated"
    )

    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of new items per section"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print structured articles as JSON instead of writing to the record store"
    )

    parser.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        default=None,
        help="Set the log level"
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    try:
        # Parse command line arguments
        args = parse_args(argv)

        # Load settings
        settings = load_settings()

        # Override settings with command line arguments
        if args.log_level:
            settings.metrics.log_level = LogLevel(args.log_level)

        # Set up logging
        setup_logging(settings)

        logger.info("newsdesk starting up", version=settings.version, python_version=sys.version)

        try:
            sections = select_sections(settings, args.section, args.all)
        except ValueError as e:
            logger.error("Invalid section selection", error=str(e))
            return 1

        if not sections and not args.url:
            logger.error("Nothing to do: pass --section, --all or --url")
            return 1

        return asyncio.run(run(settings, args, sections))

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    except Exception as e:
        logger.exception("Unhandled exception", error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
