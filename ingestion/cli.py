"""
Command line entry point for the product import.

Usage:
    product-import [--resume] [--dry-run]
"""

import argparse
import asyncio
import logging
import sys
import traceback
from contextlib import AsyncExitStack
from typing import Callable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.database import async_session_maker, engine
from core.logging import get_import_error_logger, setup_logging
from ingestion.base import PageSource
from ingestion.cache import CacheStore, DatabaseCache
from ingestion.checkpoint import CheckpointManager
from ingestion.extractors.product_api import ProductApiClient
from ingestion.formatting import render_summary
from ingestion.loaders.product_loader import ProductLoader
from ingestion.rate_limiter import ApiRateLimiter
from ingestion.runner import ProductImportRunner
from ingestion.transformers.mapper import ProductDataMapper
from ingestion.transformers.validator import ProductValidator

logger = logging.getLogger(__name__)
error_logger = get_import_error_logger()

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="product-import",
        description="Import products from the external API into the local database"
    )
    parser.add_argument(
        "--resume",
        action="store_true",
        help="Resume from the last checkpoint"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate without saving to the database"
    )
    return parser


async def run_import(
    resume: bool = False,
    dry_run: bool = False,
    session_factory: Callable[[], AsyncSession] = async_session_maker,
    source: Optional[PageSource] = None,
    cache: Optional[CacheStore] = None,
    runner_sleep=asyncio.sleep
) -> int:
    """
    Run one import and print the outcome.

    ``source`` and ``cache`` default to the configured API client and the
    database-backed cache; tests inject their own.

    Returns:
        Process exit code
    """
    print("Starting product import...")

    async with AsyncExitStack() as stack:
        session = await stack.enter_async_context(session_factory())

        if source is None:
            source = await stack.enter_async_context(
                ProductApiClient(
                    base_url=settings.PRODUCT_API_URL,
                    api_key=settings.PRODUCT_API_KEY,
                    max_retries=settings.IMPORT_MAX_RETRIES,
                    retry_delay_ms=settings.IMPORT_RETRY_DELAY_MS,
                    timeout=settings.PRODUCT_API_TIMEOUT
                )
            )
        if cache is None:
            cache = DatabaseCache(session)

        checkpoints = CheckpointManager(
            cache,
            settings.IMPORT_CHECKPOINT_KEY,
            ttl_hours=settings.IMPORT_CHECKPOINT_TTL_HOURS
        )
        runner = ProductImportRunner(
            source=source,
            mapper=ProductDataMapper(),
            validator=ProductValidator(session),
            rate_limiter=ApiRateLimiter(
                cache,
                max_requests=settings.PRODUCT_API_RATE_LIMIT,
                identifier=settings.RATE_LIMITER_IDENTIFIER
            ),
            checkpoints=checkpoints,
            loader=ProductLoader(session, batch_size=settings.IMPORT_BATCH_SIZE),
            recoverable_errors=settings.IMPORT_RECOVERABLE_ERRORS,
            recoverable_retry_delay=settings.IMPORT_RECOVERABLE_RETRY_DELAY,
            max_recoverable_retries=settings.IMPORT_MAX_RECOVERABLE_RETRIES,
            sleep=runner_sleep
        )

        start_page = 1
        try:
            start_page = await _resolve_start_page(checkpoints, resume)
            statistics = await runner.execute(start_page=start_page, dry_run=dry_run)

        except Exception as e:
            print(f"Critical error during import: {e}", file=sys.stderr)
            error_logger.critical(
                "Import aborted",
                extra={
                    "error_context": {
                        "error": str(e),
                        "trace": traceback.format_exc(),
                        "statistics": runner.statistics.to_dict(),
                    }
                }
            )

            resume_page = await _saved_page(checkpoints)
            print(
                f"You can resume the import from page {resume_page or start_page} using --resume",
                file=sys.stderr
            )
            return EXIT_FAILURE

    print(render_summary(statistics, dry_run=dry_run, error_log_path=settings.IMPORT_ERROR_LOG_PATH))
    return EXIT_SUCCESS


async def _resolve_start_page(checkpoints: CheckpointManager, resume: bool) -> int:
    if not resume:
        await checkpoints.clear()
        return 1

    page = await checkpoints.get()
    if page is not None and page > 1:
        print(f"Resuming from page {page}")
        return page

    logger.info("No checkpoint to resume from, starting at page 1")
    return 1


async def _saved_page(checkpoints: CheckpointManager) -> Optional[int]:
    try:
        return await checkpoints.get()
    except Exception as e:
        logger.warning(f"Could not read checkpoint after failure: {e}")
        return None


async def _run(args: argparse.Namespace) -> int:
    try:
        return await run_import(resume=args.resume, dry_run=args.dry_run)
    finally:
        await engine.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
