"""
Import Runner - Orchestrates the paginated fetch, validate and persist loop.

This module provides resumable import orchestration with:
- Rate limiting in front of every page fetch
- Per-record validation (invalid records are logged and skipped)
- One all-or-nothing upsert per page
- A checkpoint written only after a page is fully processed
- Retry of the same page when the failure matches a recoverable pattern
"""

import asyncio
import enum
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from core.exceptions import ETLException
from ingestion.base import PageSource
from ingestion.checkpoint import CheckpointManager
from ingestion.loaders.product_loader import ProductLoader
from ingestion.rate_limiter import ApiRateLimiter
from ingestion.statistics import ImportStatistics
from ingestion.transformers.mapper import ProductDataMapper
from ingestion.transformers.validator import ProductValidator
from schemas.source import PageResponse

logger = logging.getLogger(__name__)

DEFAULT_RECOVERABLE_ERRORS = (
    "timeout",
    "connection",
    "network",
    "temporarily unavailable",
)


class ImportState(str, enum.Enum):
    """Phase of a ``ProductImportRunner`` run"""

    IDLE = "idle"
    FETCHING = "fetching"
    PROCESSING = "processing"
    CHECKPOINTING = "checkpointing"
    DONE = "done"
    FAILED = "failed"


class ProductImportRunner:
    """
    Import Orchestrator

    Responsibilities:
    - Drive pages from ``start_page`` to the source's last page
    - Classify every record as imported or failed
    - Persist valid records unless running dry
    - Advance the checkpoint after each page
    - Decide whether a fetch failure is retried or aborts the run

    Pages are processed strictly one after another. A page is only
    checkpointed once it has been persisted, so an abort between
    persisting and checkpointing replays that page on resume.
    """

    def __init__(
        self,
        source: PageSource,
        mapper: ProductDataMapper,
        validator: ProductValidator,
        rate_limiter: ApiRateLimiter,
        checkpoints: CheckpointManager,
        loader: ProductLoader,
        recoverable_errors: Optional[Sequence[str]] = None,
        recoverable_retry_delay: float = 5.0,
        max_recoverable_retries: Optional[int] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.source = source
        self.mapper = mapper
        self.validator = validator
        self.rate_limiter = rate_limiter
        self.checkpoints = checkpoints
        self.loader = loader
        self.recoverable_errors = [
            pattern.lower()
            for pattern in (DEFAULT_RECOVERABLE_ERRORS if recoverable_errors is None else recoverable_errors)
        ]
        self.recoverable_retry_delay = recoverable_retry_delay
        self.max_recoverable_retries = max_recoverable_retries
        self._sleep = sleep

        self.state = ImportState.IDLE
        self.statistics = ImportStatistics()

    async def execute(self, start_page: int = 1, dry_run: bool = False) -> ImportStatistics:
        """
        Run the import from ``start_page`` until the last page.

        Args:
            start_page: First page to fetch (1 for a fresh run)
            dry_run: Validate and count but never write products

        Returns:
            Statistics of the finished run

        Raises:
            ETLException: A fetch failure that is not recoverable, or a
                persistence failure. ``self.statistics`` still holds the
                counts gathered before the abort.
        """
        self.statistics = ImportStatistics()
        page = max(1, start_page)
        last_page = page
        recoverable_failures = 0

        logger.info(f"Starting {self.source.source_name} import at page {page} (dry_run={dry_run})")

        try:
            while True:
                self.state = ImportState.FETCHING
                await self.rate_limiter.throttle()

                try:
                    response = await self.source.fetch_products(page)
                except Exception as e:
                    if not self._should_retry(e, recoverable_failures):
                        raise

                    recoverable_failures += 1
                    logger.warning(
                        f"Recoverable error on page {page}: {self._describe(e)}. "
                        f"Retrying in {self.recoverable_retry_delay} seconds"
                    )
                    await self._sleep(self.recoverable_retry_delay)
                    continue

                recoverable_failures = 0
                await self.rate_limiter.hit()
                last_page = response.last_page

                self.state = ImportState.PROCESSING
                await self._process_page(response, page, dry_run)

                self.state = ImportState.CHECKPOINTING
                await self.checkpoints.save(page + 1)

                logger.info(f"Page {page}/{last_page} processed")

                if page >= last_page:
                    break
                page += 1

            await self.checkpoints.clear()
            self.state = ImportState.DONE

            logger.info(
                f"Import completed: processed={self.statistics.total_processed}, "
                f"successful={self.statistics.successful_imports}, "
                f"failed={self.statistics.failed_validations}"
            )
            return self.statistics

        except ETLException as e:
            self.state = ImportState.FAILED
            logger.error(
                f"Import failed on page {page}: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            raise

        except Exception:
            self.state = ImportState.FAILED
            logger.exception(f"Unexpected error during import on page {page}")
            raise

        finally:
            self.statistics.finish()

    def is_recoverable_error(self, error: Exception) -> bool:
        """
        Case-insensitive substring match of the error text against the patterns.

        For ``ETLException`` only the message chain is matched, never the
        context (URLs and response bodies are arbitrary text).
        """
        message = self._error_text(error).lower()
        return any(pattern in message for pattern in self.recoverable_errors)

    @classmethod
    def _error_text(cls, error: Optional[BaseException]) -> str:
        if error is None:
            return ""
        if isinstance(error, ETLException):
            return f"{error.message} {cls._error_text(error.original_exception)}"
        return str(error)

    def _should_retry(self, error: Exception, failures: int) -> bool:
        if not self.is_recoverable_error(error):
            return False
        if self.max_recoverable_retries is not None and failures >= self.max_recoverable_retries:
            logger.error(
                f"Giving up after {failures} recoverable failures on the same page"
            )
            return False
        return True

    async def _process_page(self, response: PageResponse, page: int, dry_run: bool) -> None:
        batch: List[Dict[str, Any]] = []

        for raw_product in response.records:
            mapped = self.mapper.map_to_database_format(raw_product)
            result = await self.validator.validate_safe(mapped, check_unique=False)

            if result.valid:
                batch.append(result.data)
                self.statistics.increment_success()
            else:
                self.statistics.increment_failed()

        logger.debug(
            f"Page {page}: {len(batch)} valid of {len(response.records)} records"
        )

        if batch and not dry_run:
            await self.loader.persist(batch)

    @staticmethod
    def _describe(error: Exception) -> str:
        if isinstance(error, ETLException):
            return error.message
        return str(error)
