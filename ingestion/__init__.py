"""
Import pipeline components for the paginated product import.

This package contains all components of the fetch, validate, persist loop:

Modules:
    base: Abstract base class for paginated product sources
    runner: Import orchestrator driving pages, statistics and recoverable retries
    rate_limiter: Sliding-window limiter for outbound API requests
    checkpoint: Next-page checkpoint for resumable runs
    cache: Key-value cache with expiry (database or in-memory)
    statistics: Counters, duration and memory of one run
    formatting: Human-readable summary output
    cli: ``product-import`` command

Subpackages:
    extractors: Source API client with retry and backoff
    transformers: Raw record mapping and business-rule validation
    loaders: Serialization and idempotent batch upsert

Architecture:
    Each page goes through the same steps:

    1. Throttle - Wait for room in the rate-limit window
    2. Fetch - Request the page, retrying transient failures
    3. Map & Validate - Flatten each record and check business rules
    4. Persist - Upsert the valid records in one transaction
    5. Checkpoint - Record the next page to fetch

    Invalid records are counted and logged, never fatal.

Usage:
    from ingestion.extractors.product_api import ProductApiClient
    from ingestion.runner import ProductImportRunner

Example:
    runner = ProductImportRunner(
        source=ProductApiClient(base_url="https://api.example.com/products"),
        mapper=ProductDataMapper(),
        validator=ProductValidator(session),
        rate_limiter=ApiRateLimiter(cache, max_requests=10),
        checkpoints=CheckpointManager(cache, "product_import_checkpoint"),
        loader=ProductLoader(session),
    )

    statistics = await runner.execute(start_page=1)
    print(f"Imported {statistics.successful_imports} products")

Error Handling:
    All components use custom exceptions from core.exceptions for
    structured error handling. Fetch failures matching the recoverable
    patterns retry the same page; everything else aborts the run with
    the checkpoint preserved.
"""

__all__ = [
    "PageSource",
    "ProductImportRunner",
    "ImportState",
    "ProductApiClient",
    "ProductDataMapper",
    "ProductValidator",
    "ProductLoader",
    "ApiRateLimiter",
    "CheckpointManager",
    "ImportStatistics",
]
