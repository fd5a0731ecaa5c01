"""
Core utilities and configuration for the product importer.

This package provides foundational components used throughout the import pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Database connection, session management and dialect-aware upsert
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and the dedicated import error channel

Usage:
    from core.config import settings
    from core.database import async_session_maker
    from core.exceptions import APIExtractionError, NetworkError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Get database session
    async with async_session_maker() as session:
        # Perform database operations
        pass
"""

__all__ = [
    "settings",
    "async_session_maker",
    "setup_logging",
    # Exceptions
    "ETLException",
    "ExtractionError",
    "APIExtractionError",
    "NetworkError",
    "HTTPStatusError",
    "RateLimitError",
    "ServerError",
    "AuthenticationError",
    "ResourceNotFoundError",
    "RetriesExhaustedError",
    "DataFormatError",
    "TransformationError",
    "ValidationError",
    "SchemaValidationError",
    "LoadError",
    "UpsertError",
    "RetryableError",
    "NonRetryableError",
]
