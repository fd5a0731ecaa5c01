"""
Abstract base class for paginated product sources
"""

from abc import ABC, abstractmethod
from schemas.source import PageResponse


class PageSource(ABC):
    """
    A source that delivers product records one page at a time.

    Implementations handle their own transport-level retries; callers
    only see a ``PageResponse`` or an exception.
    """

    source_name: str = "products"

    @abstractmethod
    async def fetch_products(self, page: int = 1) -> PageResponse:
        """
        Fetch one page of products.

        Args:
            page: 1-based page number

        Returns:
            Parsed page with records and pagination metadata
        """
        pass
