"""
Source API client with authentication, timeout and retry logic.

This module provides page-by-page extraction with:
- Bearer token authentication
- Exponential backoff retry for transient failures
- Status-code based retry classification
- Comprehensive error handling with custom exceptions
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional
import httpx
from ingestion.base import PageSource
from schemas.source import PageResponse
from core.exceptions import (
    APIExtractionError,
    AuthenticationError,
    DataFormatError,
    HTTPStatusError,
    NetworkError,
    RateLimitError,
    ResourceNotFoundError,
    RetriesExhaustedError,
    ServerError,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class ProductApiClient(PageSource):
    """
    Fetch product pages from the third-party REST API.

    Retry policy:
    - transport failures and HTTP 429/500/502/503/504 are retried
    - any other non-2xx status propagates immediately
    - attempt ``n`` (0-based) is followed by a ``retry_delay_ms * 2**n`` wait
    - after ``max_retries`` failed attempts ``RetriesExhaustedError`` wraps
      the last failure

    Attributes:
        max_retries: Maximum number of attempts per page (default: 3)
        retry_delay_ms: Base backoff delay in milliseconds (default: 1000)
        timeout: Request timeout in seconds (default: 30.0)
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        max_retries: int = 3,
        retry_delay_ms: int = 1000,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.max_retries = max(1, max_retries)
        self.retry_delay_ms = retry_delay_ms
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep

    async def __aenter__(self) -> "ProductApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch_products(self, page: int = 1) -> PageResponse:
        """
        Fetch one page of products.

        Raises:
            RetriesExhaustedError: Every attempt failed with a retryable error
            HTTPStatusError: Non-retryable status (401, 403, 404, 422, ...)
            DataFormatError: Body is not a JSON object
        """
        logger.info(f"Fetching page {page} from {self.base_url}")

        payload = await self._make_request_with_retry({"page": page})
        response = PageResponse.from_payload(payload)

        logger.debug(
            f"Fetched {len(response.records)} records from page {response.current_page}/{response.last_page}"
        )
        return response

    async def _make_request_with_retry(self, params: Dict[str, Any]) -> Dict[str, Any]:
        last_error: Optional[APIExtractionError] = None

        for attempt in range(self.max_retries):
            try:
                logger.debug(f"Request attempt {attempt + 1}/{self.max_retries} to {self.base_url}")
                return await self._request(params)

            except NetworkError as e:
                last_error = e

            except HTTPStatusError as e:
                if e.status_code not in RETRYABLE_STATUS_CODES:
                    raise
                last_error = e

            if attempt < self.max_retries - 1:
                delay = self.retry_delay_ms * (2 ** attempt) / 1000
                logger.warning(
                    f"{last_error.message}. Retrying in {delay} seconds "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                await self._sleep(delay)

        raise RetriesExhaustedError(
            self._exhausted_message(last_error),
            attempts=self.max_retries,
            last_error=last_error,
            context={"api_url": self.base_url, "page": params.get("page")}
        )

    async def _request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        page = params.get("page")
        client = self._get_client()

        try:
            response = await client.get(
                self.base_url,
                params=params,
                headers=self._headers(),
                timeout=self.timeout
            )
        except httpx.TimeoutException as e:
            raise NetworkError(
                f"Request timeout while fetching page {page}",
                context={"api_url": self.base_url, "page": page, "timeout": self.timeout},
                original_exception=e
            )
        except httpx.TransportError as e:
            raise NetworkError(
                f"Network error while fetching page {page}",
                context={"api_url": self.base_url, "page": page},
                original_exception=e
            )

        if not response.is_success:
            raise self._status_error(response, page)

        try:
            payload = response.json()
        except ValueError as e:
            raise DataFormatError(
                "Failed to parse JSON response",
                context={
                    "api_url": self.base_url,
                    "page": page,
                    "response_body": response.text[:500]
                },
                original_exception=e
            )

        if not isinstance(payload, dict):
            raise DataFormatError(
                f"Expected a JSON object, got {type(payload).__name__}",
                context={"api_url": self.base_url, "page": page}
            )

        return payload

    def _status_error(self, response: httpx.Response, page: Any) -> HTTPStatusError:
        status = response.status_code
        message = f"HTTP {status} {response.reason_phrase} for page {page}"
        context = {
            "api_url": self.base_url,
            "page": page,
            "response_body": response.text[:500]
        }

        if status == 429:
            retry_after = response.headers.get("Retry-After")
            return RateLimitError(
                message,
                context=context,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None
            )
        if status in (401, 403):
            return AuthenticationError(message, status, context)
        if status == 404:
            return ResourceNotFoundError(message, status, context)
        if status >= 500:
            return ServerError(message, status, context)
        return HTTPStatusError(message, status, context)

    def _exhausted_message(self, last_error: Optional[APIExtractionError]) -> str:
        if isinstance(last_error, HTTPStatusError):
            return (
                f"API temporarily unavailable after {self.max_retries} attempts "
                f"(HTTP {last_error.status_code})"
            )
        return f"Network error after {self.max_retries} attempts"

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client
