"""
Pydantic schema for one page of the source API response.

Expected payload:
    {"data": {"pagination": {"current_page": 1, "last_page": 3, "total": 250},
              "products": [...]}}
"""

import logging
import math
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlparse
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class PageResponse(BaseModel):
    """One page of raw product records plus pagination metadata"""

    records: List[Dict[str, Any]] = Field(default_factory=list)
    current_page: int = Field(1, ge=1)
    last_page: int = Field(1, ge=1)
    total: int = Field(0, ge=0)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PageResponse":
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            data = {}

        pagination = data.get("pagination") or {}
        products = data.get("products") or []
        if not isinstance(pagination, dict):
            pagination = {}
        if not isinstance(products, list):
            products = []

        records = [p for p in products if isinstance(p, dict)]
        current_page = max(1, _to_int(pagination.get("current_page")) or 1)
        total = _to_int(pagination.get("total"))
        last_page = max(_extract_last_page(pagination, current_page), current_page)

        return cls(
            records=records,
            current_page=current_page,
            last_page=last_page,
            total=max(0, total if total is not None else len(records)),
        )

    @property
    def is_empty(self) -> bool:
        return not self.records

    @property
    def has_more_pages(self) -> bool:
        return self.current_page < self.last_page

    @property
    def is_last_page(self) -> bool:
        return self.current_page >= self.last_page


def _extract_last_page(pagination: Dict[str, Any], current_page: int) -> int:
    """
    Resolve the last page number.

    ``last_page`` is authoritative; the other fields are legacy fallbacks.
    ``total`` counts items, not pages, so using it alone is flagged.
    """
    last_page = _to_int(pagination.get("last_page"))
    if last_page is not None:
        return last_page

    last_page_url = pagination.get("last_page_url")
    if isinstance(last_page_url, str):
        page_values = parse_qs(urlparse(last_page_url).query).get("page", [])
        return (_to_int(page_values[0]) if page_values else None) or 1

    total = _to_int(pagination.get("total"))
    per_page = _to_int(pagination.get("per_page"))
    if total is not None and per_page:
        return max(1, math.ceil(total / per_page))

    if total is not None:
        logger.warning(
            f"Pagination has no last_page; falling back to item total ({total}) as last page"
        )
        return max(1, total)

    return current_page


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None
