"""
Pydantic schemas for data validation and serialization.

Schemas:
    product: Canonical product schema with business-rule validation
    source: Page of raw records returned by the source API

Usage:
    from schemas.product import ProductCreate, ValidationResult
    from schemas.source import PageResponse

Example:
    page = PageResponse.from_payload(response.json())
    for raw in page.records:
        ...

Validation:
    ProductCreate enforces:
    - Required field checking
    - Numeric bounds (price, quantity, discount, production year)
    - Closed enumerations (status, type, condition)
    - Structured values being lists or objects
"""

__all__ = [
    "ProductCreate",
    "ValidationResult",
    "PageResponse",
]
