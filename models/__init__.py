"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class and product enums (ProductStatus, ProductType, ProductCondition)
    product: Canonical products, upserted by slug
    cache_entry: Key-value entries with expiry (checkpoint, rate-limit window)

Usage:
    from models.product import Product
    from models.cache_entry import CacheEntry
    from models.base import Base, ProductStatus

Example:
    product = await session.get(Product, "d010b4af-aff6-427f-8b5d-ca41df9f57a4")
    if product.has_discount:
        print(product.formatted_price, product.calculated_discount_percentage)
"""

__all__ = [
    "Base",
    "ProductStatus",
    "ProductType",
    "ProductCondition",
    "Product",
    "CacheEntry",
]
