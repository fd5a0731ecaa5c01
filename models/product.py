from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from sqlalchemy import Column, String, Integer, SmallInteger, Numeric, Boolean, Text, DateTime, Index
from models.base import Base, ProductStatus


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Product(Base):
    """
    Canonical product imported from the third-party catalogue.

    Design:
    - ``id`` is the UUID delivered by the source
    - ``slug`` is the upsert key; re-importing a slug updates the row
    - Structured source values (colors, all_prices, technical_specs,
      user_info) are stored as JSON-encoded text by the serializer
    """
    __tablename__ = "products"

    id = Column(String(36), primary_key=True)
    title = Column(String(500), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    content = Column(Text, nullable=True)

    # Pricing
    price = Column(Numeric(12, 2), nullable=False)
    old_price = Column(Numeric(12, 2), nullable=True)
    discount_percentage = Column(SmallInteger, nullable=True)

    # Stock
    quantity = Column(Integer, nullable=False, default=0)
    in_stock = Column(Boolean, nullable=False, default=True)

    # Media
    image_cover = Column(String(2048), nullable=True)
    image_thumbnail = Column(String(2048), nullable=True)

    # Container details
    container_type = Column(String(255), nullable=True)
    container_size = Column(String(255), nullable=True)
    production_year = Column(SmallInteger, nullable=True)
    condition = Column(String(20), nullable=True)

    # Location
    location_city = Column(String(255), nullable=True)
    location_district = Column(String(255), nullable=True)
    location_country = Column(String(255), nullable=True)

    # Classification
    type = Column(String(20), nullable=True)
    is_new = Column(Boolean, nullable=False, default=False)
    is_hot_sale = Column(Boolean, nullable=False, default=False)
    is_featured = Column(Boolean, nullable=False, default=False)
    is_bulk_sale = Column(Boolean, nullable=False, default=False)
    accept_offers = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default=ProductStatus.DRAFT.value)

    # Structured extension fields (JSON text)
    colors = Column(Text, nullable=True)
    all_prices = Column(Text, nullable=True)
    technical_specs = Column(Text, nullable=True)
    user_info = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_products_status", "status"),
        Index("idx_products_stock_status", "in_stock", "status"),
    )

    @property
    def has_discount(self) -> bool:
        return self.old_price is not None and self.old_price > self.price

    @property
    def discount_amount(self) -> Optional[Decimal]:
        if not self.has_discount:
            return None
        return self.old_price - self.price

    @property
    def calculated_discount_percentage(self) -> Optional[int]:
        if not self.has_discount:
            return None
        return int(round((self.old_price - self.price) / self.old_price * 100))

    @property
    def formatted_price(self) -> str:
        return f"{self.price:,.2f} TRY"
