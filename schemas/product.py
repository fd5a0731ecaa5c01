"""
Pydantic schemas for canonical products with business-rule validation
"""

import re
from datetime import date
from typing import Optional, List, Dict, Any, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from models.base import ProductStatus, ProductType, ProductCondition

UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

MIN_PRODUCTION_YEAR = 1900

# Largest value a Numeric(12, 2) column holds
MAX_PRICE = 9_999_999_999.99

StructuredValue = Optional[Union[List[Any], Dict[str, Any]]]


class ProductCreate(BaseModel):
    """
    Schema for a product ready to be upserted.

    Ensures:
    - Required fields are present
    - Types are correct
    - Numeric fields are within business bounds
    - Enumerated fields hold a known value

    Unknown keys are dropped.
    """

    id: str
    title: str = Field(..., min_length=1, max_length=500)
    slug: str = Field(..., min_length=1, max_length=255)
    content: Optional[str] = None

    # Pricing
    price: float = Field(..., ge=0, le=MAX_PRICE, allow_inf_nan=False)
    old_price: Optional[float] = Field(None, ge=0, le=MAX_PRICE, allow_inf_nan=False)
    discount_percentage: Optional[int] = Field(None, ge=0, le=100)

    # Stock
    quantity: int = Field(..., ge=0)
    in_stock: bool

    # Media
    image_cover: Optional[str] = None
    image_thumbnail: Optional[str] = None

    # Container details
    container_type: Optional[str] = None
    container_size: Optional[str] = None
    production_year: Optional[int] = None
    condition: Optional[ProductCondition] = None

    # Location
    location_city: Optional[str] = None
    location_district: Optional[str] = None
    location_country: Optional[str] = None

    # Classification
    type: Optional[ProductType] = None
    is_new: bool = False
    is_hot_sale: bool = False
    is_featured: bool = False
    is_bulk_sale: bool = False
    accept_offers: bool = False
    status: ProductStatus

    # Structured fields
    colors: StructuredValue = None
    all_prices: StructuredValue = None
    technical_specs: StructuredValue = None
    user_info: StructuredValue = None

    model_config = ConfigDict(use_enum_values=True, extra="ignore")

    @field_validator("id")
    @classmethod
    def check_uuid(cls, v):
        """Identifier must be a hyphenated UUID"""
        if not UUID_PATTERN.match(v):
            raise ValueError("must be a valid UUID")
        return v

    @field_validator("title", "slug", mode="before")
    @classmethod
    def strip_text(cls, v):
        """Blank titles and slugs count as missing"""
        return v.strip() if isinstance(v, str) else v

    @field_validator("is_new", "is_hot_sale", "is_featured", "is_bulk_sale", "accept_offers", mode="before")
    @classmethod
    def default_flags(cls, v):
        """Absent classification flags are stored as False"""
        return False if v is None else v

    @field_validator("production_year")
    @classmethod
    def check_production_year(cls, v):
        if v is None:
            return v
        max_year = date.today().year + 1
        if not MIN_PRODUCTION_YEAR <= v <= max_year:
            raise ValueError(f"must be between {MIN_PRODUCTION_YEAR} and {max_year}")
        return v


class ValidationResult(BaseModel):
    """Outcome of ``ProductValidator.validate_safe``"""

    valid: bool
    data: Optional[Dict[str, Any]] = None
    errors: Optional[Dict[str, List[str]]] = None
