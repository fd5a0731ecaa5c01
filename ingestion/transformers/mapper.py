"""
Map raw source products onto the flat database schema
"""

from typing import Any, Dict, Optional
from models.base import ProductStatus


class ProductDataMapper:
    """
    Flatten one raw API product into the ``products`` column layout.

    Handles:
    - Nested field extraction (price, stock, image, container, location)
    - Type conversion with safe fallbacks
    - Default values for absent optional fields

    Never raises. Required fields that are missing (id, title, slug) come
    through as ``None`` and unparseable values come through unchanged, so
    the validator reports them.
    """

    FLAG_FIELDS = ("is_new", "is_hot_sale", "is_featured", "is_bulk_sale", "accept_offers")

    def map_to_database_format(self, raw_product: Dict[str, Any]) -> Dict[str, Any]:
        record = {
            "id": raw_product.get("id"),
            "title": raw_product.get("title"),
            "slug": raw_product.get("slug"),
            "content": raw_product.get("content"),

            "price": self._parse_float(_nested(raw_product, "price", "current"), default=0.0),
            "old_price": self._parse_float(_nested(raw_product, "price", "old")),
            "discount_percentage": self._parse_int(_nested(raw_product, "price", "discount")),

            "quantity": self._parse_int(_nested(raw_product, "stock", "quantity"), default=0),
            "in_stock": bool(_nested(raw_product, "stock", "in_stock")),

            "image_cover": _nested(raw_product, "image", "cover"),
            "image_thumbnail": _nested(raw_product, "image", "thumbnail"),

            "container_type": self._extract_container_type(raw_product),
            "container_size": _nested(raw_product, "container", "size"),
            "production_year": raw_product.get("production_year"),
            "condition": raw_product.get("condition"),

            "location_city": _nested(raw_product, "location", "city"),
            "location_district": _nested(raw_product, "location", "district"),
            "location_country": _nested(raw_product, "location", "country"),

            "type": raw_product.get("type"),
            "status": self._extract_status(raw_product),

            "colors": raw_product.get("colors"),
            "all_prices": raw_product.get("all_prices"),
            "technical_specs": raw_product.get("technical_specs"),
            "user_info": raw_product.get("user"),
        }

        for flag in self.FLAG_FIELDS:
            value = raw_product.get(flag)
            record[flag] = False if value is None else value

        return record

    @staticmethod
    def _extract_container_type(product: Dict[str, Any]) -> Optional[str]:
        types = _nested(product, "container", "types")
        if isinstance(types, (list, tuple)) and types:
            return ",".join(str(t) for t in types)
        return None

    @staticmethod
    def _extract_status(product: Dict[str, Any]) -> str:
        status = product.get("status")
        if status in ProductStatus.values():
            return status
        return ProductStatus.DRAFT.value

    @staticmethod
    def _parse_float(value: Any, default: Optional[float] = None) -> Any:
        """Parse float, keeping unparseable input for the validator"""
        if value is None or value == "":
            return default
        if isinstance(value, bool):
            return value
        try:
            return float(value)
        except (ValueError, TypeError):
            return value

    @staticmethod
    def _parse_int(value: Any, default: Optional[int] = None) -> Any:
        """Parse integral values ("10", 10.0); anything else is kept as is"""
        if value is None or value == "":
            return default
        if isinstance(value, bool):
            return value
        try:
            number = float(value)
        except (ValueError, TypeError):
            return value
        if number.is_integer():
            return int(number)
        return value


def _nested(record: Dict[str, Any], section: str, key: str) -> Any:
    """``record[section][key]`` or ``None`` when either level is missing"""
    container = record.get(section)
    if isinstance(container, dict):
        return container.get(key)
    return None
