"""
Business-rule validation of mapped products
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from core.exceptions import SchemaValidationError
from core.logging import get_import_error_logger
from models.product import Product
from schemas.product import ProductCreate, ValidationResult
import logging

logger = logging.getLogger(__name__)
error_logger = get_import_error_logger()

SLUG_TAKEN_MESSAGE = "The slug has already been taken."
SLUG_UNVERIFIED_MESSAGE = "The slug uniqueness could not be verified."


class ProductValidator:
    """
    Validate mapped products against ``ProductCreate``.

    ``validate_safe`` never raises and returns a ``ValidationResult``;
    ``validate`` raises ``SchemaValidationError`` instead. Both log every
    failure, with the offending record, to the import error channel.

    Slug uniqueness needs the database and is only checked when
    ``check_unique`` is true; the product's own id is excluded so updates
    pass. A missing session or a failing query is reported as a ``slug``
    error rather than raised.
    """

    def __init__(self, db_session: Optional[AsyncSession] = None):
        self.db = db_session

    async def validate(self, data: Dict[str, Any], check_unique: bool = True) -> Dict[str, Any]:
        result = await self.validate_safe(data, check_unique=check_unique)

        if not result.valid:
            raise SchemaValidationError(
                "Product validation failed",
                errors=result.errors,
                context={"product_id": data.get("id"), "slug": data.get("slug")}
            )

        return result.data

    async def validate_safe(self, data: Dict[str, Any], check_unique: bool = True) -> ValidationResult:
        errors: Dict[str, List[str]] = {}
        product: Optional[ProductCreate] = None

        try:
            product = ProductCreate.model_validate(data)
        except PydanticValidationError as e:
            errors = self._format_errors(e)

        if check_unique and "slug" not in errors and isinstance(data.get("slug"), str):
            slug_error = await self._check_slug_unique(data["slug"].strip(), data.get("id"))
            if slug_error:
                errors.setdefault("slug", []).append(slug_error)

        if errors:
            logger.debug(f"Product {data.get('id')} rejected: {sorted(errors)}")
            self._log_validation_errors(data, errors)
            return ValidationResult(valid=False, data=None, errors=errors)

        return ValidationResult(valid=True, data=product.model_dump(), errors=None)

    async def _check_slug_unique(self, slug: str, product_id: Any) -> Optional[str]:
        """Error message for the slug, or ``None`` when it is free"""
        if self.db is None:
            logger.warning("Slug uniqueness requested without a database session")
            return SLUG_UNVERIFIED_MESSAGE

        query = select(Product.id).where(Product.slug == slug)
        if product_id is not None:
            query = query.where(Product.id != str(product_id))

        try:
            result = await self.db.execute(query.limit(1))
        except SQLAlchemyError as e:
            logger.error(f"Slug uniqueness query failed for '{slug}': {e}")
            return SLUG_UNVERIFIED_MESSAGE

        return SLUG_TAKEN_MESSAGE if result.first() is not None else None

    @staticmethod
    def _format_errors(error: PydanticValidationError) -> Dict[str, List[str]]:
        """Collapse pydantic errors to field -> messages"""
        errors: Dict[str, List[str]] = {}
        for item in error.errors():
            field = str(item["loc"][0]) if item["loc"] else "__root__"
            errors.setdefault(field, []).append(item["msg"])
        return errors

    @staticmethod
    def _log_validation_errors(data: Dict[str, Any], errors: Dict[str, List[str]]) -> None:
        error_logger.error(
            "Product validation failed",
            extra={
                "error_context": {
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "product_id": data.get("id") or "N/A",
                    "slug": data.get("slug") or "N/A",
                    "errors": errors,
                    "raw_data": data,
                }
            }
        )
