"""
Load validated products with upsert logic (idempotency)
"""

from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import upsert_insert
from core.exceptions import UpsertError
from core.logging import get_import_error_logger
from ingestion.loaders.serializer import ProductSerializer
from models.product import Product, utcnow
import logging

logger = logging.getLogger(__name__)
error_logger = get_import_error_logger()

# Columns refreshed when the slug already exists
UPDATABLE_COLUMNS = (
    "title", "content", "price", "old_price", "discount_percentage",
    "quantity", "in_stock", "image_cover", "image_thumbnail",
    "container_type", "container_size", "production_year", "condition",
    "location_city", "location_district", "location_country",
    "type", "is_new", "is_hot_sale", "is_featured", "is_bulk_sale",
    "accept_offers", "status", "colors", "all_prices",
    "technical_specs", "user_info", "updated_at",
)


class ProductLoader:
    """
    Upsert a batch of products keyed by slug.

    Ensures:
    - No duplicate rows on repeated runs
    - Existing rows get the whitelisted columns refreshed
    - All-or-nothing per batch: one transaction, rolled back on failure
    """

    def __init__(
        self,
        db_session: AsyncSession,
        serializer: Optional[ProductSerializer] = None,
        batch_size: int = 100
    ):
        self.db = db_session
        self.serializer = serializer or ProductSerializer()
        self.batch_size = max(1, batch_size)

    async def persist(self, batch: List[Dict[str, Any]]) -> int:
        """
        Upsert ``batch`` in a single transaction.

        ``batch_size`` only bounds rows per statement; every statement
        belongs to the same transaction.

        Returns:
            Number of rows written

        Raises:
            UpsertError: The transaction failed and was rolled back
        """
        if not batch:
            return 0

        rows = self._prepare_rows(batch)

        try:
            for i in range(0, len(rows), self.batch_size):
                await self.db.execute(self._upsert_statement(rows[i:i + self.batch_size]))

            await self.db.commit()

        except Exception as e:
            await self.db.rollback()

            error_logger.error(
                "Failed to save products",
                extra={"error_context": {"error": str(e), "count": len(batch)}}
            )
            raise UpsertError(
                "Failed to save products",
                context={
                    "count": len(batch),
                    "table_name": Product.__tablename__,
                    "conflict_fields": ["slug"]
                },
                original_exception=e
            )

        logger.info(f"Products saved successfully (count={len(rows)})")
        return len(rows)

    def _prepare_rows(self, batch: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Serialize, stamp timestamps, keep the last row per slug"""
        now = utcnow()
        rows_by_slug: Dict[str, Dict[str, Any]] = {}

        for row in self.serializer.serialize_batch(batch):
            row["created_at"] = now
            row["updated_at"] = now
            rows_by_slug.pop(row["slug"], None)
            rows_by_slug[row["slug"]] = row

        if len(rows_by_slug) < len(batch):
            logger.debug(f"Collapsed {len(batch) - len(rows_by_slug)} repeated slugs in batch")

        return list(rows_by_slug.values())

    def _upsert_statement(self, rows: List[Dict[str, Any]]):
        insert = upsert_insert(self.db)
        stmt = insert(Product).values(rows)

        return stmt.on_conflict_do_update(
            index_elements=["slug"],
            set_={column: stmt.excluded[column] for column in UPDATABLE_COLUMNS}
        )
