from typing import Dict, List
from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class _LabeledEnum(str, enum.Enum):
    """Shared helpers for product enumerations"""

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]

    @classmethod
    def options(cls) -> Dict[str, str]:
        """Value -> human readable label"""
        return {member.value: member.label for member in cls}

    @property
    def label(self) -> str:
        return self._labels()[self]

    @classmethod
    def _labels(cls) -> Dict["_LabeledEnum", str]:
        raise NotImplementedError


class ProductStatus(_LabeledEnum):
    """Publication status of a product"""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"

    @classmethod
    def _labels(cls):
        return {
            cls.DRAFT: "Draft",
            cls.PUBLISHED: "Published",
            cls.ARCHIVED: "Archived",
        }

    @property
    def is_published(self) -> bool:
        return self is ProductStatus.PUBLISHED

    @property
    def is_draft(self) -> bool:
        return self is ProductStatus.DRAFT

    @property
    def is_archived(self) -> bool:
        return self is ProductStatus.ARCHIVED


class ProductType(_LabeledEnum):
    """Listing type"""
    SALE = "sale"
    RENT = "rent"

    @classmethod
    def _labels(cls):
        return {
            cls.SALE: "For Sale",
            cls.RENT: "For Rent",
        }

    @property
    def is_sale(self) -> bool:
        return self is ProductType.SALE

    @property
    def is_rent(self) -> bool:
        return self is ProductType.RENT


class ProductCondition(_LabeledEnum):
    """Physical condition of the product"""
    NEW = "new"
    USED = "used"
    REFURBISHED = "refurbished"

    @classmethod
    def _labels(cls):
        return {
            cls.NEW: "New",
            cls.USED: "Used",
            cls.REFURBISHED: "Refurbished",
        }
