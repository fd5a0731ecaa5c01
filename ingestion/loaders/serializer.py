"""
Encode structured product fields for storage
"""

import json
from typing import Any, Dict, List


class ProductSerializer:
    """JSON-encode list/dict fields so they fit the ``Text`` columns"""

    JSON_FIELDS = ("colors", "all_prices", "technical_specs", "user_info")

    def serialize(self, product: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(product)
        for field in self.JSON_FIELDS:
            if isinstance(row.get(field), (list, dict)):
                row[field] = json.dumps(row[field], ensure_ascii=False)
        return row

    def serialize_batch(self, products: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [self.serialize(product) for product in products]
