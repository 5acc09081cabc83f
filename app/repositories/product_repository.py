"""
Product repository for database operations.
"""
from typing import Any, List
import logging

from app.repositories.base import CollectionRepository
from app.utils.documents import id_variants

logger = logging.getLogger(__name__)


class ProductRepository(CollectionRepository):
    """Read access to products."""

    collection_setting = "products_collection"

    async def distinct_company_ids(self, category_id: str) -> List[Any]:
        """Distinct company references of the products in a category."""
        company_ids = await self.collection.distinct(
            self.settings.product_company_field,
            {self.settings.product_category_field: {"$in": id_variants(category_id)}}
        )
        return [company_id for company_id in company_ids if company_id is not None]
