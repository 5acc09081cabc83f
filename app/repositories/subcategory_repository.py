"""
Subcategory repository for database operations.
"""
from typing import Any, Dict, List
import logging

from app.repositories.base import CollectionRepository
from app.utils.documents import id_variants, normalize_document

logger = logging.getLogger(__name__)


class SubcategoryRepository(CollectionRepository):
    """Read access to subcategories."""

    collection_setting = "subcategories_collection"

    async def get_by_category(self, category_id: str) -> List[Dict[str, Any]]:
        """Get all subcategories referencing a category."""
        field = self.settings.subcategory_category_field
        cursor = self.collection.find({field: {"$in": id_variants(category_id)}})
        subcategories = []
        async for doc in cursor:
            subcategories.append(normalize_document(doc))
        return subcategories
