"""
Category repository for database operations.
"""
from typing import Any, Dict, List, Optional
import logging
import uuid
from datetime import datetime, timezone

from bson import ObjectId
from pydantic import ValidationError as PydanticValidationError
from pymongo import ReturnDocument

from app.repositories.base import CollectionRepository
from app.schemas import Category
from app.utils.documents import normalize_document
from app.utils.exceptions import DocumentError

logger = logging.getLogger(__name__)


def _object_id(category_id: str) -> Optional[ObjectId]:
    if not ObjectId.is_valid(category_id):
        return None
    return ObjectId(category_id)


class CategoryRepository(CollectionRepository):
    """Repository for category CRUD operations."""

    collection_setting = "categories_collection"

    def _to_category(self, doc: Dict[str, Any]) -> Category:
        try:
            return Category(**normalize_document(doc))
        except PydanticValidationError as e:
            raise DocumentError(self.collection.name, str(doc.get("_id")), str(e)) from e

    async def create(
        self,
        name: str,
        logo: Optional[str] = None,
        logo_public_id: Optional[str] = None
    ) -> Category:
        """Create a new category."""
        now = datetime.now(timezone.utc)
        doc = {
            "id": str(uuid.uuid4()),
            "name": name,
            "logo": logo,
            "logo_public_id": logo_public_id,
            "subcategories_id": [],
            "companies_id": [],
            "created_at": now,
            "updated_at": now,
        }

        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id

        logger.info(f"Created category: {result.inserted_id} - {name}")
        return self._to_category(doc)

    async def get_by_id(self, category_id: str) -> Optional[Category]:
        """Get a category by ID."""
        oid = _object_id(category_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc:
            return self._to_category(doc)
        return None

    async def get_all(self) -> List[Category]:
        """Get all categories in natural order."""
        cursor = self.collection.find()
        categories = []
        async for doc in cursor:
            categories.append(self._to_category(doc))
        return categories

    async def update(self, category_id: str, fields: Dict[str, Any]) -> Optional[Category]:
        """Apply a partial update and return the updated category."""
        oid = _object_id(category_id)
        if oid is None:
            return None

        update_data = dict(fields)
        update_data["updated_at"] = datetime.now(timezone.utc)

        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER
        )
        if doc is None:
            return None

        logger.info(f"Updated category: {category_id} ({', '.join(sorted(fields))})")
        return self._to_category(doc)

    async def clear_logo(self, category_id: str) -> None:
        """Drop the logo reference of a category."""
        oid = _object_id(category_id)
        if oid is None:
            return
        await self.collection.update_one(
            {"_id": oid},
            {"$set": {"logo": None, "logo_public_id": None, "updated_at": datetime.now(timezone.utc)}}
        )
        logger.info(f"Cleared logo of category: {category_id}")

    async def find_unmanaged_logos(self) -> List[Dict[str, Any]]:
        """Raw ``_id``/``logo`` pairs of categories whose logo has no public id."""
        cursor = self.collection.find(
            {"logo": {"$nin": [None, ""]}, "logo_public_id": None},
            {"_id": 1, "logo": 1}
        )
        return [doc async for doc in cursor]

    async def set_logo_public_id(self, category_id: Any, logo: str, public_id: str) -> bool:
        """Record the public id of a logo, unless the logo changed meanwhile."""
        result = await self.collection.update_one(
            {"_id": category_id, "logo": logo, "logo_public_id": None},
            {"$set": {"logo_public_id": public_id}}
        )
        return result.modified_count > 0

    async def delete(self, category_id: str) -> bool:
        """Delete a category."""
        oid = _object_id(category_id)
        if oid is None:
            return False
        result = await self.collection.delete_one({"_id": oid})
        if result.deleted_count > 0:
            logger.info(f"Deleted category: {category_id}")
            return True
        return False
