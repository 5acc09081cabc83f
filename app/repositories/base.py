"""
Base repository with common MongoDB operations.
"""
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from typing import Any, Dict, Iterable, List, Optional
import logging

from app.config.settings import Settings, get_settings
from app.utils.documents import id_variants, normalize_document

logger = logging.getLogger(__name__)


class BaseRepository:
    """Owns the MongoDB connection shared by all repositories."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self) -> None:
        """Establish connection to MongoDB."""
        try:
            self.client = AsyncIOMotorClient(self.settings.mongodb_uri)
            self.db = self.client[self.settings.mongodb_database]
            await self.client.admin.command('ping')
            logger.info(f"Connected to MongoDB: {self.settings.mongodb_database}")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    @property
    def is_connected(self) -> bool:
        """Check if connected to MongoDB."""
        return self.client is not None and self.db is not None


class CollectionRepository:
    """Common plumbing for repositories bound to one collection."""

    collection_setting: str = ""

    def __init__(self, db):
        self.db = db
        self.settings = None

    def set_settings(self, settings):
        self.settings = settings

    @property
    def collection(self):
        return self.db[getattr(self.settings, self.collection_setting)]

    async def get_map(self, ids: Iterable[Any]) -> Dict[str, Dict[str, Any]]:
        """Fetch documents by _id in one query, keyed by string id."""
        ids = [i for i in ids if i is not None]
        if not ids:
            return {}

        lookup = [variant for i in ids for variant in id_variants(i)]
        cursor = self.collection.find({"_id": {"$in": lookup}})
        found = {}
        async for doc in cursor:
            found[str(doc["_id"])] = normalize_document(doc)
        return found

    async def find_by_ids(self, ids: Iterable[Any]) -> List[Dict[str, Any]]:
        """
        Fetch documents by _id, keeping the order of ``ids``.

        Missing ids are skipped and repeated ids yield a single document.
        """
        ids = [i for i in ids if i is not None]
        found = await self.get_map(ids)

        ordered = []
        seen = set()
        for i in ids:
            key = str(i)
            if key in found and key not in seen:
                ordered.append(found[key])
                seen.add(key)
        return ordered
