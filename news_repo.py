"""
MongoDB storage for generated news.

The driver is synchronous, so every call is pushed to a worker thread
with asyncio.to_thread to keep the event loop free.
"""

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection

logger = logging.getLogger(__name__)

COLLECTION = "news"

UPDATABLE_FIELDS = ("title", "category", "location", "brief", "content")


def _object_id(news_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(news_id)
    except (InvalidId, TypeError):
        return None


def serialize(doc: Optional[dict]) -> Optional[dict]:
    """Make a stored document JSON friendly (`_id` becomes `id`)."""
    if doc is None:
        return None
    out = {k: v for k, v in doc.items() if k != "_id"}
    out["id"] = str(doc["_id"])
    for key in ("createdAt", "updatedAt"):
        if isinstance(out.get(key), datetime):
            out[key] = out[key].isoformat()
    return out


class NewsRepository:
    """Paginated CRUD over the news collection."""

    def __init__(self, collection: Collection):
        self.collection = collection

    @classmethod
    def connect(cls, uri: str, db_name: str) -> "NewsRepository":
        client = MongoClient(uri)
        logger.info(f"Using MongoDB database '{db_name}'")
        return cls(client[db_name][COLLECTION])

    def _insert(self, doc: dict) -> dict:
        now = datetime.now(timezone.utc)
        payload = {**doc, "createdAt": now, "updatedAt": now}
        result = self.collection.insert_one(payload)
        payload["_id"] = result.inserted_id
        return payload

    def _list(self, page: int, page_size: int) -> dict:
        page = max(1, page)
        page_size = max(1, page_size)
        total = self.collection.count_documents({})
        items = list(
            self.collection.find({})
            .sort("createdAt", DESCENDING)
            .skip((page - 1) * page_size)
            .limit(page_size)
        )
        return {
            "items": items,
            "total": total,
            "page": page,
            "pageSize": page_size,
            "totalPages": math.ceil(total / page_size),
        }

    def _get(self, news_id: str) -> Optional[dict]:
        oid = _object_id(news_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def _delete(self, news_id: str) -> bool:
        oid = _object_id(news_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0

    def _update(self, news_id: str, updates: dict) -> Optional[dict]:
        oid = _object_id(news_id)
        if oid is None:
            return None
        fields = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS and v is not None}
        fields["updatedAt"] = datetime.now(timezone.utc)
        return self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )

    async def insert(self, doc: dict) -> dict:
        return await asyncio.to_thread(self._insert, doc)

    async def list(self, page: int = 1, page_size: int = 10) -> dict:
        return await asyncio.to_thread(self._list, page, page_size)

    async def get(self, news_id: str) -> Optional[dict]:
        return await asyncio.to_thread(self._get, news_id)

    async def delete(self, news_id: str) -> bool:
        return await asyncio.to_thread(self._delete, news_id)

    async def update(self, news_id: str, updates: dict) -> Optional[dict]:
        """Set the given fields and bump updatedAt; None if the id is unknown."""
        return await asyncio.to_thread(self._update, news_id, updates)
