from __future__ import annotations

from pymongo import MongoClient
from pymongo.collection import Collection

from core.config import settings


def get_mongo() -> Collection:
    client = MongoClient(settings.MONGO_URL, serverSelectionTimeoutMS=2000)
    return client[settings.MONGO_DB][settings.MONGO_COLLECTION]


class MongoKeyValueStore:
    """Key-value blobs as ``{_id: key, value: <bytes>}`` documents."""

    def __init__(self, collection: Collection | None = None):
        self.col = collection if collection is not None else get_mongo()

    def get(self, key: str) -> bytes | None:
        doc = self.col.find_one({"_id": key})
        if not doc:
            return None
        return bytes(doc["value"])

    def set(self, key: str, value: bytes) -> None:
        self.col.replace_one({"_id": key}, {"_id": key, "value": value}, upsert=True)
