"""
Database helpers

Connection to the MongoDB store plus a small record capability used by every
handler. `db` stays None when DATABASE_URL / DATABASE_NAME are not set.
"""

import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from dotenv import load_dotenv
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from schemas import INDEXES

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

client: Optional[MongoClient] = None
db: Optional[Database] = None

if DATABASE_URL and DATABASE_NAME:
    client = MongoClient(DATABASE_URL)
    db = client[DATABASE_NAME]
    logger.info("[DB] Using database %s", DATABASE_NAME)
else:
    logger.warning("[DB] DATABASE_URL or DATABASE_NAME not set, database disabled")


def ensure_indexes(database: Database) -> None:
    for collection, indexes in INDEXES.items():
        for name, fields in indexes.items():
            database[collection].create_index([(f, ASCENDING) for f in fields], name=name)


def serialize_doc(value: Any) -> Any:
    """Make a stored document JSON friendly: `_id` becomes `id`, ObjectIds and datetimes become strings."""
    if isinstance(value, dict):
        out = {}
        for k, v in value.items():
            if k == "_id":
                out["id"] = str(v)
            else:
                out[k] = serialize_doc(v)
        return out
    if isinstance(value, list):
        return [serialize_doc(v) for v in value]
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class RecordStore:
    """
    Uniform list / get / find_unique / insert / replace over one collection.

    Nothing here adds defaults: a record is stored with exactly the fields
    the caller supplied, and the only generated value is the store id.
    """

    def __init__(self, database: Database, collection: str):
        self.name = collection
        self.collection = database[collection]

    def list(self, query: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return [serialize_doc(d) for d in self.collection.find(query or {})]

    def get(self, record_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if not record_id or not ObjectId.is_valid(record_id):
            return None
        doc = self.collection.find_one({"_id": ObjectId(record_id)})
        return serialize_doc(doc) if doc else None

    def find_unique(self, **keys: Any) -> Optional[Dict[str, Any]]:
        docs = list(self.collection.find(keys).limit(2))
        if len(docs) > 1:
            logger.warning("[DB] %s: more than one record matches %s", self.name, keys)
            return None
        return serialize_doc(docs[0]) if docs else None

    def insert(self, record: BaseModel) -> str:
        result = self.collection.insert_one(record.model_dump(exclude_unset=True))
        return str(result.inserted_id)

    def replace(self, record_id: str, record: BaseModel) -> None:
        self.collection.update_one({"_id": ObjectId(record_id)}, {"$set": record.model_dump()})
