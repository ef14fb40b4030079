"""
MongoDB access helpers

Collections are named after the lowercase record name (User -> "user").
The database handle is created once per application and passed around
explicitly; nothing here holds a module-level connection.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from config import Settings

USERS = "user"
PRODUCTS = "product"
ORDERS = "order"

DEFAULT_DATABASE = "ecommerce"


def get_database(settings: Settings, client: Optional[MongoClient] = None) -> Database:
    client = client or MongoClient(settings.db_uri, tz_aware=True)
    if settings.database_name:
        return client[settings.database_name]
    return client.get_default_database(default=DEFAULT_DATABASE)


def ensure_indexes(db: Database):
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    db[ORDERS].create_index([("user_id", ASCENDING), ("created_at", ASCENDING)])


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Return an ObjectId for value, or None when it cannot be one."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def with_id(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Copy a stored document, exposing ``_id`` as a string ``id``."""
    out = dict(doc)
    out["id"] = str(out.pop("_id"))
    return out


def create_document(db: Database, collection_name: str, data: Dict[str, Any]) -> str:
    doc = dict(data)
    doc.setdefault("created_at", utcnow())
    result = db[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(db: Database, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    return [with_id(doc) for doc in db[collection_name].find(filter_dict or {})]
