"""
MongoDB access helpers.

The Database handle is built once by the app lifespan (or injected by tests)
and reaches handlers through the get_db dependency.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Request
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from errors import NotFound

logger = logging.getLogger(__name__)

TREATMENTS = "appoinment"
BOOKINGS = "booking"
USERS = "users"
PAYMENTS = "payments"


def connect(url: Optional[str], name: str, timeout_ms: int = 5000) -> Database:
    client = MongoClient(
        url,
        serverSelectionTimeoutMS=timeout_ms,
        connectTimeoutMS=timeout_ms,
        socketTimeoutMS=timeout_ms,
    )
    logger.info("MongoDB client created for database %s", name)
    return client[name]


def ensure_indexes(db: Database) -> None:
    db[TREATMENTS].create_index([("name", ASCENDING)], unique=True)
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    # dedup key for bookings
    db[BOOKINGS].create_index(
        [("treatment", ASCENDING), ("date", ASCENDING), ("patient", ASCENDING)],
        unique=True,
    )
    db[BOOKINGS].create_index([("date", ASCENDING)])
    logger.info("Indexes ensured")


def get_db(request: Request) -> Database:
    return request.app.state.db


def object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFound(f"No record with id {value!r}")


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    out = dict(doc)
    if isinstance(out.get("_id"), ObjectId):
        out["_id"] = str(out["_id"])
    return out


def create_document(db: Database, collection_name: str, data: Union[BaseModel, dict]) -> str:
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = dict(data)
    data_dict["created_at"] = datetime.now(timezone.utc)
    result = db[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(
    db: Database,
    collection_name: str,
    filter_dict: Optional[dict] = None,
    projection: Optional[dict] = None,
) -> List[Dict[str, Any]]:
    cursor = db[collection_name].find(filter_dict or {}, projection)
    return [serialize(doc) for doc in cursor]


def write_result(result) -> Dict[str, Any]:
    """Render an insert/update/delete result in the camelCase shape clients expect."""
    out: Dict[str, Any] = {"acknowledged": result.acknowledged}
    if hasattr(result, "inserted_id"):
        out["insertedId"] = str(result.inserted_id)
    elif hasattr(result, "matched_count"):
        out["matchedCount"] = result.matched_count
        out["modifiedCount"] = result.modified_count
        out["upsertedId"] = str(result.upserted_id) if result.upserted_id is not None else None
    elif hasattr(result, "deleted_count"):
        out["deletedCount"] = result.deleted_count
    return out
