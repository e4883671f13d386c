"""
MongoDB connection and small document helpers.

DATABASE_URL and DATABASE_NAME come from the environment. When they are
not set, db is None and the API answers 503 for anything that needs it.
"""
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import MongoClient

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "noreal")

db = None
if DATABASE_URL:
    _client = MongoClient(DATABASE_URL, tz_aware=False)
    db = _client[DATABASE_NAME]
    logger.info("MongoDB configured, database %s", DATABASE_NAME)
else:
    logger.warning("DATABASE_URL not set, running without a database")


def to_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def to_document(data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    # Decimal fields become strings in json mode
    if isinstance(data, BaseModel):
        doc = data.model_dump(mode="json", exclude={"id"})
        # keep real datetimes so Mongo can range-query them
        for name in type(data).model_fields:
            value = getattr(data, name)
            if isinstance(value, datetime):
                doc[name] = value
        return doc
    return dict(data)


def from_document(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return doc


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    doc = to_document(data)
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    if doc.get("created_at") is None:
        doc["created_at"] = now
    doc["updated_at"] = now
    result = db[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    return [from_document(d) for d in db[collection_name].find(filter_dict or {})]
