"""
Database helpers for the farm forms API

A single MongoClient is opened at startup and closed at shutdown. Components
never reach for a global handle: the FastAPI dependency `get_db` hands the
shared Database to each request.
"""
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from dotenv import load_dotenv
from fastapi import Request
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "farmDatabase")
DATABASE_TIMEOUT_MS = int(os.getenv("DATABASE_TIMEOUT_MS", 5000))

ACCOUNTS = "accounts"
FORMS = "forms"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def connect(url: Optional[str] = None, name: Optional[str] = None) -> MongoClient:
    url = url or DATABASE_URL
    if not url:
        raise RuntimeError("DATABASE_URL environment variable is not set")
    client = MongoClient(url, serverSelectionTimeoutMS=DATABASE_TIMEOUT_MS)
    logger.info("Opened MongoDB client for database %s", name or DATABASE_NAME)
    return client


def ensure_indexes(db: Database) -> None:
    # accounts.email is unique at the store level, not only by the lookup in signup
    db[ACCOUNTS].create_index([("email", ASCENDING)], unique=True)


def get_db(request: Request) -> Database:
    return request.app.state.db


def object_id(value: str) -> Optional[ObjectId]:
    """Parse an opaque id, returning None when it cannot be a store id."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def create_document(db: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert one document and return its id as a string."""
    if isinstance(data, BaseModel):
        data = data.model_dump()
    data = dict(data)
    data.pop("id", None)
    result = db[collection_name].insert_one(data)
    return str(result.inserted_id)


def get_documents(db: Database, collection_name: str,
                  filter_dict: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    return [with_id(doc) for doc in db[collection_name].find(filter_dict or {})]


def with_id(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Swap Mongo's `_id` for a string `id`."""
    if doc is None:
        return None
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return doc
