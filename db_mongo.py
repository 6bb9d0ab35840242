from functools import lru_cache
from urllib.parse import urlparse
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient, ASCENDING
from pymongo.database import Database

from settings import settings

POTIONS_COL = "potions"
USERS_COL = "users"
AUDIT_COL = "audit_logs"


def is_mock() -> bool:
    return str(settings.mongodb_uri or "").startswith("mongomock://")


@lru_cache
def get_client() -> MongoClient:
    uri = settings.mongodb_uri
    if not uri:
        raise RuntimeError("MONGODB_URI is missing.")
    if is_mock():
        import mongomock

        return mongomock.MongoClient()
    return MongoClient(uri)


def _db_name_from_uri_fallback() -> str:
    if is_mock():
        return settings.db_name
    u = urlparse(settings.mongodb_uri or "")
    return (u.path or "").lstrip("/") or settings.db_name


def get_db() -> Database:
    return get_client()[_db_name_from_uri_fallback()]


def get_col(name: str):
    return get_db()[name]


def ensure_indexes() -> None:
    db = get_db()
    db[USERS_COL].create_index([("username", ASCENDING)], unique=True, name="ux_users_username")
    db[POTIONS_COL].create_index([("vendor_id", ASCENDING)], name="ix_potions_vendor")
    db[POTIONS_COL].create_index([("price", ASCENDING)], name="ix_potions_price")


def to_object_id(raw: str) -> Optional[ObjectId]:
    """Parse a hex id, returning None when it is not a valid ObjectId."""
    try:
        return ObjectId(raw)
    except (InvalidId, TypeError):
        return None


def serialize(doc: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if doc is None:
        return None
    out = dict(doc)
    if "_id" in out:
        out["id"] = str(out.pop("_id"))
    return out
