import math
import re
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pymongo import ReturnDocument

from db_mongo import POTIONS_COL, get_col, serialize, to_object_id
from server.src.modules.authentification_helpers import require_auth
from server.src.modules.errors import NotFound, ValidationError
from server.src.modules.logging_helpers import logger, write_audit
from server.src.objects.potions import Potion

router = APIRouter(prefix="/potions", tags=["potions"])


def _potions():
    return get_col(POTIONS_COL)


def _parse_bound(raw: Optional[str]) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError("Invalid price range") from None
    if math.isnan(value):
        raise ValidationError("Invalid price range")
    return value


def _find_or_404(potion_id: str) -> dict[str, Any]:
    oid = to_object_id(potion_id)
    doc = _potions().find_one({"_id": oid}) if oid is not None else None
    if not doc:
        raise NotFound("Potion not found")
    return doc


@router.get("")
def list_potions():
    return [serialize(p) for p in _potions().find()]


@router.post("", status_code=201)
def create_potion(payload: Potion, claims: dict[str, Any] = Depends(require_auth)):
    doc = payload.to_doc()
    res = _potions().insert_one(doc)
    created = serialize(doc)
    logger.info("Potion %s created by %s", res.inserted_id, claims["username"])
    write_audit("potion.create", claims["username"], str(res.inserted_id), None, created)
    return created


@router.get("/vendor/{vendor_id}")
def potions_by_vendor(vendor_id: str):
    return [serialize(p) for p in _potions().find({"vendor_id": vendor_id})]


@router.get("/price-range")
def potions_by_price(
    min_price: Optional[str] = Query(default=None, alias="min"),
    max_price: Optional[str] = Query(default=None, alias="max"),
):
    low = _parse_bound(min_price)
    high = _parse_bound(max_price)
    return [serialize(p) for p in _potions().find({"price": {"$gte": low, "$lte": high}})]


@router.get("/search")
def search_potions(name: Optional[str] = Query(default=None)):
    term = (name or "").strip()
    if not term:
        raise ValidationError("Query parameter 'name' is required")
    q = {"name": {"$regex": re.escape(term), "$options": "i"}}
    return [serialize(p) for p in _potions().find(q)]


@router.get("/{potion_id}")
def get_potion(potion_id: str):
    return serialize(_find_or_404(potion_id))


@router.put("/{potion_id}")
def replace_potion(potion_id: str, payload: Potion, claims: dict[str, Any] = Depends(require_auth)):
    oid = to_object_id(potion_id)
    if oid is None:
        raise NotFound("Potion not found")
    before = _potions().find_one_and_replace(
        {"_id": oid},
        payload.to_doc(),
        return_document=ReturnDocument.BEFORE,
    )
    if not before:
        raise NotFound("Potion not found")
    after = serialize({"_id": oid, **payload.to_doc()})
    logger.info("Potion %s replaced by %s", potion_id, claims["username"])
    write_audit("potion.update", claims["username"], potion_id, serialize(before), after)
    return after


@router.delete("/{potion_id}")
def delete_potion(potion_id: str, claims: dict[str, Any] = Depends(require_auth)):
    oid = to_object_id(potion_id)
    deleted = _potions().find_one_and_delete({"_id": oid}) if oid is not None else None
    if not deleted:
        raise NotFound("Potion not found")
    logger.info("Potion %s deleted by %s", potion_id, claims["username"])
    write_audit("potion.delete", claims["username"], potion_id, serialize(deleted), None)
    return serialize(deleted)
