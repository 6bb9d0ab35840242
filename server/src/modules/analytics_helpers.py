from __future__ import annotations

import numbers
from typing import Any, Optional

from db_mongo import POTIONS_COL, get_col
from server.src.modules.errors import InvalidParameter

# external name -> stored attribute path
GROUP_FIELDS = {
    "vendor_id": "vendor_id",
    "category": "category",
    "categories": "category",
}
NUMERIC_FIELDS = {
    "score": "score",
    "price": "price",
    "ratings.strength": "ratings.strength",
    "ratings.flavor": "ratings.flavor",
    "ratings.duration": "ratings.duration",
    "ratings.sideEffects": "ratings.sideEffects",
    "strength": "ratings.strength",
    "flavor": "ratings.flavor",
    "duration": "ratings.duration",
    "sideEffects": "ratings.sideEffects",
}
METRICS = ("avg", "sum", "count")


def _potions():
    return get_col(POTIONS_COL)


def _resolve(value: Optional[str], allowed: dict[str, str], label: str) -> str:
    key = (value or "").strip()
    if not key:
        raise InvalidParameter(f"Missing parameter: {label}")
    if key not in allowed:
        raise InvalidParameter(f"Invalid {label}. Use one of: {', '.join(sorted(allowed))}")
    return allowed[key]


def build_search_pipeline(group_by: Optional[str], metric: Optional[str], field: Optional[str]) -> list[dict[str, Any]]:
    """Build the single ``$group`` stage for the generic report.

    Every caller-supplied name goes through an allow-list and is replaced by
    the stored attribute path before it reaches the pipeline. ``count``
    ignores ``field`` but still requires a valid one.
    """
    group_path = _resolve(group_by, GROUP_FIELDS, "groupBy")
    metric_key = (metric or "").strip()
    if not metric_key:
        raise InvalidParameter("Missing parameter: metric")
    if metric_key not in METRICS:
        raise InvalidParameter("Invalid metric. Use avg, sum or count.")
    field_path = _resolve(field, NUMERIC_FIELDS, "field")

    if metric_key == "count":
        accumulator: dict[str, Any] = {"$sum": 1}
    else:
        accumulator = {f"${metric_key}": f"${field_path}"}
    return [{"$group": {"_id": f"${group_path}", metric_key: accumulator}}]


def search(group_by: Optional[str], metric: Optional[str], field: Optional[str]) -> list[dict[str, Any]]:
    pipeline = build_search_pipeline(group_by, metric, field)
    return list(_potions().aggregate(pipeline))


def _average_score_by(group_path: str) -> list[dict[str, Any]]:
    pipeline = [{"$group": {"_id": f"${group_path}", "averageScore": {"$avg": "$score"}}}]
    return list(_potions().aggregate(pipeline))


def average_score_by_vendor() -> list[dict[str, Any]]:
    return _average_score_by(GROUP_FIELDS["vendor_id"])


def average_score_by_category() -> list[dict[str, Any]]:
    return _average_score_by(GROUP_FIELDS["category"])


def vendor_price_stats() -> list[dict[str, Any]]:
    pipeline = [
        {"$group": {
            "_id": "$vendor_id",
            "averagePrice": {"$avg": "$price"},
            "totalCount": {"$sum": 1},
        }}
    ]
    return list(_potions().aggregate(pipeline))


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def safe_ratio(numerator: Any, denominator: Any) -> Optional[float]:
    """Divide, or return None when either side is missing/non-numeric or the denominator is zero."""
    if not _is_number(numerator) or not _is_number(denominator) or denominator == 0:
        return None
    return numerator / denominator


def strength_flavor_ratio() -> list[dict[str, Any]]:
    projection = {"name": 1, "ratings.strength": 1, "ratings.flavor": 1}
    out = []
    for doc in _potions().find({}, projection):
        ratings = doc.get("ratings") or {}
        if not isinstance(ratings, dict):
            ratings = {}
        out.append({
            "_id": str(doc["_id"]),
            "name": doc.get("name"),
            "strengthFlavorRatio": safe_ratio(ratings.get("strength"), ratings.get("flavor")),
        })
    return out
