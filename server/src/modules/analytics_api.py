from typing import Optional

from fastapi import APIRouter, Query

from server.src.modules import analytics_helpers

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/average_score_by_vendor")
def average_score_by_vendor():
    return analytics_helpers.average_score_by_vendor()


@router.get("/average_score_by_category")
def average_score_by_category():
    return analytics_helpers.average_score_by_category()


@router.get("/strength_flavor_ratio")
def strength_flavor_ratio():
    return analytics_helpers.strength_flavor_ratio()


@router.get("/group")
def vendor_price_stats():
    return analytics_helpers.vendor_price_stats()


@router.get("/search")
def search(
    group_by: Optional[str] = Query(default=None, alias="groupBy"),
    metric: Optional[str] = Query(default=None),
    field: Optional[str] = Query(default=None),
):
    return analytics_helpers.search(group_by, metric, field)
