# vahaan/api/listings.py
"""Listing endpoints.

Bikes and scooters expose the same surface; `make_listing_router` builds one
router per vehicle kind.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from .. import crud, services
from ..db import get_db
from ..errors import InvalidRequest, NotFound
from ..query import ListingQuery, parse_listing_query, parse_price_bounds, parse_sort, parse_window
from ..schemas import ENGINE_TYPES, ListingOut
from ..utils import logger
from .deps import check_id, dump


def make_listing_router(kind: str) -> APIRouter:
    label = kind.capitalize()
    plural = f"{kind}s"
    router = APIRouter(prefix=f"/api/{plural}", tags=[plural])

    def load_listing(db: Session, listing_id: str):
        obj = crud.get_listing(db, kind, check_id(listing_id, kind))
        if obj is None:
            raise NotFound(kind)
        return obj

    def page_of(message: str, query: ListingQuery, db: Session) -> dict:
        res = crud.list_listings(db, query)
        return {
            "message": message,
            "data": {
                plural: [dump(ListingOut, o) for o in res["items"]],
                "pagination": query.pagination(res["total"]),
            },
        }

    @router.get("")
    def browse_listings(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        sort: Optional[str] = None,
        type: Optional[str] = None,
        condition: Optional[str] = None,
        min_price: Optional[str] = Query(None, alias="minPrice"),
        max_price: Optional[str] = Query(None, alias="maxPrice"),
        brand: Optional[str] = None,
        search: Optional[str] = None,
        availability: Optional[str] = None,
        db: Session = Depends(get_db),
    ):
        params = {
            "page": page,
            "limit": limit,
            "sort": sort,
            "type": type,
            "condition": condition,
            "minPrice": min_price,
            "maxPrice": max_price,
            "brand": brand,
            "search": search,
            "availability": availability,
        }
        query = parse_listing_query(kind, params)
        return page_of(f"{label}s retrieved successfully", query, db)

    @router.get("/stats/overview")
    def listing_statistics(db: Session = Depends(get_db)):
        return {
            "message": f"{label} statistics retrieved successfully",
            "data": crud.listing_stats(db, kind),
        }

    @router.get("/type/{engine_type}")
    def listings_by_type(
        engine_type: str,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        sort: Optional[str] = None,
        db: Session = Depends(get_db),
    ):
        if engine_type not in ENGINE_TYPES:
            raise InvalidRequest(f"Invalid {kind} type. Must be Petrol or Electric")
        page_num, limit_num = parse_window({"page": page, "limit": limit})
        query = ListingQuery(kind=kind, page=page_num, limit=limit_num, sort=parse_sort(sort), type=engine_type)
        return page_of(f"{engine_type} {plural} retrieved successfully", query, db)

    @router.get("/price-range/{min_price}/{max_price}")
    def listings_by_price_range(
        min_price: str,
        max_price: str,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        sort: Optional[str] = None,
        db: Session = Depends(get_db),
    ):
        low, high = parse_price_bounds(min_price, max_price)
        page_num, limit_num = parse_window({"page": page, "limit": limit})
        query = ListingQuery(
            kind=kind, page=page_num, limit=limit_num, sort=parse_sort(sort),
            min_price=low, max_price=high,
        )
        return page_of(f"{label}s in price range ₹{low:,} - ₹{high:,} retrieved successfully", query, db)

    @router.get("/{listing_id}")
    def get_listing(listing_id: str, db: Session = Depends(get_db)):
        obj = load_listing(db, listing_id)
        obj = crud.increment_view_count(db, obj)
        return {"message": f"{label} retrieved successfully", "data": dump(ListingOut, obj)}

    @router.post("", status_code=201)
    def create_listing(payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
        doc = services.build_listing(payload)
        obj = crud.create_listing(db, kind, doc)
        return {"message": f"{label} listed successfully", "data": dump(ListingOut, obj)}

    @router.put("/{listing_id}")
    def update_listing(listing_id: str, changes: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
        obj = load_listing(db, listing_id)
        doc = services.revise_listing(obj, changes)
        obj = crud.update_listing(db, obj, doc)
        logger.info("Updated %s listing %s", kind, listing_id)
        return {"message": f"{label} updated successfully", "data": dump(ListingOut, obj)}

    @router.delete("/{listing_id}")
    def delete_listing(listing_id: str, db: Session = Depends(get_db)):
        obj = load_listing(db, listing_id)
        # deleting an already inactive listing succeeds again
        obj = crud.soft_delete_listing(db, obj)
        logger.info("Deactivated %s listing %s", kind, listing_id)
        return {"message": f"{label} listing deleted successfully", "data": dump(ListingOut, obj)}

    @router.patch("/{listing_id}/sold")
    def mark_sold(listing_id: str, db: Session = Depends(get_db)):
        obj = load_listing(db, listing_id)
        obj = crud.mark_listing_sold(db, obj)
        return {"message": f"{label} marked as sold successfully", "data": dump(ListingOut, obj)}

    return router


bikes_router = make_listing_router("bike")
scooters_router = make_listing_router("scooter")
