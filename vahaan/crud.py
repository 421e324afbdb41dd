# vahaan/crud.py
"""CRUD operations over the store.

Listing helpers take an already validated `ListingDocument`; validation and
defaulting live in `services.py`. The generic helpers at the bottom serve the
service-request, feedback and contact resources.
"""
from datetime import timedelta
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import func
from sqlalchemy.orm import Session

from .models import Contact, Listing
from .query import ListingQuery
from .schemas import ListingDocument
from .utils import logger, now_utc


def _document_values(doc: ListingDocument) -> Dict[str, Any]:
    return doc.model_dump(mode="json")


def create_listing(db: Session, kind: str, doc: ListingDocument) -> Listing:
    obj = Listing(kind=kind, **_document_values(doc))
    db.add(obj)
    db.commit()
    db.refresh(obj)
    logger.info("Created %s listing %s", kind, obj.id)
    return obj


def get_listing(db: Session, kind: str, listing_id: str) -> Optional[Listing]:
    # inactive listings are still reachable by id
    return db.query(Listing).filter(Listing.kind == kind, Listing.id == listing_id).first()


def list_listings(db: Session, query: ListingQuery) -> Dict[str, Any]:
    q = db.query(Listing).filter(*query.conditions())
    total = q.count()
    items = q.order_by(*query.order_by()).offset(query.offset).limit(query.limit).all()
    return {"total": total, "items": items}


def update_listing(db: Session, obj: Listing, doc: ListingDocument) -> Listing:
    for k, v in _document_values(doc).items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj


def soft_delete_listing(db: Session, obj: Listing) -> Listing:
    obj.is_active = False
    db.commit()
    db.refresh(obj)
    return obj


def mark_listing_sold(db: Session, obj: Listing) -> Listing:
    # any availability may move to sold; concurrent calls are last-write-wins
    obj.availability = "sold"
    db.commit()
    db.refresh(obj)
    return obj


def increment_view_count(db: Session, obj: Listing) -> Listing:
    # read-modify-write: concurrent readers may lose increments
    obj.view_count = (obj.view_count or 0) + 1
    db.commit()
    db.refresh(obj)
    return obj


def listing_stats(db: Session, kind: str) -> Dict[str, Any]:
    """Counts and price aggregates over active listings of one kind.

    Each figure is its own query, so they are not a consistent snapshot.
    """
    def count(*conds):
        return db.query(func.count(Listing.id)).filter(
            Listing.kind == kind, Listing.is_active.is_(True), *conds
        ).scalar() or 0

    avg_price, min_price, max_price = db.query(
        func.avg(Listing.present_price),
        func.min(Listing.present_price),
        func.max(Listing.present_price),
    ).filter(
        Listing.kind == kind,
        Listing.is_active.is_(True),
        Listing.availability == "available",
    ).one()

    return {
        "total": count(),
        "available": count(Listing.availability == "available"),
        "sold": count(Listing.availability == "sold"),
        "petrol": count(Listing.type == "Petrol"),
        "electric": count(Listing.type == "Electric"),
        "priceStats": {
            "avgPrice": float(avg_price or 0),
            "minPrice": float(min_price or 0),
            "maxPrice": float(max_price or 0),
        },
    }


# -- generic helpers ----------------------------------------------------------

def create(db: Session, model: Type, values: Dict[str, Any]):
    obj = model(**values)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    logger.info("Created %s %s", model.__tablename__, obj.id)
    return obj


def get(db: Session, model: Type, obj_id: str):
    return db.query(model).filter(model.id == obj_id).first()


def page(db: Session, model: Type, conds: List, page: int, limit: int, order_by: List) -> Dict[str, Any]:
    q = db.query(model).filter(*conds)
    total = q.count()
    items = q.order_by(*order_by, model.id.asc()).offset((page - 1) * limit).limit(limit).all()
    return {"total": total, "items": items}


def update(db: Session, obj, values: Dict[str, Any]):
    for k, v in values.items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj


def delete(db: Session, obj) -> None:
    db.delete(obj)
    db.commit()


def contact_stats(db: Session) -> Dict[str, Any]:
    by_status = dict(db.query(Contact.status, func.count(Contact.id)).group_by(Contact.status).all())
    by_priority = dict(db.query(Contact.priority, func.count(Contact.id)).group_by(Contact.priority).all())

    breakdown = {}
    for category, created_at, responded_at in db.query(Contact.category, Contact.created_at, Contact.responded_at):
        entry = breakdown.setdefault(category, {"category": category, "count": 0, "_times": []})
        entry["count"] += 1
        if responded_at is not None:
            entry["_times"].append(abs((responded_at - created_at).total_seconds()) * 1000)
    categories = []
    for entry in sorted(breakdown.values(), key=lambda e: e["count"], reverse=True):
        times = entry.pop("_times")
        entry["avgResponseTime"] = sum(times) / len(times) if times else None
        categories.append(entry)

    week_ago = now_utc() - timedelta(days=7)
    return {
        "total": sum(by_status.values()),
        "new": by_status.get("new", 0),
        "inProgress": by_status.get("in-progress", 0),
        "resolved": by_status.get("resolved", 0),
        "closed": by_status.get("closed", 0),
        "urgent": by_priority.get("urgent", 0),
        "high": by_priority.get("high", 0),
        "medium": by_priority.get("medium", 0),
        "low": by_priority.get("low", 0),
        "recentContacts": db.query(func.count(Contact.id)).filter(Contact.created_at >= week_ago).scalar() or 0,
        "pendingContacts": db.query(func.count(Contact.id)).filter(
            Contact.status.in_(("new", "in-progress"))
        ).scalar() or 0,
        "categoryBreakdown": categories,
    }
