# vahaan/api/contacts.py
"""Contact messages submitted through the website's contact form."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session

from .. import crud, services
from ..db import get_db
from ..errors import InvalidRequest
from ..models import Contact
from ..query import escape_like, paginate, parse_window
from ..schemas import ContactIn, ContactOut, ContactStatusUpdate, ContactTagUpdate
from ..utils import logger, now_utc
from .deps import dump, load

router = APIRouter(prefix="/api/contacts", tags=["contacts"])

CONTACT_SORT_FIELDS = {
    "createdAt": Contact.created_at,
    "updatedAt": Contact.updated_at,
    "name": Contact.name,
    "email": Contact.email,
    "subject": Contact.subject,
    "status": Contact.status,
    "priority": Contact.priority,
    "category": Contact.category,
}


def public(obj) -> dict:
    data = dump(ContactOut, obj)
    data.pop("internalNotes", None)
    return data


def stamp_response(values: Dict[str, Any]) -> Dict[str, Any]:
    # resolving or closing a message records when it was answered
    if values.get("status") in ("resolved", "closed") and not values.get("responded_at"):
        values["responded_at"] = now_utc()
    return values


def _parse_date(value: Optional[str], label: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise InvalidRequest(f"Invalid {label}")


def _page(db: Session, conds: List, page: Optional[str], limit: Optional[str], order_by: List) -> dict:
    page_num, limit_num = parse_window({"page": page, "limit": limit})
    res = crud.page(db, Contact, conds, page_num, limit_num, order_by)
    return {
        "contacts": [public(o) for o in res["items"]],
        "pagination": paginate(page_num, limit_num, res["total"]),
    }


@router.get("")
def list_contacts(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    priority: Optional[str] = None,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    search: Optional[str] = None,
    email: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    db: Session = Depends(get_db),
):
    conds = []
    if status:
        conds.append(Contact.status == status)
    if category:
        conds.append(Contact.category == category)
    if priority:
        conds.append(Contact.priority == priority)
    start = _parse_date(start_date, "startDate")
    end = _parse_date(end_date, "endDate")
    if start:
        conds.append(Contact.created_at >= start)
    if end:
        conds.append(Contact.created_at <= end)
    if search:
        pattern = f"%{escape_like(search)}%"
        conds.append(or_(
            Contact.name.ilike(pattern, escape="\\"),
            Contact.email.ilike(pattern, escape="\\"),
            Contact.subject.ilike(pattern, escape="\\"),
            Contact.message.ilike(pattern, escape="\\"),
        ))
    if email:
        conds.append(Contact.email.ilike(f"%{escape_like(email)}%", escape="\\"))

    column = CONTACT_SORT_FIELDS.get(sort_by or "")
    if column is None:
        order_by = [Contact.created_at.desc()]
    else:
        order_by = [column.desc() if sort_order == "desc" else column.asc()]
    return {"message": "Contacts retrieved successfully", "data": _page(db, conds, page, limit, order_by)}


@router.get("/stats")
def contact_statistics(db: Session = Depends(get_db)):
    return {"message": "Contact statistics retrieved successfully", "data": crud.contact_stats(db)}


@router.get("/category/{category}")
def contacts_by_category(
    category: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_db),
):
    data = _page(db, [Contact.category == category], page, limit, [Contact.created_at.desc()])
    return {"message": "Contacts retrieved successfully", "data": data}


@router.get("/priority/{priority}")
def contacts_by_priority(
    priority: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_db),
):
    data = _page(db, [Contact.priority == priority], page, limit, [Contact.created_at.desc()])
    return {"message": "Contacts retrieved successfully", "data": data}


@router.get("/{contact_id}")
def get_contact(contact_id: str, db: Session = Depends(get_db)):
    obj = load(db, Contact, contact_id, "contact")
    return {"message": "Contact retrieved successfully", "data": dump(ContactOut, obj)}


@router.post("", status_code=201)
def create_contact(payload: ContactIn, request: Request, db: Session = Depends(get_db)):
    values = payload.model_dump(mode="json")
    values["priority"] = services.contact_priority(payload.category, payload.priority)
    values["responded_at"] = payload.responded_at
    values["ip_address"] = request.client.host if request.client else None
    values["user_agent"] = request.headers.get("user-agent")
    obj = crud.create(db, Contact, stamp_response(values))
    return {"message": "Contact message submitted successfully", "data": dump(ContactOut, obj)}


@router.put("/{contact_id}")
def update_contact(contact_id: str, changes: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    obj = load(db, Contact, contact_id, "contact")
    doc = services.revise(ContactIn, obj, changes)
    values = doc.model_dump(mode="json")
    values["responded_at"] = doc.responded_at
    obj = crud.update(db, obj, stamp_response(values))
    return {"message": "Contact updated successfully", "data": dump(ContactOut, obj)}


@router.patch("/{contact_id}/status")
def update_contact_status(contact_id: str, payload: ContactStatusUpdate, db: Session = Depends(get_db)):
    if not payload.status:
        raise InvalidRequest("Status is required")
    obj = load(db, Contact, contact_id, "contact")
    values = {"status": payload.status, "responded_at": obj.responded_at}
    if payload.response_message:
        values["response_message"] = payload.response_message
    if payload.responded_by:
        values["responded_by"] = payload.responded_by
    obj = crud.update(db, obj, stamp_response(values))
    logger.info("Contact %s moved to %s", contact_id, payload.status)
    return {"message": "Contact status updated successfully", "data": dump(ContactOut, obj)}


@router.patch("/{contact_id}/tags")
def update_contact_tags(contact_id: str, payload: ContactTagUpdate, db: Session = Depends(get_db)):
    if not payload.action or not payload.tag:
        raise InvalidRequest("Action and tag are required")
    if payload.action not in ("add", "remove"):
        raise InvalidRequest('Invalid action. Use "add" or "remove"')
    obj = load(db, Contact, contact_id, "contact")
    tag = payload.tag.strip().lower()
    tags = list(obj.tags or [])
    if payload.action == "add" and tag not in tags:
        tags.append(tag)
    elif payload.action == "remove":
        tags = [t for t in tags if t != tag]
    obj = crud.update(db, obj, {"tags": tags})
    past = "added" if payload.action == "add" else "removed"
    return {"message": f"Tag {past} successfully", "data": dump(ContactOut, obj)}


@router.delete("/{contact_id}")
def delete_contact(contact_id: str, db: Session = Depends(get_db)):
    obj = load(db, Contact, contact_id, "contact")
    data = dump(ContactOut, obj)
    crud.delete(db, obj)
    return {"message": "Contact deleted successfully", "data": data}
