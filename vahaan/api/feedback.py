# vahaan/api/feedback.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from .. import crud, services
from ..db import get_db
from ..errors import InvalidRequest
from ..identity import Identity, get_current_user
from ..models import Feedback
from ..query import paginate, parse_window
from ..schemas import FeedbackIn, FeedbackOut
from .deps import dump, ensure_owner, load

router = APIRouter(prefix="/api/feedback", tags=["feedback"])


@router.post("", status_code=201)
def submit_feedback(
    payload: FeedbackIn,
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    values = payload.model_dump(mode="json")
    values["user_id"] = user.id
    obj = crud.create(db, Feedback, values)
    return {"message": "Feedback submitted successfully", "data": {"feedback": dump(FeedbackOut, obj)}}


@router.get("/meta/types")
def feedback_types():
    return {"message": "Feedback types retrieved successfully", "data": {"feedbackTypes": services.FEEDBACK_TYPES}}


@router.get("/my-feedback")
def my_feedback(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    page_num, limit_num = parse_window({"page": page, "limit": limit})
    conds = [Feedback.user_id == user.id]
    if status:
        conds.append(Feedback.status == status)
    res = crud.page(db, Feedback, conds, page_num, limit_num, [Feedback.created_at.desc()])
    return {
        "message": "Feedback retrieved successfully",
        "data": {
            "feedback": [dump(FeedbackOut, o) for o in res["items"]],
            "pagination": paginate(page_num, limit_num, res["total"]),
        },
    }


@router.get("/{feedback_id}")
def get_feedback(
    feedback_id: str,
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    obj = load(db, Feedback, feedback_id, "feedback")
    ensure_owner(obj, user, "Not authorized to view this feedback")
    return {"message": "Feedback retrieved successfully", "data": {"feedback": dump(FeedbackOut, obj)}}


@router.put("/{feedback_id}")
def update_feedback(
    feedback_id: str,
    changes: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    obj = load(db, Feedback, feedback_id, "feedback")
    ensure_owner(obj, user, "Not authorized to update this feedback")
    if obj.status != "open":
        raise InvalidRequest("Cannot update feedback that is already being processed")
    doc = services.revise(FeedbackIn, obj, changes)
    obj = crud.update(db, obj, doc.model_dump(mode="json"))
    return {"message": "Feedback updated successfully", "data": {"feedback": dump(FeedbackOut, obj)}}


@router.delete("/{feedback_id}")
def delete_feedback(
    feedback_id: str,
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    obj = load(db, Feedback, feedback_id, "feedback")
    ensure_owner(obj, user, "Not authorized to delete this feedback")
    if obj.status != "open":
        raise InvalidRequest("Cannot delete feedback that is already being processed")
    crud.delete(db, obj)
    return {"message": "Feedback deleted successfully"}
