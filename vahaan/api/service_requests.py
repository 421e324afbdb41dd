# vahaan/api/service_requests.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from .. import crud, services
from ..db import get_db
from ..errors import InvalidRequest
from ..identity import Identity, get_current_user
from ..models import ServiceRequest
from ..query import paginate, parse_window
from ..schemas import EmiInput, ServiceRequestIn, ServiceRequestOut
from ..utils import logger
from .deps import dump, ensure_owner, load

router = APIRouter(prefix="/api/services", tags=["services"])

RESOURCE = "service request"


@router.post("/request", status_code=201)
def create_service_request(
    payload: ServiceRequestIn,
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    values = payload.model_dump(mode="json")
    values["user_id"] = user.id
    obj = crud.create(db, ServiceRequest, values)
    return {
        "message": "Service request created successfully",
        "data": {"serviceRequest": dump(ServiceRequestOut, obj)},
    }


@router.get("/my-requests")
def my_service_requests(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    page_num, limit_num = parse_window({"page": page, "limit": limit})
    conds = [ServiceRequest.user_id == user.id]
    if status:
        conds.append(ServiceRequest.status == status)
    res = crud.page(db, ServiceRequest, conds, page_num, limit_num, [ServiceRequest.created_at.desc()])
    return {
        "message": "Service requests retrieved successfully",
        "data": {
            "requests": [dump(ServiceRequestOut, o) for o in res["items"]],
            "pagination": paginate(page_num, limit_num, res["total"]),
        },
    }


@router.get("/request/{request_id}")
def get_service_request(
    request_id: str,
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    obj = load(db, ServiceRequest, request_id, RESOURCE)
    ensure_owner(obj, user, "Not authorized to view this request")
    return {"message": "Service request retrieved successfully", "data": {"request": dump(ServiceRequestOut, obj)}}


@router.put("/request/{request_id}")
def update_service_request(
    request_id: str,
    changes: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    obj = load(db, ServiceRequest, request_id, RESOURCE)
    ensure_owner(obj, user, "Not authorized to update this request")
    if obj.status != "pending":
        raise InvalidRequest("Cannot update request that is already in progress")
    doc = services.revise(ServiceRequestIn, obj, changes)
    obj = crud.update(db, obj, doc.model_dump(mode="json"))
    return {"message": "Service request updated successfully", "data": {"request": dump(ServiceRequestOut, obj)}}


@router.delete("/request/{request_id}")
def cancel_service_request(
    request_id: str,
    db: Session = Depends(get_db),
    user: Identity = Depends(get_current_user),
):
    obj = load(db, ServiceRequest, request_id, RESOURCE)
    ensure_owner(obj, user, "Not authorized to cancel this request")
    if obj.status != "pending":
        raise InvalidRequest("Cannot cancel request that is already in progress")
    crud.update(db, obj, {"status": "cancelled"})
    logger.info("Cancelled service request %s", request_id)
    return {"message": "Service request cancelled successfully"}


@router.get("/types")
def service_types():
    return {"message": "Service types retrieved successfully", "data": {"serviceTypes": services.SERVICE_TYPES}}


@router.post("/emi-calculator")
def emi_calculator(payload: EmiInput):
    result = services.calculate_emi(payload.principal, payload.rate, payload.tenure)
    return {"message": "EMI calculated successfully", "data": result}
