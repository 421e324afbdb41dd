# vahaan/api/deps.py
"""Helpers shared by the routers: id checks, record loading, serialization."""
from typing import Any, Type

from pydantic import BaseModel
from sqlalchemy.orm import Session

from .. import crud
from ..errors import Forbidden, MalformedIdentifier, NotFound
from ..identity import Identity
from ..utils import canonical_id


def dump(schema: Type[BaseModel], obj: Any) -> dict:
    return schema.model_validate(obj).model_dump(by_alias=True, mode="json")


def check_id(obj_id: str, resource: str) -> str:
    """Return the stored form of `obj_id`, or raise 400 if it is not a UUID."""
    canonical = canonical_id(obj_id)
    if canonical is None:
        raise MalformedIdentifier(resource)
    return canonical


def load(db: Session, model, obj_id: str, resource: str):
    obj = crud.get(db, model, check_id(obj_id, resource))
    if obj is None:
        raise NotFound(resource)
    return obj


def ensure_owner(obj, user: Identity, message: str) -> None:
    if obj.user_id != user.id:
        raise Forbidden(message)
