# vahaan/services.py
"""Business rules that run before anything reaches the store.

`build_listing` and `revise_listing` are the single place where a listing
payload is defaulted and validated; the routers never persist a listing that
has not been through one of them.
"""
from typing import Any, Dict, Iterable, List, Optional, Type

from pydantic import BaseModel, ValidationError as PydanticValidationError

from .errors import InvalidRequest, ValidationError
from .schemas import ListingDocument, ListingFields
from .utils import logger, round_half_up

DEFAULT_SELLER_NAME = "Anonymous"
DEFAULT_SELLER_EMAIL = "noreply@example.com"

SERVICE_TYPES = [
    {
        "id": "insurance",
        "name": "Vehicle Insurance",
        "description": "Comprehensive vehicle insurance services",
        "estimatedTime": "1-3 business days",
    },
    {
        "id": "loan",
        "name": "Vehicle Loan",
        "description": "Easy vehicle loan processing",
        "estimatedTime": "3-7 business days",
    },
    {
        "id": "service",
        "name": "Vehicle Service",
        "description": "Regular maintenance and repair services",
        "estimatedTime": "1-2 days",
    },
    {
        "id": "roadside-assistance",
        "name": "Roadside Assistance",
        "description": "24/7 emergency roadside assistance",
        "estimatedTime": "30-60 minutes",
    },
    {
        "id": "warranty",
        "name": "Extended Warranty",
        "description": "Extended warranty services",
        "estimatedTime": "1-2 business days",
    },
]

FEEDBACK_TYPES = [
    {"id": "general", "name": "General Feedback", "description": "General comments or suggestions"},
    {"id": "bug-report", "name": "Bug Report", "description": "Report technical issues or bugs"},
    {"id": "feature-request", "name": "Feature Request", "description": "Request new features or improvements"},
    {"id": "complaint", "name": "Complaint", "description": "Report problems or issues with service"},
    {"id": "suggestion", "name": "Suggestion", "description": "Suggest improvements or new ideas"},
]


def error_messages(errors: Iterable[dict], skip_prefixes=()) -> List[str]:
    """Flatten pydantic error dicts into human readable strings."""
    messages = []
    for err in errors:
        msg = err.get("msg", "Invalid value")
        loc = [str(p) for p in err.get("loc", ()) if p not in skip_prefixes]
        if msg.startswith("Value error, "):
            # our own validators already phrase a complete sentence
            messages.append(msg[len("Value error, "):])
        elif loc:
            messages.append(f"{'.'.join(loc)}: {msg}")
        else:
            messages.append(msg)
    return messages


def validate(schema: Type[BaseModel], data: Dict[str, Any]):
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        messages = error_messages(e.errors())
        logger.info("Rejected %s payload: %s", schema.__name__, messages)
        raise ValidationError(messages)


def _pick(*values):
    for v in values:
        if v not in (None, ""):
            return v
    return None


def _section(payload: Dict[str, Any], *keys) -> Dict[str, Any]:
    for key in keys:
        value = payload.get(key)
        if isinstance(value, dict):
            return value
    return {}


def _default_contact_email(data: Dict[str, Any]) -> Dict[str, Any]:
    contact = dict(_section(data, "contactInfo", "contact_info"))
    seller = _section(data, "seller")
    if not contact.get("email") and seller.get("email"):
        contact["email"] = seller["email"]
    data.pop("contact_info", None)
    data["contactInfo"] = contact
    return data


def build_listing(payload: Dict[str, Any]) -> ListingDocument:
    """Default and validate a new listing submission.

    Seller details may arrive as a nested ``seller`` object or as the flat
    ``sellerName``/``sellerEmail``/``sellerPhone`` fields; contact details
    fall back to the seller's.
    """
    data = dict(payload)
    seller_in = _section(data, "seller")
    contact_in = _section(data, "contactInfo", "contact_info")
    seller_name = data.pop("sellerName", None)
    seller_email = data.pop("sellerEmail", None)
    seller_phone = data.pop("sellerPhone", None)
    whatsapp = data.pop("whatsapp", None)

    data["seller"] = {
        "name": _pick(seller_in.get("name"), seller_name) or DEFAULT_SELLER_NAME,
        "email": _pick(seller_in.get("email"), seller_email) or DEFAULT_SELLER_EMAIL,
        "phone": _pick(seller_in.get("phone"), seller_phone),
    }
    data["contactInfo"] = {
        "phone": _pick(contact_in.get("phone"), seller_in.get("phone"), seller_phone),
        "email": _pick(contact_in.get("email"), seller_in.get("email"), seller_email),
        "whatsapp": _pick(contact_in.get("whatsapp"), whatsapp),
    }
    data.pop("contact_info", None)
    return validate(ListingDocument, _default_contact_email(data))


_LISTING_KEYS = {
    **{name: name for name in ListingFields.model_fields},
    **{f.alias: name for name, f in ListingFields.model_fields.items() if f.alias},
}


def revise_listing(current: Any, changes: Dict[str, Any]) -> ListingDocument:
    """Apply a full or partial update on top of a stored listing and revalidate."""
    data = ListingFields.model_validate(current).model_dump()
    for key, value in changes.items():
        name = _LISTING_KEYS.get(key)
        if name is not None:
            data[name] = value
    data["contactInfo"] = data.pop("contact_info") or {}
    return validate(ListingDocument, _default_contact_email(data))


def revise(schema: Type[BaseModel], current: Any, changes: Dict[str, Any]):
    """Merge top-level changes over a stored record and revalidate with `schema`."""
    data = schema.model_validate(current).model_dump()
    keys = {
        **{name: name for name in schema.model_fields},
        **{f.alias: name for name, f in schema.model_fields.items() if f.alias},
    }
    for key, value in changes.items():
        name = keys.get(key)
        if name is not None:
            data[name] = value
    return validate(schema, data)


def calculate_emi(principal: Optional[float], rate: Optional[float], tenure: Optional[int]) -> Dict[str, Any]:
    """Equated monthly instalment for an amortised loan.

    ``rate`` is the annual interest rate in percent and ``tenure`` the number
    of monthly instalments.
    """
    if not principal or not rate or not tenure:
        raise InvalidRequest("Principal, rate, and tenure are required")
    if principal < 0 or rate < 0 or tenure < 0:
        raise InvalidRequest("Principal, rate, and tenure must be positive")
    monthly_rate = rate / (12 * 100)
    growth = (1 + monthly_rate) ** tenure
    emi = principal * monthly_rate * growth / (growth - 1)
    total_amount = emi * tenure
    return {
        "emi": round_half_up(emi),
        "totalAmount": round_half_up(total_amount),
        "totalInterest": round_half_up(total_amount - principal),
        "principal": principal,
        "rate": rate,
        "tenure": tenure,
    }


def contact_priority(category: str, priority: str) -> str:
    """Priority assigned to a newly submitted contact message."""
    if category in ("complaint", "support"):
        return "high"
    if category in ("sales", "partnership"):
        return "medium"
    return priority
