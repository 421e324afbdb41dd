# vahaan/schemas.py
"""Pydantic schemas for request validation and response serialization.

Field names are snake_case in Python and camelCase on the wire.
"""
import re
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .utils import now_utc

ENGINE_TYPES = ("Petrol", "Electric")
CONDITIONS = ("Excellent", "Good", "Fair", "Poor")
AVAILABILITY = ("available", "sold", "reserved")

_PHONE_RE = re.compile(r"^[0-9]{10}$")
_LICENSE_RE = re.compile(r"^[A-Z0-9]+$")
_IMAGE_RE = re.compile(r"^data:image/(jpeg|jpg|png|gif);base64,|^https?://")
_CONTACT_PHONE_RE = re.compile(r"^\+?[1-9]\d{0,15}$")


class Schema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


def _ten_digits(value: Optional[str], label: str) -> Optional[str]:
    if value in (None, ""):
        return None
    if not _PHONE_RE.match(value):
        raise ValueError(f"Please enter a valid 10-digit {label} number")
    return value


# ---------------------------------------------------------------- listings

class Location(Schema):
    city: Optional[str] = None
    state: Optional[str] = None
    country: str = "India"


class Seller(Schema):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return v.lower()

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _ten_digits(v, "phone")


class ListingContactInfo(Schema):
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    whatsapp: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email(cls, v):
        return v or None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return v.lower() if v else v

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _ten_digits(v, "phone")

    @field_validator("whatsapp")
    @classmethod
    def check_whatsapp(cls, v):
        return _ten_digits(v, "WhatsApp")


class ListingFields(Schema):
    name: str = Field(..., min_length=1, max_length=100)
    brand: str = Field(..., min_length=1, max_length=50)
    model: Optional[str] = Field(None, max_length=50)
    year: int
    days_used: int = Field(..., ge=0)
    condition: Literal["Excellent", "Good", "Fair", "Poor"]
    mileage: float = Field(..., ge=0)
    present_price: float = Field(..., ge=0)
    past_price: float = Field(..., ge=0)
    license: str
    type: Literal["Petrol", "Electric"]
    engine_capacity: Optional[str] = None
    battery_capacity: Optional[str] = None
    top_speed: float = Field(..., ge=0)
    images: List[str] = Field(default_factory=list)
    description: Optional[str] = Field(None, max_length=1000)
    features: List[str] = Field(default_factory=list)
    location: Location = Field(default_factory=Location)
    seller: Seller
    contact_info: ListingContactInfo = Field(default_factory=ListingContactInfo)
    availability: Literal["available", "sold", "reserved"] = "available"
    is_promoted: bool = False
    rating: float = Field(0, ge=0, le=5)
    review_count: int = Field(0, ge=0)
    view_count: int = Field(0, ge=0)
    is_active: bool = True


class ListingDocument(ListingFields):
    """A complete, validated listing as it is persisted.

    Every write path goes through this model, so the capacity rule and the
    numeric bounds hold for creates and updates alike.
    """

    @field_validator("year")
    @classmethod
    def check_year(cls, v):
        if v < 2000:
            raise ValueError("Year must be 2000 or later")
        if v > now_utc().year + 1:
            raise ValueError("Year cannot be in the future")
        return v

    @field_validator("license")
    @classmethod
    def normalize_license(cls, v):
        v = v.upper()
        if not _LICENSE_RE.match(v):
            raise ValueError("Please enter a valid license number")
        return v

    @field_validator("images")
    @classmethod
    def check_images(cls, v):
        for image in v:
            if not _IMAGE_RE.match(image):
                raise ValueError("Please provide a valid image URL or base64 string")
        return v

    @field_validator("features")
    @classmethod
    def strip_features(cls, v):
        return [f.strip() for f in v]

    @model_validator(mode="after")
    def check_capacity(self):
        if self.type == "Petrol" and not self.engine_capacity:
            raise ValueError("Engine capacity is required for petrol vehicles")
        if self.type == "Electric" and not self.battery_capacity:
            raise ValueError("Battery capacity is required for electric vehicles")
        return self


class ListingOut(ListingFields):
    id: str
    kind: str
    discount: int
    price_difference: float
    created_at: datetime
    updated_at: datetime


# -------------------------------------------------------- service requests

class VehicleDetails(Schema):
    type: Optional[Literal["bike", "scooter", "car"]] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    registration_number: Optional[str] = None


class Address(Schema):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None


class RequesterContact(Schema):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: EmailStr
    address: Optional[Address] = None


class ServiceDetails(Schema):
    description: Optional[str] = None
    preferred_date: Optional[datetime] = None
    preferred_time: Optional[str] = None
    urgency: Literal["low", "medium", "high"] = "medium"


class ServiceNote(Schema):
    message: str
    timestamp: datetime = Field(default_factory=now_utc)
    added_by: Optional[str] = None


class ServiceRequestIn(Schema):
    service_type: Literal["insurance", "loan", "service", "roadside-assistance", "warranty"]
    vehicle_details: VehicleDetails = Field(default_factory=VehicleDetails)
    contact_info: RequesterContact
    service_details: ServiceDetails = Field(default_factory=ServiceDetails)
    status: Literal["pending", "in-progress", "completed", "cancelled"] = "pending"
    assigned_to: Optional[str] = None
    estimated_cost: float = Field(0, ge=0)
    actual_cost: float = Field(0, ge=0)
    notes: List[ServiceNote] = Field(default_factory=list)


class ServiceRequestOut(ServiceRequestIn):
    id: str
    user: str = Field(validation_alias="user_id")
    created_at: datetime
    updated_at: datetime


class EmiInput(Schema):
    principal: Optional[float] = None
    rate: Optional[float] = None
    tenure: Optional[int] = None


# ---------------------------------------------------------------- feedback

class Attachment(Schema):
    filename: Optional[str] = None
    url: Optional[str] = None


class FeedbackResponse(Schema):
    message: Optional[str] = None
    responded_by: Optional[str] = None
    responded_at: Optional[datetime] = None


class FeedbackIn(Schema):
    type: Literal["general", "bug-report", "feature-request", "complaint", "suggestion"]
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=1000)
    rating: Optional[int] = Field(None, ge=1, le=5)
    status: Literal["open", "in-review", "resolved", "closed"] = "open"
    priority: Literal["low", "medium", "high", "urgent"] = "medium"
    response: Optional[FeedbackResponse] = None
    attachments: List[Attachment] = Field(default_factory=list)
    is_anonymous: bool = False


class FeedbackOut(FeedbackIn):
    id: str
    user: str = Field(validation_alias="user_id")
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------- contacts

ContactCategory = Literal["general", "support", "sales", "feedback", "complaint", "partnership"]
ContactPriority = Literal["low", "medium", "high", "urgent"]
ContactStatus = Literal["new", "in-progress", "resolved", "closed"]


class ContactIn(Schema):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: Optional[str] = None
    subject: str = Field(..., min_length=5, max_length=200)
    message: str = Field(..., min_length=10, max_length=2000)
    category: ContactCategory = "general"
    priority: ContactPriority = "medium"
    status: ContactStatus = "new"
    response_message: Optional[str] = Field(None, max_length=2000)
    responded_by: Optional[str] = None
    responded_at: Optional[datetime] = None
    source: Literal["website", "mobile-app", "phone", "email", "social-media"] = "website"
    tags: List[str] = Field(default_factory=list)
    internal_notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return v.lower()

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        if v in (None, ""):
            return None
        if not _CONTACT_PHONE_RE.match(v):
            raise ValueError("Please enter a valid phone number")
        return v

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v):
        tags = []
        for tag in v:
            tag = tag.strip().lower()
            if tag and tag not in tags:
                tags.append(tag)
        return tags


class ContactOut(ContactIn):
    id: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    is_resolved: bool
    response_time: Optional[int] = None
    days_since_created: int
    created_at: datetime
    updated_at: datetime


class ContactStatusUpdate(Schema):
    status: Optional[ContactStatus] = None
    response_message: Optional[str] = Field(None, max_length=2000)
    responded_by: Optional[str] = None


class ContactTagUpdate(Schema):
    action: Optional[str] = None
    tag: Optional[str] = None
