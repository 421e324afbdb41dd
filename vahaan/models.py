# vahaan/models.py
"""SQLAlchemy ORM models for persisted entities.

Bikes and scooters share the `Listing` table and are told apart by `kind`.
Nested document parts (location, seller, contact details, media) are JSON
columns; everything that is filtered or sorted on is a real column.
"""
from datetime import timezone
from sqlalchemy import Column, Integer, Float, Text, Boolean, DateTime, JSON, Index
from .db import Base
from .utils import new_id, now_utc, round_half_up


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)


class Listing(TimestampMixin, Base):
    __tablename__ = "listings"
    id = Column(Text, primary_key=True, default=new_id)
    kind = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    brand = Column(Text, nullable=False)
    model = Column(Text)
    year = Column(Integer, nullable=False)
    days_used = Column(Integer, nullable=False, default=0)
    condition = Column(Text, nullable=False)
    mileage = Column(Float, nullable=False, default=0)
    present_price = Column(Float, nullable=False)
    past_price = Column(Float, nullable=False)
    license = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    engine_capacity = Column(Text)
    battery_capacity = Column(Text)
    top_speed = Column(Float, nullable=False, default=0)
    images = Column(JSON, default=list)
    description = Column(Text)
    features = Column(JSON, default=list)
    location = Column(JSON, default=dict)
    seller = Column(JSON, nullable=False)
    contact_info = Column(JSON, default=dict)
    availability = Column(Text, nullable=False, default="available")
    is_promoted = Column(Boolean, nullable=False, default=False)
    rating = Column(Float, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)
    view_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    @property
    def discount(self) -> int:
        if not self.past_price:
            return 0
        return round_half_up((self.past_price - self.present_price) / self.past_price * 100)

    @property
    def price_difference(self) -> float:
        return (self.past_price or 0) - (self.present_price or 0)


Index("idx_listings_brand_name", Listing.brand, Listing.name)
Index("idx_listings_present_price", Listing.present_price)
Index("idx_listings_browse", Listing.kind, Listing.is_active, Listing.availability)
Index("idx_listings_created_at", Listing.created_at)


class ServiceRequest(TimestampMixin, Base):
    __tablename__ = "service_requests"
    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False, index=True)
    service_type = Column(Text, nullable=False)
    vehicle_details = Column(JSON, default=dict)
    contact_info = Column(JSON, nullable=False)
    service_details = Column(JSON, default=dict)
    status = Column(Text, nullable=False, default="pending")
    assigned_to = Column(Text)
    estimated_cost = Column(Float, nullable=False, default=0)
    actual_cost = Column(Float, nullable=False, default=0)
    notes = Column(JSON, default=list)


class Feedback(TimestampMixin, Base):
    __tablename__ = "feedback"
    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False, index=True)
    type = Column(Text, nullable=False)
    subject = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    rating = Column(Integer)
    status = Column(Text, nullable=False, default="open")
    priority = Column(Text, nullable=False, default="medium")
    response = Column(JSON)
    attachments = Column(JSON, default=list)
    is_anonymous = Column(Boolean, nullable=False, default=False)


class Contact(TimestampMixin, Base):
    __tablename__ = "contacts"
    id = Column(Text, primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, index=True)
    phone = Column(Text)
    subject = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    category = Column(Text, nullable=False, default="general", index=True)
    priority = Column(Text, nullable=False, default="medium", index=True)
    status = Column(Text, nullable=False, default="new", index=True)
    response_message = Column(Text)
    responded_by = Column(Text)
    responded_at = Column(DateTime(timezone=True))
    source = Column(Text, nullable=False, default="website")
    ip_address = Column(Text)
    user_agent = Column(Text)
    tags = Column(JSON, default=list)
    internal_notes = Column(Text)

    @property
    def is_resolved(self) -> bool:
        return self.status in ("resolved", "closed")

    @property
    def response_time(self):
        """Milliseconds between submission and response, or None."""
        if self.responded_at is None or self.created_at is None:
            return None
        delta = _aware(self.responded_at) - _aware(self.created_at)
        return abs(int(delta.total_seconds() * 1000))

    @property
    def days_since_created(self) -> int:
        if self.created_at is None:
            return 0
        seconds = abs((now_utc() - _aware(self.created_at)).total_seconds())
        return -(-int(seconds) // 86400)


def _aware(value):
    # SQLite hands back naive datetimes; everything is stored as UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
