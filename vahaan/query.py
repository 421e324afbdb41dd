# vahaan/query.py
"""Translate browse query parameters into filters, ordering and a page window.

Unknown enum values and unparsable numbers are dropped, not rejected. The
price-range endpoint goes through `parse_price_bounds`, which is strict.
"""
import math
import re
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple

from sqlalchemy import or_

from .errors import InvalidRequest
from .models import Listing
from .schemas import AVAILABILITY, CONDITIONS, ENGINE_TYPES

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_SORT = "-createdAt"

_INT_RE = re.compile(r"^\s*([-+]?\d+)")

# wire name -> column attribute
SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "presentPrice": "present_price",
    "pastPrice": "past_price",
    "year": "year",
    "mileage": "mileage",
    "daysUsed": "days_used",
    "topSpeed": "top_speed",
    "name": "name",
    "brand": "brand",
    "rating": "rating",
    "viewCount": "view_count",
}

SORT_ALIASES = {
    "newest": "-createdAt",
    "oldest": "createdAt",
    "price-asc": "presentPrice",
    "price-desc": "-presentPrice",
}


def parse_int(value: Any) -> Optional[int]:
    """Leading-integer parse: "12" -> 12, "12abc" -> 12, "abc" -> None."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    m = _INT_RE.match(str(value))
    return int(m.group(1)) if m else None


def parse_sort(value: Optional[str]) -> List[Tuple[str, bool]]:
    """Return [(column attribute, descending), ...] for a sort expression."""
    value = SORT_ALIASES.get((value or "").strip(), value)
    order = []
    for part in (value or "").split(","):
        part = part.strip()
        descending = part.startswith("-")
        name = part.lstrip("-+")
        column = SORT_FIELDS.get(name)
        if column and column not in [c for c, _ in order]:
            order.append((column, descending))
    if not order:
        return parse_sort(DEFAULT_SORT)
    return order


@dataclass
class ListingQuery:
    kind: str
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort: List[Tuple[str, bool]] = field(default_factory=lambda: parse_sort(DEFAULT_SORT))
    availability: Optional[str] = "available"
    type: Optional[str] = None
    condition: Optional[str] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    brand: Optional[str] = None
    search: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def conditions(self) -> list:
        conds = [Listing.kind == self.kind, Listing.is_active.is_(True)]
        if self.availability is not None:
            conds.append(Listing.availability == self.availability)
        if self.type:
            conds.append(Listing.type == self.type)
        if self.condition:
            conds.append(Listing.condition == self.condition)
        if self.brand:
            conds.append(Listing.brand.ilike(f"%{escape_like(self.brand)}%", escape="\\"))
        if self.min_price is not None:
            conds.append(Listing.present_price >= self.min_price)
        if self.max_price is not None:
            conds.append(Listing.present_price <= self.max_price)
        if self.search:
            pattern = f"%{escape_like(self.search)}%"
            conds.append(or_(
                Listing.name.ilike(pattern, escape="\\"),
                Listing.brand.ilike(pattern, escape="\\"),
                Listing.description.ilike(pattern, escape="\\"),
            ))
        return conds

    def order_by(self) -> list:
        clauses = []
        for column, descending in self.sort:
            col = getattr(Listing, column)
            clauses.append(col.desc() if descending else col.asc())
        # stable order across pages when the sort key ties
        clauses.append(Listing.id.asc())
        return clauses

    def pagination(self, total: int) -> dict:
        return paginate(self.page, self.limit, total)


def paginate(page: int, limit: int, total: int) -> dict:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "totalCount": total,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }


def parse_window(params: Mapping[str, Any]) -> Tuple[int, int]:
    page = parse_int(params.get("page"))
    limit = parse_int(params.get("limit"))
    page = page if page is not None and page >= 1 else DEFAULT_PAGE
    limit = limit if limit is not None and limit >= 1 else DEFAULT_LIMIT
    return page, limit


def parse_listing_query(kind: str, params: Mapping[str, Any]) -> ListingQuery:
    """Build a `ListingQuery` from raw query-string values."""
    page, limit = parse_window(params)
    type_ = params.get("type")
    condition = params.get("condition")
    availability = params.get("availability")
    return ListingQuery(
        kind=kind,
        page=page,
        limit=limit,
        sort=parse_sort(params.get("sort")),
        availability=availability if availability in AVAILABILITY else "available",
        type=type_ if type_ in ENGINE_TYPES else None,
        condition=condition if condition in CONDITIONS else None,
        min_price=parse_int(params.get("minPrice")),
        max_price=parse_int(params.get("maxPrice")),
        brand=params.get("brand") or None,
        search=params.get("search") or None,
    )


def parse_price_bounds(min_price: str, max_price: str) -> Tuple[int, int]:
    low, high = parse_int(min_price), parse_int(max_price)
    if low is None or high is None or low < 0 or high < 0 or low > high:
        raise InvalidRequest("Invalid price range")
    return low, high


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
