import math
from datetime import datetime, timezone
from typing import Optional

from ticketing.constant_file import currency


def utcnow() -> datetime:
    # Naive UTC, matching the DateTime columns
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Converts offset-aware input to naive UTC; naive values are taken as UTC already."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def get_pagination(page: int = 1, limit: int = 10):
    page = max(int(page or 1), 1)
    limit = max(int(limit or 10), 1)
    return (page - 1) * limit, limit


def create_pagination_metadata(page: int, limit: int, total: int) -> dict:
    return {
        "current_page": page,
        "items_per_page": limit,
        "total_items": total,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }


def paginate(query, page: int, limit: int):
    """Runs a query page and returns (items, pagination metadata)."""
    skip, limit = get_pagination(page, limit)
    total = query.count()
    items = query.offset(skip).limit(limit).all()
    return items, create_pagination_metadata(max(page, 1), limit, total)


def format_amount(amount: Optional[float]) -> str:
    return f"{currency} {float(amount or 0):.2f}"
