"""Helpers shared by the domain services."""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Query

from caixa.sanitization import sanitize_optional

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50
MAX_LIMIT = 100


def to_decimal(value, places: int = 2) -> Decimal:
    """Quantize a float coming from the API into a Decimal for storage."""
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def clamp_page(page: Any) -> int:
    try:
        page = int(page)
    except (TypeError, ValueError):
        return DEFAULT_PAGE
    return page if page >= 1 else DEFAULT_PAGE


def clamp_limit(limit: Any) -> int:
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    if limit < 1:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def paginate(query: Query, page: Any, limit: Any) -> Tuple[list, Dict[str, int]]:
    """Apply offset/limit to an ordered query; returns (rows, pagination)."""
    page = clamp_page(page)
    limit = clamp_limit(limit)
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return rows, {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


def merged(current: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay explicitly sent fields on the current values."""
    result = dict(current)
    result.update(changes)
    return result


def clean_fields(data: Dict[str, Any], *fields: str) -> Dict[str, Optional[str]]:
    """Sanitize the named free-text fields of ``data``."""
    return {f: sanitize_optional(data.get(f)) for f in fields}
