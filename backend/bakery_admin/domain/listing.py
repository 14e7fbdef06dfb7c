from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional, Sequence


def paginate(items: Sequence[Any], page: int | None, limit: int) -> dict:
    total = len(items)
    total_pages = max(1, math.ceil(total / limit)) if limit > 0 else 1
    valid_page = max(1, min(page or 1, total_pages))
    start = (valid_page - 1) * limit
    return {
        "data": list(items[start : start + limit]),
        "meta": {
            "total": total,
            "page": valid_page,
            "limit": limit,
            "totalPages": total_pages,
        },
    }


def _contains(value: Any, term: str) -> bool:
    return value is not None and term in str(value).lower()


def search_filter(
    items: Iterable[dict], search: str | None, fields: Sequence[str]
) -> list[dict]:
    term = (search or "").strip().lower()
    if not term:
        return list(items)
    return [item for item in items if any(_contains(item.get(f), term) for f in fields)]


def equals_filter(items: Iterable[dict], field: str, value: Any) -> list[dict]:
    if value is None or value == "":
        return list(items)
    return [item for item in items if item.get(field) == value]


def parse_parent_query(raw: str | None) -> Optional[int | str]:
    """``"null"`` selects top-level rows, digits select one parent, blank selects all."""
    value = (raw or "").strip()
    if not value:
        return None
    if value == "null":
        return "null"
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError("無效的父分類篩選") from exc


def filter_categories(
    categories: Iterable[dict],
    *,
    search: str | None = None,
    status: str | None = None,
    parent: str | None = None,
) -> list[dict]:
    filtered = search_filter(categories, search, ("name",))
    filtered = equals_filter(filtered, "status", status)
    parent_value = parse_parent_query(parent)
    if parent_value == "null":
        filtered = [c for c in filtered if c.get("parent_id") is None]
    elif parent_value is not None:
        filtered = [c for c in filtered if c.get("parent_id") == parent_value]
    return filtered


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_timestamp(value: Any) -> float:
    raw = str(value or "").strip()
    if not raw:
        return 0.0
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


PRODUCT_SORTERS: dict[str, tuple[Callable[[dict], float], bool]] = {
    "price_asc": (lambda p: _to_float(p.get("price")), False),
    "price_desc": (lambda p: _to_float(p.get("price")), True),
    "newest": (lambda p: _to_timestamp(p.get("created_at")), True),
}


def filter_products(
    products: Iterable[dict],
    *,
    search: str | None = None,
    category_id: str | None = None,
    status: str | None = None,
    sort_by: str | None = "newest",
) -> list[dict]:
    filtered = search_filter(
        products, search, ("name", "description", "short_description", "id")
    )
    if category_id:
        filtered = [
            p
            for p in filtered
            if p.get("categoryId") is not None and str(p.get("categoryId")) == category_id
        ]
    filtered = equals_filter(filtered, "status", status)
    if sort_by:
        key, reverse = PRODUCT_SORTERS.get(sort_by, PRODUCT_SORTERS["newest"])
        filtered = sorted(filtered, key=key, reverse=reverse)
    return filtered


def filter_coupons(
    coupons: Iterable[dict],
    *,
    search: str | None = None,
    is_active: bool | None = None,
) -> list[dict]:
    filtered = search_filter(coupons, search, ("code", "description"))
    if is_active is not None:
        filtered = [c for c in filtered if bool(c.get("isActive")) == is_active]
    return filtered
