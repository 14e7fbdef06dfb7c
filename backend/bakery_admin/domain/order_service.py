from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from bakery_admin.core.bakery_api import BakeryAPIClient, unwrap_list
from bakery_admin.core.errors import BakeryNotFoundError, BakeryRequestError
from bakery_admin.domain.order_status import ensure_status_transition, to_api_status

logger = logging.getLogger(__name__)

ORDERS_PATH = "/api/orders"
PRESET_DATE_RANGES = ("today", "yesterday", "this_week", "this_month", "last_month")
PICKUP_ADDRESS = "自取"

_ORDER_NUMBER_RE = re.compile(r"^ORD\d+$")
_PHONE_QUERY_RE = re.compile(r"^[0-9-]+$")
_EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
_PHONE_RE = re.compile(r"^[0-9-+() ]{8,15}$")


@dataclass(frozen=True)
class OrderFilters:
    search_query: str = ""
    status_filter: str = ""
    date_filter: str = ""
    company_name_filter: str = ""
    start_date: str = ""
    end_date: str = ""
    salesperson_id: str = ""


def classify_search_query(query: str) -> Optional[tuple[str, str]]:
    """Guess which order field a free-text search targets."""
    term = (query or "").strip()
    if not term:
        return None
    if _ORDER_NUMBER_RE.match(term):
        return "order_number", term
    if "@" in term:
        return "customer_email", term
    if _PHONE_QUERY_RE.match(term):
        return "customer_phone", term
    return "customer_name", term


def append_filter_params(params: list[tuple[str, str]], filters: OrderFilters) -> None:
    if filters.status_filter:
        params.append(("status", to_api_status(filters.status_filter)))

    search = classify_search_query(filters.search_query)
    if search is not None:
        params.append(search)

    if filters.company_name_filter:
        params.append(("companyName", filters.company_name_filter))

    if filters.date_filter in PRESET_DATE_RANGES:
        params.append(("date_range", filters.date_filter))
    elif filters.date_filter == "custom":
        if filters.start_date:
            params.append(("startDate", filters.start_date))
        if filters.end_date:
            params.append(("endDate", filters.end_date))

    if filters.salesperson_id:
        params.append(("salespersonId", filters.salesperson_id))


def build_order_query_params(
    filters: OrderFilters, page: int = 1, limit: int = 10
) -> list[tuple[str, str]]:
    params = [
        ("page", str(page)),
        ("limit", str(limit)),
        ("sortBy", "created_at"),
        ("sortOrder", "desc"),
    ]
    append_filter_params(params, filters)
    return params


def format_order_data(order: Optional[dict]) -> Optional[dict]:
    """Mirror ``items`` and ``orderItems`` so callers can rely on either."""
    if not order:
        return None
    formatted = dict(order)
    items = formatted.get("items")
    order_items = formatted.get("orderItems")
    if isinstance(items, list) and not order_items:
        formatted["orderItems"] = items
    elif isinstance(order_items, list) and not items:
        formatted["items"] = order_items
    return formatted


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _quantity(value: Any) -> Optional[float]:
    """Form inputs post quantities as strings; blank counts as zero."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def validate_order_form(form: dict) -> dict[str, str]:
    errors: dict[str, str] = {}

    customer = form.get("customer_info")
    if customer is not None and not isinstance(customer, dict):
        errors["customer_info"] = "客戶資料格式錯誤"
    elif customer is not None:
        if not _text(customer.get("name")):
            errors["customer_name"] = "客戶姓名為必填項"
        email = customer.get("email")
        if email and not _EMAIL_RE.match(str(email)):
            errors["customer_email"] = "請輸入有效的電子郵件格式"
        phone = customer.get("phone")
        if phone and not _PHONE_RE.match(str(phone)):
            errors["customer_phone"] = "請輸入有效的電話號碼"

    shipping = form.get("shipping_address")
    if shipping is not None and not isinstance(shipping, dict):
        errors["shipping_address"] = "配送地址格式錯誤"
    elif shipping is not None and shipping.get("address1") != PICKUP_ADDRESS:
        if not _text(shipping.get("recipientName")):
            errors["recipient_name"] = "收件人姓名為必填項"
        if not _text(shipping.get("phone")):
            errors["shipping_phone"] = "收件人電話為必填項"
        if not _text(shipping.get("address1")):
            errors["shipping_address"] = "配送地址為必填項"

    items = form.get("items")
    if not items or not isinstance(items, list):
        errors["items"] = "訂單必須包含至少一個商品"
    else:
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                errors[f"item_{index}_product"] = "商品為必選項"
                continue
            if not item.get("product_id"):
                errors[f"item_{index}_product"] = "商品為必選項"
            quantity = _quantity(item.get("quantity"))
            if quantity is None:
                errors[f"item_{index}_quantity"] = "數量格式錯誤"
            elif quantity <= 0:
                errors[f"item_{index}_quantity"] = "數量必須大於0"

    return errors


def _order_from(payload: Any) -> Optional[dict]:
    if isinstance(payload, dict):
        order = payload.get("order")
        if isinstance(order, dict):
            return format_order_data(order)
        return format_order_data(payload)
    return None


class OrderService:
    async def list_orders(
        self,
        client: BakeryAPIClient,
        filters: OrderFilters,
        *,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        params = build_order_query_params(filters, page=page, limit=limit)
        payload = await client.api_get(ORDERS_PATH, params=params)
        if not isinstance(payload, dict):
            return {"orders": unwrap_list(payload), "total": 0, "page": page, "totalPages": 1}
        orders = [format_order_data(o) for o in unwrap_list(payload, "orders", "data")]
        return {
            "orders": orders,
            "total": payload.get("total", len(orders)),
            "page": payload.get("page", page),
            "totalPages": payload.get("totalPages", 1),
        }

    async def pending_count(self, client: BakeryAPIClient) -> int:
        params = {"status": "pending", "page": 1, "limit": 1000}
        try:
            payload = await client.api_get(ORDERS_PATH, params=params)
        except Exception as exc:
            logger.warning("獲取待處理訂單數量錯誤: %s", exc)
            return 0
        return len(unwrap_list(payload, "orders"))

    async def get_order_detail(self, client: BakeryAPIClient, order_number: str) -> dict:
        payload = await client.api_post(f"{ORDERS_PATH}/check", {"order_number": order_number})
        order = _order_from(payload)
        if not order or not order.get("id"):
            raise BakeryNotFoundError("獲取的訂單數據格式不正確")
        return order

    async def update_order(self, client: BakeryAPIClient, order_id: str, form: dict) -> dict:
        errors = validate_order_form(form)
        if errors:
            raise BakeryRequestError("；".join(errors.values()), status_code=422)
        payload = await client.api_put(f"{ORDERS_PATH}/{order_id}", form)
        return _order_from(payload) or {}

    async def update_order_status(
        self,
        client: BakeryAPIClient,
        order_id: str,
        status: str,
        *,
        current_status: str | None = None,
        note: str | None = None,
    ) -> dict:
        if current_status is not None:
            try:
                ensure_status_transition(current_status, status)
            except ValueError as exc:
                raise BakeryRequestError(str(exc)) from exc
        payload = await client.api_put(
            f"{ORDERS_PATH}/{order_id}/status", {"status": status, "note": note}
        )
        return _order_from(payload) or {}

    async def cancel_order(self, client: BakeryAPIClient, order_number: str) -> dict:
        return await client.api_put(
            f"{ORDERS_PATH}/cancel-by-number", {"order_number": order_number}
        )

    async def add_order_item(
        self,
        client: BakeryAPIClient,
        order_id: str,
        *,
        product_id: str,
        quantity: int,
        price: float | None = None,
    ) -> dict:
        if quantity <= 0:
            raise BakeryRequestError("數量必須大於0")
        payload = await client.api_post(
            f"{ORDERS_PATH}/{order_id}/items",
            {"product_id": product_id, "quantity": quantity, "price": price},
        )
        return {"order": _order_from(payload)}

    async def update_order_items(
        self, client: BakeryAPIClient, order_id: str, items: list[dict]
    ) -> dict:
        payload = await client.api_put(f"{ORDERS_PATH}/{order_id}/items", {"items": items})
        return {"order": _order_from(payload)}

    async def delete_order_item(
        self, client: BakeryAPIClient, order_id: str, item_id: str
    ) -> dict:
        payload = await client.api_delete(f"{ORDERS_PATH}/{order_id}/items/{item_id}")
        message = payload.get("message") if isinstance(payload, dict) else None
        return {"order": _order_from(payload), "message": message or "項目刪除成功"}
