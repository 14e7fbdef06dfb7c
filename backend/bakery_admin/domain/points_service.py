from __future__ import annotations

import logging
import math
from typing import Any, Optional

from bakery_admin.core.bakery_api import BakeryAPIClient, ensure_success, unwrap_list
from bakery_admin.core.errors import BakeryRequestError

logger = logging.getLogger(__name__)

POINTS_ADMIN_PATH = "/api/points/admin"
USER_POINTS_PATH = f"{POINTS_ADMIN_PATH}/users/points"
EARN_PATH = f"{POINTS_ADMIN_PATH}/earn"
DEDUCT_PATH = f"{POINTS_ADMIN_PATH}/deduct"
TRANSACTIONS_PATH = f"{POINTS_ADMIN_PATH}/transactions"
OVERVIEW_STATS_PATH = f"{POINTS_ADMIN_PATH}/stats/overview"
DAILY_STATS_PATH = f"{POINTS_ADMIN_PATH}/stats/daily"
CARD_PRODUCTS_PATH = f"{POINTS_ADMIN_PATH}/virtual-cards/products"
CARD_PURCHASES_PATH = f"{POINTS_ADMIN_PATH}/virtual-cards/purchases"
CARD_PAYMENT_PATH = f"{POINTS_ADMIN_PATH}/virtual-cards/purchase/{{purchase_id}}/payment"
CARD_STATS_PATH = f"{POINTS_ADMIN_PATH}/virtual-cards/stats"
SETTINGS_PATH = f"{POINTS_ADMIN_PATH}/settings"
EXPORT_PATH = f"{POINTS_ADMIN_PATH}/export"

DEFAULT_DAILY_STATS_DAYS = 30

TRANSACTION_TYPE_LABELS = {
    "earn_purchase": "購買獲得",
    "use_payment": "使用抵扣",
    "virtual_card_redeem": "點數卡兌換",
    "admin_adjust": "管理員調整",
}

TRANSACTION_STATUS_LABELS = {
    "completed": "已完成",
    "pending": "處理中",
    "failed": "失敗",
    "cancelled": "已取消",
}

PAYMENT_STATUS_LABELS = {
    "paid": "已完成",
    "pending": "處理中",
    "failed": "失敗",
    "cancelled": "已取消",
}

CARD_STATUSES = ("active", "inactive")
EXPORT_TYPES = ("transactions", "user_points", "virtual_card_purchases")
EXPORT_FORMATS = ("json", "csv")

USER_POINTS_FILTER_KEYS = ("page", "limit", "search", "sortBy", "sortOrder")
TRANSACTION_FILTER_KEYS = (
    "page",
    "limit",
    "transactionType",
    "status",
    "startDate",
    "endDate",
    "lineUserId",
)
PURCHASE_FILTER_KEYS = ("page", "limit", "paymentStatus", "startDate", "endDate")


def transaction_type_label(transaction_type: str) -> str:
    return TRANSACTION_TYPE_LABELS.get(transaction_type, transaction_type)


def transaction_status_label(status: str) -> str:
    return TRANSACTION_STATUS_LABELS.get(status, status)


def payment_status_label(status: str) -> str:
    return PAYMENT_STATUS_LABELS.get(status, status)


def _present(filters: dict, keys: tuple[str, ...]) -> dict:
    return {key: filters[key] for key in keys if filters.get(key) not in (None, "")}


def _paginated(payload: Any) -> dict:
    pagination = payload.get("pagination") if isinstance(payload, dict) else None
    records = unwrap_list(payload, "data")
    return {"data": records, "pagination": pagination or {"total": len(records)}}


def _positive_int(value: Any, message: str) -> int:
    if isinstance(value, bool):
        raise BakeryRequestError(message)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise BakeryRequestError(message) from None
    if not math.isfinite(number) or number <= 0 or not number.is_integer():
        raise BakeryRequestError(message)
    return int(number)


def _line_user_id(value: Any) -> int:
    return _positive_int(value, "請選擇用戶")


def normalize_card_product(data: dict, *, partial: bool = False) -> dict:
    """Validate a virtual card product form; strings from inputs are coerced."""
    product = dict(data)
    if not partial or "name" in product:
        name = str(product.get("name") or "").strip()
        if not name:
            raise BakeryRequestError("商品名稱不能為空")
        product["name"] = name
    if not partial or "price" in product:
        try:
            price = float(product.get("price"))
        except (TypeError, ValueError):
            raise BakeryRequestError("價格格式錯誤") from None
        if not math.isfinite(price) or price < 0:
            raise BakeryRequestError("價格不能為負數")
        product["price"] = price
    if not partial or "pointsValue" in product:
        product["pointsValue"] = _positive_int(product.get("pointsValue"), "點數必須為正整數")
    if "status" in product and product["status"] not in CARD_STATUSES:
        raise BakeryRequestError(f"無效的商品狀態: {product['status']}")
    return product


def _setting_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _sales_row(row: dict) -> dict:
    def number(key: str) -> float:
        try:
            return float(row.get(key) or 0)
        except (TypeError, ValueError):
            return 0.0

    return {
        "name": row.get("name"),
        "purchase_count": int(number("purchase_count")),
        "total_revenue": number("total_revenue"),
        "total_points": int(number("total_points")),
    }


class PointsService:
    async def list_user_points(self, client: BakeryAPIClient, filters: dict) -> dict:
        params = _present(filters, USER_POINTS_FILTER_KEYS)
        payload = await client.api_get(USER_POINTS_PATH, params=params)
        return _paginated(ensure_success(payload, "載入用戶點數失敗"))

    async def earn_points(
        self,
        client: BakeryAPIClient,
        line_user_id: Any,
        amount: Any,
        *,
        description: Optional[str] = None,
        admin_note: Optional[str] = None,
    ) -> dict:
        body = {
            "lineUserId": _line_user_id(line_user_id),
            "amount": _positive_int(amount, "點數必須為正整數"),
            "description": description,
            "adminNote": admin_note,
        }
        payload = ensure_success(await client.api_post(EARN_PATH, body), "給予點數失敗")
        logger.info("granted %s points to line user %s", body["amount"], body["lineUserId"])
        return payload

    async def deduct_points(
        self,
        client: BakeryAPIClient,
        line_user_id: Any,
        points: Any,
        *,
        description: Optional[str] = None,
        admin_note: Optional[str] = None,
    ) -> dict:
        body = {
            "lineUserId": _line_user_id(line_user_id),
            "points": _positive_int(points, "點數必須為正整數"),
            "description": description,
            "adminNote": admin_note,
        }
        payload = ensure_success(await client.api_post(DEDUCT_PATH, body), "扣除點數失敗")
        logger.info("deducted %s points from line user %s", body["points"], body["lineUserId"])
        return payload

    async def list_transactions(self, client: BakeryAPIClient, filters: dict) -> dict:
        params = _present(filters, TRANSACTION_FILTER_KEYS)
        payload = await client.api_get(TRANSACTIONS_PATH, params=params)
        result = _paginated(ensure_success(payload, "載入交易記錄失敗"))
        for record in result["data"]:
            record.setdefault("type_label", transaction_type_label(record.get("transactionType", "")))
            record.setdefault("status_label", transaction_status_label(record.get("status", "")))
        return result

    async def overview_stats(
        self,
        client: BakeryAPIClient,
        *,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Any:
        params = _present({"startDate": start_date, "endDate": end_date}, ("startDate", "endDate"))
        payload = await client.api_get(OVERVIEW_STATS_PATH, params=params)
        return ensure_success(payload, "載入點數統計失敗")

    async def daily_stats(self, client: BakeryAPIClient, days: int = DEFAULT_DAILY_STATS_DAYS) -> Any:
        if days < 1:
            raise BakeryRequestError("天數必須大於 0")
        payload = await client.api_get(DAILY_STATS_PATH, params={"days": days})
        return ensure_success(payload, "載入每日統計失敗")

    async def list_card_products(
        self, client: BakeryAPIClient, *, include_inactive: bool = False
    ) -> list[dict]:
        params = {"includeInactive": "true"} if include_inactive else None
        payload = await client.api_get(CARD_PRODUCTS_PATH, params=params)
        return unwrap_list(ensure_success(payload, "載入虛擬卡產品失敗"), "data")

    async def create_card_product(self, client: BakeryAPIClient, data: dict) -> dict:
        product = normalize_card_product(data)
        payload = await client.api_post(CARD_PRODUCTS_PATH, product)
        return ensure_success(payload, "創建產品失敗")

    async def update_card_product(self, client: BakeryAPIClient, product_id: str, data: dict) -> dict:
        product = normalize_card_product(data, partial=True)
        payload = await client.api_put(f"{CARD_PRODUCTS_PATH}/{product_id}", product)
        return ensure_success(payload, "更新產品失敗")

    async def update_card_product_status(
        self, client: BakeryAPIClient, product_id: str, status: str
    ) -> dict:
        if status not in CARD_STATUSES:
            raise BakeryRequestError(f"無效的商品狀態: {status}")
        payload = await client.api_patch(
            f"{CARD_PRODUCTS_PATH}/{product_id}/status", {"status": status}
        )
        return ensure_success(payload, "更新商品狀態失敗")

    async def list_card_purchases(self, client: BakeryAPIClient, filters: dict) -> dict:
        params = _present(filters, PURCHASE_FILTER_KEYS)
        payload = await client.api_get(CARD_PURCHASES_PATH, params=params)
        result = _paginated(ensure_success(payload, "載入購買記錄失敗"))
        for record in result["data"]:
            record.setdefault(
                "payment_status_label", payment_status_label(record.get("paymentStatus", ""))
            )
        return result

    async def update_payment_status(
        self,
        client: BakeryAPIClient,
        purchase_id: str,
        payment_status: str,
        *,
        transaction_id: Optional[str] = None,
        payment_details: Any = None,
        admin_note: Optional[str] = None,
    ) -> dict:
        if payment_status not in PAYMENT_STATUS_LABELS:
            raise BakeryRequestError(f"無效的支付狀態: {payment_status}")
        body = {
            "paymentStatus": payment_status,
            "transactionId": transaction_id,
            "paymentDetails": payment_details,
            "adminNote": admin_note,
        }
        payload = await client.api_put(CARD_PAYMENT_PATH.format(purchase_id=purchase_id), body)
        logger.info("virtual card purchase %s set to %s", purchase_id, payment_status)
        return ensure_success(payload, "更新支付狀態失敗")

    async def card_sales_stats(self, client: BakeryAPIClient) -> list[dict]:
        payload = ensure_success(await client.api_get(CARD_STATS_PATH), "載入銷售統計失敗")
        return [_sales_row(row) for row in unwrap_list(payload, "data") if isinstance(row, dict)]

    async def get_settings(self, client: BakeryAPIClient) -> list[dict]:
        payload = ensure_success(await client.api_get(SETTINGS_PATH), "載入系統設定失敗")
        return unwrap_list(payload, "data")

    async def update_settings(self, client: BakeryAPIClient, settings: list[dict]) -> list[dict]:
        if not settings:
            raise BakeryRequestError("沒有需要更新的設定")
        body = {
            "settings": [
                {"id": item.get("id"), "settingValue": _setting_value(item.get("settingValue"))}
                for item in settings
            ]
        }
        payload = ensure_success(await client.api_put(SETTINGS_PATH, body), "保存設定失敗")
        return unwrap_list(payload, "data")

    async def export_data(
        self,
        client: BakeryAPIClient,
        export_type: str,
        *,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        file_format: str = "json",
    ) -> Any:
        if export_type not in EXPORT_TYPES:
            raise BakeryRequestError(f"無效的匯出類型: {export_type}")
        if file_format not in EXPORT_FORMATS:
            raise BakeryRequestError(f"無效的匯出格式: {file_format}")
        body = {
            "type": export_type,
            "startDate": start_date,
            "endDate": end_date,
            "format": file_format,
        }
        return ensure_success(await client.api_post(EXPORT_PATH, body), "匯出資料失敗")
