from __future__ import annotations

from datetime import date
from typing import Any, Optional

from bakery_admin.core.bakery_api import BakeryAPIClient, unwrap_list
from bakery_admin.core.errors import BakeryRequestError
from bakery_admin.domain.listing import filter_coupons, paginate

COUPONS_PATH = "/api/coupons"


def _parse_day(value: Any, field: str) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise BakeryRequestError(f"{field} 日期格式錯誤") from exc


def normalize_coupon(data: dict) -> dict:
    """Validate a coupon form and return the payload sent to the API."""
    code = str(data.get("code") or "").strip().upper()
    if not code:
        raise BakeryRequestError("優惠碼不能為空")

    try:
        discount = float(data.get("discount"))
    except (TypeError, ValueError):
        discount = 0.0
    if discount <= 0:
        raise BakeryRequestError("折扣必須大於 0")

    is_percentage = bool(data.get("isPercentage"))
    if is_percentage and discount > 100:
        raise BakeryRequestError("百分比折扣不能超過 100")

    start = _parse_day(data.get("startDate"), "startDate")
    end = _parse_day(data.get("endDate"), "endDate")
    if start and end and end < start:
        raise BakeryRequestError("結束日期不能早於開始日期")

    payload = dict(data)
    payload.update(
        {
            "code": code,
            "discount": int(discount) if discount.is_integer() else discount,
            "isPercentage": is_percentage,
            "startDate": start.isoformat() if start else None,
            "endDate": end.isoformat() if end else None,
        }
    )
    return payload


class CouponService:
    async def list_coupons(
        self,
        client: BakeryAPIClient,
        *,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> dict:
        payload = await client.api_get(COUPONS_PATH)
        coupons = unwrap_list(payload, "data", "coupons")
        return paginate(filter_coupons(coupons, search=search, is_active=is_active), page, limit)

    async def create_coupon(self, client: BakeryAPIClient, data: dict) -> dict:
        return await client.api_post(COUPONS_PATH, normalize_coupon(data))

    async def update_coupon(self, client: BakeryAPIClient, coupon_id: str, data: dict) -> dict:
        return await client.api_put(f"{COUPONS_PATH}/{coupon_id}", normalize_coupon(data))

    async def delete_coupon(self, client: BakeryAPIClient, coupon_id: str) -> dict:
        await client.api_delete(f"{COUPONS_PATH}/{coupon_id}")
        return {"message": "優惠券刪除成功"}
