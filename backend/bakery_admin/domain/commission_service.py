from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Optional

from bakery_admin.core.bakery_api import BakeryAPIClient, ensure_success, unwrap_list
from bakery_admin.core.errors import BakeryAPIError, BakeryAuthError, BakeryRequestError

logger = logging.getLogger(__name__)

PLANS_PATH = "/api/admin/commission-plans"
HISTORY_PATH = "/api/admin/commissions/history"
STATS_PATH = "/api/admin/commissions/stats"
PERFORMANCE_STATS_PATH = "/api/admin/commissions/performance-stats"
RECORD_STATUS_PATH = "/api/admin/commission/records/{record_id}/status"
CUSTOMER_PLAN_PATH = "/api/admin/customers/{customer_id}/commission-plan"

COMMISSION_STATUS_PENDING = "pending"
COMMISSION_STATUS_CALCULATED = "calculated"
COMMISSION_STATUS_PAID = "paid"
COMMISSION_STATUS_CANCELLED = "cancelled"

COMMISSION_STATUS_LABELS = {
    COMMISSION_STATUS_PENDING: "待支付",
    COMMISSION_STATUS_CALCULATED: "已計算",
    COMMISSION_STATUS_PAID: "已支付",
    COMMISSION_STATUS_CANCELLED: "已取消",
}

HISTORY_FILTER_KEYS = ("page", "limit", "salespersonId", "planId", "status", "startDate", "endDate")


def commission_status_label(status: str) -> str:
    return COMMISSION_STATUS_LABELS.get(status, status)


def history_params(filters: dict) -> dict:
    return {key: filters[key] for key in HISTORY_FILTER_KEYS if filters.get(key)}


def period_params(period: str, start_date: Optional[str] = None, end_date: Optional[str] = None) -> dict:
    if period == "custom" and start_date and end_date:
        return {"period": "custom", "startDate": start_date, "endDate": end_date}
    return {"period": period}


def _number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def normalize_performance_detail(detail: dict) -> dict:
    """Coerce the decimal strings the stats endpoint returns into numbers."""
    plan = detail.get("commission_plan")
    plan = plan if isinstance(plan, dict) else {}
    subtotal = _number(detail.get("subtotal"))
    return {
        "salesperson_id": detail.get("salesperson_id"),
        "salesperson_name": detail.get("salesperson_name"),
        "commission_plan": detail.get("commission_plan"),
        "commission_plan_name": plan.get("name") or "未設定",
        "commission_plan_rule_type": plan.get("rule_type") or "fixed",
        "total_orders": int(_number(detail.get("total_orders"))),
        "subtotal": subtotal,
        "commission_base_amount": _number(detail.get("commission_base_amount")),
        "commission_rate": _number(detail.get("commission_rate")),
        "total_commission": _number(detail.get("total_commission")),
        "average_order_value": _number(detail.get("average_order_value")),
        "actual_commission_rate": _number(detail.get("actual_commission_rate")),
        "total_sales": subtotal,
        "contract_end_date": detail.get("contract_end_date"),
    }


class CommissionService:
    async def list_plans(self, client: BakeryAPIClient, *, simple: bool = False) -> list[dict]:
        path = f"{PLANS_PATH}/list" if simple else PLANS_PATH
        payload = ensure_success(await client.api_get(path), "載入佣金方案失敗")
        return unwrap_list(payload, "data", "plans")

    async def create_plan(self, client: BakeryAPIClient, data: dict) -> dict:
        if not str(data.get("name") or "").strip():
            raise BakeryRequestError("方案名稱不能為空")
        return ensure_success(await client.api_post(PLANS_PATH, data), "建立佣金方案失敗")

    async def update_plan(self, client: BakeryAPIClient, plan_id: str, data: dict) -> dict:
        payload = await client.api_put(f"{PLANS_PATH}/{plan_id}", data)
        return ensure_success(payload, "更新佣金方案失敗")

    async def delete_plan(self, client: BakeryAPIClient, plan_id: str) -> dict:
        payload = await client.api_delete(f"{PLANS_PATH}/{plan_id}")
        return ensure_success(payload, "刪除佣金方案失敗")

    async def assign_plan(
        self,
        client: BakeryAPIClient,
        customer_id: str,
        *,
        plan_id: str,
        effective_date: Optional[str] = None,
    ) -> dict:
        body = {"plan_id": plan_id, "effective_date": effective_date}
        payload = await client.api_post(CUSTOMER_PLAN_PATH.format(customer_id=customer_id), body)
        return ensure_success(payload, "分配佣金方案失敗")

    async def remove_plan(self, client: BakeryAPIClient, customer_id: str) -> dict:
        payload = await client.api_delete(CUSTOMER_PLAN_PATH.format(customer_id=customer_id))
        return ensure_success(payload, "移除佣金方案失敗")

    async def history(self, client: BakeryAPIClient, filters: dict) -> dict:
        payload = await client.api_get(HISTORY_PATH, params=history_params(filters))
        payload = ensure_success(payload, "載入佣金記錄失敗")
        records = unwrap_list(payload, "data")
        for record in records:
            record.setdefault("status_label", commission_status_label(record.get("status", "")))
        pagination = payload.get("pagination") if isinstance(payload, dict) else None
        total = (pagination or {}).get("total", len(records))
        return {"records": records, "total": total}

    async def stats(self, client: BakeryAPIClient, period: str = "month") -> Any:
        payload = await client.api_get(STATS_PATH, params={"period": period})
        return ensure_success(payload, "載入佣金統計失敗")

    async def performance_stats(
        self,
        client: BakeryAPIClient,
        period: str = "this_month",
        *,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> dict:
        params = period_params(period, start_date, end_date)
        payload = ensure_success(
            await client.api_get(PERFORMANCE_STATS_PATH, params=params), "載入業績統計失敗"
        )
        data = payload.get("data") if isinstance(payload, dict) else None
        data = data if isinstance(data, dict) else {}
        details = [
            normalize_performance_detail(detail)
            for detail in data.get("performance_details") or []
            if isinstance(detail, dict)
        ]
        return {**data, "performance_details": details}

    async def update_record_status(
        self,
        client: BakeryAPIClient,
        record_id: str,
        status: str,
        *,
        notes: Optional[str] = None,
        payment_reference: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> dict:
        if status not in COMMISSION_STATUS_LABELS:
            raise BakeryRequestError(f"無效的佣金狀態: {status}")
        body = {
            "status": status,
            "notes": notes,
            "payment_reference": payment_reference,
            "payment_method": payment_method,
        }
        payload = await client.api_put(RECORD_STATUS_PATH.format(record_id=record_id), body)
        return ensure_success(payload, "更新佣金狀態失敗")

    async def batch_mark_paid(
        self,
        client: BakeryAPIClient,
        record_ids: Iterable[Any],
        *,
        today: Optional[date] = None,
    ) -> dict:
        ids = [str(record_id) for record_id in record_ids]
        if not ids:
            raise BakeryRequestError("請至少選擇一筆佣金記錄")
        notes = f"批量支付 - {(today or date.today()).isoformat()}"

        succeeded: list[str] = []
        failed: list[dict] = []
        for record_id in ids:
            try:
                await self.update_record_status(
                    client, record_id, COMMISSION_STATUS_PAID, notes=notes
                )
            except BakeryAuthError:
                raise
            except BakeryAPIError as exc:
                logger.warning("commission record %s mark-paid failed: %s", record_id, exc)
                failed.append({"id": record_id, "error": str(exc)})
            else:
                succeeded.append(record_id)

        return {"succeeded": succeeded, "failed": failed, "total": len(ids)}
