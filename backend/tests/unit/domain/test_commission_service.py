import asyncio
from datetime import date

import pytest

from bakery_admin.core.errors import BakeryAuthError, BakeryRequestError
from bakery_admin.domain.commission_service import (
    HISTORY_PATH,
    PERFORMANCE_STATS_PATH,
    PLANS_PATH,
    CommissionService,
    commission_status_label,
    history_params,
    normalize_performance_detail,
    period_params,
)


def record_path(record_id: str) -> str:
    return f"/api/admin/commission/records/{record_id}/status"


def test_status_labels():
    assert commission_status_label("pending") == "待支付"
    assert commission_status_label("calculated") == "已計算"
    assert commission_status_label("paid") == "已支付"
    assert commission_status_label("cancelled") == "已取消"
    assert commission_status_label("other") == "other"


def test_history_params_drop_empty_filters():
    assert history_params({"page": 1, "status": "", "planId": None, "startDate": "2024-01-01"}) == {
        "page": 1,
        "startDate": "2024-01-01",
    }


def test_history_adds_labels_and_total(fake_api, bakery_client):
    fake_api.add(
        "GET",
        HISTORY_PATH,
        {"success": True, "data": [{"id": 1, "status": "paid"}], "pagination": {"total": 7}},
    )
    result = asyncio.run(CommissionService().history(bakery_client, {"status": "paid"}))
    assert result == {"records": [{"id": 1, "status": "paid", "status_label": "已支付"}], "total": 7}


def test_unsuccessful_payload_raises(fake_api, bakery_client):
    fake_api.add("GET", HISTORY_PATH, {"success": False, "message": "沒有權限"})
    with pytest.raises(BakeryRequestError, match="沒有權限"):
        asyncio.run(CommissionService().history(bakery_client, {}))


def test_list_plans_simple_uses_list_endpoint(fake_api, bakery_client):
    fake_api.add("GET", f"{PLANS_PATH}/list", {"success": True, "data": [{"id": 1}]})
    assert asyncio.run(CommissionService().list_plans(bakery_client, simple=True)) == [{"id": 1}]


def test_update_record_status_validates_status(bakery_client):
    with pytest.raises(BakeryRequestError, match="無效的佣金狀態"):
        asyncio.run(CommissionService().update_record_status(bakery_client, "1", "lost"))


def test_batch_mark_paid_reports_failures(fake_api, bakery_client):
    fake_api.add("PUT", record_path("1"), {"success": True})
    fake_api.add("PUT", record_path("2"), {"success": False, "message": "記錄已支付"})

    result = asyncio.run(
        CommissionService().batch_mark_paid(bakery_client, [1, 2, 3], today=date(2024, 3, 5))
    )

    assert result["succeeded"] == ["1"]
    assert [f["id"] for f in result["failed"]] == ["2", "3"]
    assert result["total"] == 3
    assert fake_api.last_json("PUT", record_path("1"))["notes"] == "批量支付 - 2024-03-05"


def test_batch_mark_paid_stops_on_auth_error(fake_api, bakery_client):
    fake_api.add("PUT", record_path("1"), {"message": "未授權"}, status_code=401)
    with pytest.raises(BakeryAuthError):
        asyncio.run(CommissionService().batch_mark_paid(bakery_client, ["1", "2"]))
    assert len(fake_api.calls("PUT", record_path("2"))) == 0


def test_batch_mark_paid_requires_records(bakery_client):
    with pytest.raises(BakeryRequestError):
        asyncio.run(CommissionService().batch_mark_paid(bakery_client, []))


def test_period_params_only_sends_dates_for_complete_custom_range():
    assert period_params("this_month") == {"period": "this_month"}
    assert period_params("custom", "2024-01-01", None) == {"period": "custom"}
    assert period_params("custom", "2024-01-01", "2024-01-31") == {
        "period": "custom",
        "startDate": "2024-01-01",
        "endDate": "2024-01-31",
    }


def test_performance_stats_normalizes_details(fake_api, bakery_client):
    fake_api.add(
        "GET",
        PERFORMANCE_STATS_PATH,
        {
            "success": True,
            "data": {
                "summary": {"total_orders": 2},
                "performance_details": [
                    {
                        "salesperson_id": 7,
                        "salesperson_name": "阿明",
                        "commission_plan": None,
                        "total_orders": "2",
                        "subtotal": "1500.50",
                        "commission_rate": "0.05",
                        "total_commission": "75.03",
                    }
                ],
            },
        },
    )
    result = asyncio.run(CommissionService().performance_stats(bakery_client, "last_month"))

    assert result["summary"] == {"total_orders": 2}
    detail = result["performance_details"][0]
    assert detail["commission_plan_name"] == "未設定"
    assert detail["commission_plan_rule_type"] == "fixed"
    assert detail["total_orders"] == 2
    assert detail["subtotal"] == detail["total_sales"] == 1500.5
    assert detail["commission_rate"] == 0.05
    assert detail["average_order_value"] == 0.0
    assert fake_api.calls("GET", PERFORMANCE_STATS_PATH)[0].url.params["period"] == "last_month"


def test_normalize_performance_detail_reads_plan():
    detail = normalize_performance_detail(
        {"commission_plan": {"name": "標準方案", "rule_type": "tiered"}, "subtotal": None}
    )
    assert detail["commission_plan_name"] == "標準方案"
    assert detail["commission_plan_rule_type"] == "tiered"
    assert detail["subtotal"] == 0.0
