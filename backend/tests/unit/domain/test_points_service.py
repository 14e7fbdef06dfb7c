import asyncio

import pytest

from bakery_admin.core.errors import BakeryRequestError
from bakery_admin.domain.points_service import (
    CARD_PAYMENT_PATH,
    CARD_PRODUCTS_PATH,
    CARD_STATS_PATH,
    DAILY_STATS_PATH,
    DEDUCT_PATH,
    EARN_PATH,
    SETTINGS_PATH,
    TRANSACTIONS_PATH,
    USER_POINTS_PATH,
    PointsService,
    normalize_card_product,
    payment_status_label,
    transaction_type_label,
)


def test_labels_fall_back_to_raw_value():
    assert transaction_type_label("virtual_card_redeem") == "點數卡兌換"
    assert transaction_type_label("bonus") == "bonus"
    assert payment_status_label("paid") == "已完成"
    assert payment_status_label("pending") == "處理中"


def test_paths_live_under_points_admin():
    assert USER_POINTS_PATH == "/api/points/admin/users/points"
    assert CARD_PAYMENT_PATH.format(purchase_id=9) == "/api/points/admin/virtual-cards/purchase/9/payment"


def test_list_user_points_sends_only_given_filters(fake_api, bakery_client):
    fake_api.add(
        "GET",
        USER_POINTS_PATH,
        {"success": True, "data": [{"lineUserId": 1}], "pagination": {"total": 1, "page": 2}},
    )
    result = asyncio.run(
        PointsService().list_user_points(bakery_client, {"page": 2, "search": "", "sortOrder": "DESC"})
    )
    assert result == {"data": [{"lineUserId": 1}], "pagination": {"total": 1, "page": 2}}
    params = fake_api.calls("GET", USER_POINTS_PATH)[0].url.params
    assert dict(params) == {"page": "2", "sortOrder": "DESC"}


def test_earn_points_coerces_form_strings(fake_api, bakery_client):
    fake_api.add("POST", EARN_PATH, {"success": True, "data": {"id": 3}})
    asyncio.run(PointsService().earn_points(bakery_client, "12", "50", description="補發"))
    assert fake_api.last_json("POST", EARN_PATH) == {
        "lineUserId": 12,
        "amount": 50,
        "description": "補發",
        "adminNote": None,
    }


@pytest.mark.parametrize("points", [0, -5, "1.5", "abc", None, True])
def test_deduct_points_rejects_invalid_amounts(fake_api, bakery_client, points):
    with pytest.raises(BakeryRequestError, match="點數必須為正整數"):
        asyncio.run(PointsService().deduct_points(bakery_client, 1, points))
    assert fake_api.requests == []


def test_deduct_points_surfaces_unsuccessful_payload(fake_api, bakery_client):
    fake_api.add("POST", DEDUCT_PATH, {"success": False, "message": "點數不足"})
    with pytest.raises(BakeryRequestError, match="點數不足"):
        asyncio.run(PointsService().deduct_points(bakery_client, 1, 10))


def test_transactions_get_labels(fake_api, bakery_client):
    fake_api.add(
        "GET",
        TRANSACTIONS_PATH,
        {"success": True, "data": [{"id": 1, "transactionType": "admin_adjust", "status": "completed"}]},
    )
    result = asyncio.run(PointsService().list_transactions(bakery_client, {"lineUserId": 4}))
    record = result["data"][0]
    assert record["type_label"] == "管理員調整"
    assert record["status_label"] == "已完成"
    assert result["pagination"] == {"total": 1}
    assert fake_api.calls("GET", TRANSACTIONS_PATH)[0].url.params["lineUserId"] == "4"


def test_daily_stats_validates_days(fake_api, bakery_client):
    with pytest.raises(BakeryRequestError):
        asyncio.run(PointsService().daily_stats(bakery_client, 0))
    fake_api.add("GET", DAILY_STATS_PATH, {"success": True, "data": []})
    asyncio.run(PointsService().daily_stats(bakery_client))
    assert fake_api.calls("GET", DAILY_STATS_PATH)[0].url.params["days"] == "30"


def test_normalize_card_product():
    product = normalize_card_product({"name": " 千元卡 ", "price": "1000", "pointsValue": "1100"})
    assert product == {"name": "千元卡", "price": 1000.0, "pointsValue": 1100}

    assert normalize_card_product({"status": "inactive"}, partial=True) == {"status": "inactive"}
    with pytest.raises(BakeryRequestError, match="價格不能為負數"):
        normalize_card_product({"name": "卡", "price": -1, "pointsValue": 10})
    with pytest.raises(BakeryRequestError, match="無效的商品狀態"):
        normalize_card_product({"status": "deleted"}, partial=True)


def test_list_card_products_can_include_inactive(fake_api, bakery_client):
    fake_api.add("GET", CARD_PRODUCTS_PATH, {"success": True, "data": [{"id": 1}]})
    assert asyncio.run(
        PointsService().list_card_products(bakery_client, include_inactive=True)
    ) == [{"id": 1}]
    assert fake_api.calls("GET", CARD_PRODUCTS_PATH)[0].url.params["includeInactive"] == "true"


def test_update_card_product_status_uses_patch(fake_api, bakery_client):
    path = f"{CARD_PRODUCTS_PATH}/5/status"
    fake_api.add("PATCH", path, {"success": True, "data": {"id": 5}})
    asyncio.run(PointsService().update_card_product_status(bakery_client, "5", "inactive"))
    assert fake_api.last_json("PATCH", path) == {"status": "inactive"}


def test_update_payment_status_validates_status(fake_api, bakery_client):
    with pytest.raises(BakeryRequestError, match="無效的支付狀態"):
        asyncio.run(PointsService().update_payment_status(bakery_client, "9", "refunded"))

    path = CARD_PAYMENT_PATH.format(purchase_id="9")
    fake_api.add("PUT", path, {"success": True})
    asyncio.run(PointsService().update_payment_status(bakery_client, "9", "paid", transaction_id="T1"))
    assert fake_api.last_json("PUT", path)["paymentStatus"] == "paid"
    assert fake_api.last_json("PUT", path)["transactionId"] == "T1"


def test_card_sales_stats_converts_decimal_strings(fake_api, bakery_client):
    fake_api.add(
        "GET",
        CARD_STATS_PATH,
        {
            "success": True,
            "data": [{"name": "千元卡", "purchase_count": "3", "total_revenue": "3000.00", "total_points": "3300"}],
        },
    )
    assert asyncio.run(PointsService().card_sales_stats(bakery_client)) == [
        {"name": "千元卡", "purchase_count": 3, "total_revenue": 3000.0, "total_points": 3300}
    ]


def test_update_settings_stringifies_values(fake_api, bakery_client):
    with pytest.raises(BakeryRequestError):
        asyncio.run(PointsService().update_settings(bakery_client, []))

    fake_api.add("PUT", SETTINGS_PATH, {"success": True, "data": [{"id": 1, "settingValue": "0"}]})
    result = asyncio.run(
        PointsService().update_settings(
            bakery_client, [{"id": 1, "settingValue": 0}, {"id": 2, "settingValue": True}]
        )
    )
    assert result == [{"id": 1, "settingValue": "0"}]
    assert fake_api.last_json("PUT", SETTINGS_PATH) == {
        "settings": [{"id": 1, "settingValue": "0"}, {"id": 2, "settingValue": "true"}]
    }


def test_export_data_validates_type(bakery_client):
    with pytest.raises(BakeryRequestError, match="無效的匯出類型"):
        asyncio.run(PointsService().export_data(bakery_client, "orders"))
