import asyncio

import pytest

from bakery_admin.core.errors import BakeryNotFoundError, BakeryRequestError
from bakery_admin.domain.order_service import (
    ORDERS_PATH,
    OrderFilters,
    OrderService,
    build_order_query_params,
    classify_search_query,
    format_order_data,
    validate_order_form,
)


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        ("ORD20240101", ("order_number", "ORD20240101")),
        ("amy@example.com", ("customer_email", "amy@example.com")),
        ("0912-345-678", ("customer_phone", "0912-345-678")),
        (" 王小明 ", ("customer_name", "王小明")),
        ("   ", None),
    ],
)
def test_classify_search_query(query, expected):
    assert classify_search_query(query) == expected


def test_build_order_query_params_includes_filters():
    filters = OrderFilters(
        search_query="ORD1",
        status_filter="待處理",
        date_filter="custom",
        start_date="2024-01-01",
        end_date="2024-01-31",
        company_name_filter="好麵包",
        salesperson_id="42",
    )
    params = build_order_query_params(filters, page=2, limit=20)
    assert params[:4] == [
        ("page", "2"),
        ("limit", "20"),
        ("sortBy", "created_at"),
        ("sortOrder", "desc"),
    ]
    assert ("status", "PENDING") in params
    assert ("order_number", "ORD1") in params
    assert ("startDate", "2024-01-01") in params
    assert ("endDate", "2024-01-31") in params
    assert ("companyName", "好麵包") in params
    assert ("salespersonId", "42") in params


def test_preset_date_filter_is_sent_as_range():
    params = build_order_query_params(OrderFilters(date_filter="this_month"))
    assert ("date_range", "this_month") in params
    assert not any(key == "startDate" for key, _ in params)


def test_format_order_data_mirrors_item_lists():
    assert format_order_data({"items": [1]})["orderItems"] == [1]
    assert format_order_data({"orderItems": [2]})["items"] == [2]
    assert format_order_data(None) is None


def test_validate_order_form_reports_field_errors():
    errors = validate_order_form(
        {
            "customer_info": {"name": " ", "email": "bad", "phone": "12"},
            "shipping_address": {"address1": "", "recipientName": "", "phone": ""},
            "items": [{"product_id": "", "quantity": 0}],
        }
    )
    assert errors == {
        "customer_name": "客戶姓名為必填項",
        "customer_email": "請輸入有效的電子郵件格式",
        "customer_phone": "請輸入有效的電話號碼",
        "recipient_name": "收件人姓名為必填項",
        "shipping_phone": "收件人電話為必填項",
        "shipping_address": "配送地址為必填項",
        "item_0_product": "商品為必選項",
        "item_0_quantity": "數量必須大於0",
    }


def test_validate_order_form_skips_address_for_pickup():
    errors = validate_order_form(
        {
            "shipping_address": {"address1": "自取"},
            "items": [{"product_id": "p1", "quantity": 1}],
        }
    )
    assert errors == {}


def test_validate_order_form_coerces_string_quantities():
    errors = validate_order_form(
        {
            "items": [
                {"product_id": "1", "quantity": "2"},
                {"product_id": "2", "quantity": "0"},
                {"product_id": "3", "quantity": "兩個"},
            ]
        }
    )
    assert errors == {
        "item_1_quantity": "數量必須大於0",
        "item_2_quantity": "數量格式錯誤",
    }


def test_validate_order_form_rejects_malformed_nested_values():
    errors = validate_order_form(
        {
            "customer_info": "王小明",
            "shipping_address": ["台北市"],
            "items": ["p1"],
        }
    )
    assert errors == {
        "customer_info": "客戶資料格式錯誤",
        "shipping_address": "配送地址格式錯誤",
        "item_0_product": "商品為必選項",
    }


def test_validate_order_form_treats_non_string_name_as_missing():
    errors = validate_order_form(
        {
            "customer_info": {"name": 42},
            "items": [{"product_id": "p1", "quantity": 1}],
        }
    )
    assert errors == {"customer_name": "客戶姓名為必填項"}


def test_list_orders_formats_results(fake_api, bakery_client):
    fake_api.add(
        "GET",
        ORDERS_PATH,
        {"orders": [{"id": "o1", "items": [{"id": 1}]}], "total": 1, "page": 1, "totalPages": 1},
    )
    result = asyncio.run(OrderService().list_orders(bakery_client, OrderFilters(), page=1, limit=10))
    assert result["total"] == 1
    assert result["orders"][0]["orderItems"] == [{"id": 1}]


def test_pending_count_returns_zero_on_failure(fake_api, bakery_client):
    fake_api.add("GET", ORDERS_PATH, {"message": "boom"}, status_code=500)
    assert asyncio.run(OrderService().pending_count(bakery_client)) == 0


def test_pending_count_counts_orders(fake_api, bakery_client):
    fake_api.add("GET", ORDERS_PATH, {"orders": [{"id": 1}, {"id": 2}]})
    assert asyncio.run(OrderService().pending_count(bakery_client)) == 2


def test_get_order_detail_posts_order_number(fake_api, bakery_client):
    fake_api.add("POST", f"{ORDERS_PATH}/check", {"order": {"id": "o1", "order_number": "ORD1"}})
    order = asyncio.run(OrderService().get_order_detail(bakery_client, "ORD1"))
    assert order["id"] == "o1"
    assert fake_api.last_json("POST", f"{ORDERS_PATH}/check") == {"order_number": "ORD1"}


def test_get_order_detail_without_id_is_not_found(fake_api, bakery_client):
    fake_api.add("POST", f"{ORDERS_PATH}/check", {"order": {}})
    with pytest.raises(BakeryNotFoundError):
        asyncio.run(OrderService().get_order_detail(bakery_client, "ORD1"))


def test_update_order_rejects_invalid_form_before_calling_api(fake_api, bakery_client):
    with pytest.raises(BakeryRequestError) as exc_info:
        asyncio.run(OrderService().update_order(bakery_client, "o1", {"items": []}))
    assert exc_info.value.status_code == 422
    assert fake_api.requests == []


def test_update_order_status_checks_transition(fake_api, bakery_client):
    fake_api.add("PUT", f"{ORDERS_PATH}/o1/status", {"order": {"id": "o1", "status": "shipped"}})
    service = OrderService()

    with pytest.raises(BakeryRequestError):
        asyncio.run(
            service.update_order_status(bakery_client, "o1", "pending", current_status="delivered")
        )

    order = asyncio.run(
        service.update_order_status(
            bakery_client, "o1", "shipped", current_status="processing", note="已寄出"
        )
    )
    assert order["status"] == "shipped"
    assert fake_api.last_json("PUT", f"{ORDERS_PATH}/o1/status") == {
        "status": "shipped",
        "note": "已寄出",
    }


def test_cancel_order_uses_order_number(fake_api, bakery_client):
    fake_api.add("PUT", f"{ORDERS_PATH}/cancel-by-number", {"success": True})
    asyncio.run(OrderService().cancel_order(bakery_client, "ORD9"))
    assert fake_api.last_json("PUT", f"{ORDERS_PATH}/cancel-by-number") == {"order_number": "ORD9"}


def test_order_item_operations(fake_api, bakery_client):
    service = OrderService()
    fake_api.add("POST", f"{ORDERS_PATH}/o1/items", {"order": {"id": "o1", "items": []}})
    fake_api.add("DELETE", f"{ORDERS_PATH}/o1/items/i1", {})

    with pytest.raises(BakeryRequestError):
        asyncio.run(service.add_order_item(bakery_client, "o1", product_id="p1", quantity=0))

    added = asyncio.run(service.add_order_item(bakery_client, "o1", product_id="p1", quantity=2))
    assert added["order"]["id"] == "o1"

    deleted = asyncio.run(service.delete_order_item(bakery_client, "o1", "i1"))
    assert deleted["message"] == "項目刪除成功"
