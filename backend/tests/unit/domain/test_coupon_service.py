import asyncio

import pytest

from bakery_admin.core.errors import BakeryRequestError
from bakery_admin.domain.coupon_service import COUPONS_PATH, CouponService, normalize_coupon


def test_normalize_coupon_uppercases_code():
    payload = normalize_coupon(
        {"code": " spring10 ", "discount": "10", "isPercentage": True,
         "startDate": "2024-03-01", "endDate": "2024-03-31"}
    )
    assert payload["code"] == "SPRING10"
    assert payload["discount"] == 10
    assert payload["endDate"] == "2024-03-31"


@pytest.mark.parametrize(
    ("data", "message"),
    [
        ({"code": "", "discount": 10}, "優惠碼不能為空"),
        ({"code": "A", "discount": 0}, "折扣必須大於 0"),
        ({"code": "A", "discount": 120, "isPercentage": True}, "百分比折扣不能超過 100"),
        ({"code": "A", "discount": 5, "startDate": "2024-05-01", "endDate": "2024-04-01"}, "結束日期不能早於開始日期"),
        ({"code": "A", "discount": 5, "startDate": "soon"}, "日期格式錯誤"),
    ],
)
def test_normalize_coupon_rejects_invalid_forms(data, message):
    with pytest.raises(BakeryRequestError, match=message):
        normalize_coupon(data)


def test_fixed_amount_coupon_may_exceed_100():
    assert normalize_coupon({"code": "BIG", "discount": 500})["discount"] == 500


def test_list_coupons_searches_locally(fake_api, bakery_client):
    fake_api.add(
        "GET",
        COUPONS_PATH,
        {"data": [{"code": "WELCOME", "isActive": True}, {"code": "OLD", "isActive": False}]},
    )
    result = asyncio.run(CouponService().list_coupons(bakery_client, is_active=True))
    assert [c["code"] for c in result["data"]] == ["WELCOME"]


def test_create_coupon_sends_normalized_payload(fake_api, bakery_client):
    fake_api.add("POST", COUPONS_PATH, {"id": 1})
    asyncio.run(CouponService().create_coupon(bakery_client, {"code": "new", "discount": 50}))
    assert fake_api.last_json("POST", COUPONS_PATH)["code"] == "NEW"
