from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from bakery_admin.core.bakery_api import BakeryAPIClient
from bakery_admin.core.dependencies import get_bakery_client, get_page_limit
from bakery_admin.domain.coupon_service import CouponService

router = APIRouter()
coupon_service = CouponService()


@router.get("/coupons")
async def list_coupons(
    page: int = 1,
    search: Optional[str] = None,
    is_active: Optional[bool] = Query(None, alias="isActive"),
    limit: int = Depends(get_page_limit),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await coupon_service.list_coupons(
        client, page=page, limit=limit, search=search, is_active=is_active
    )


@router.post("/coupons")
async def create_coupon(data: dict = Body(...), client: BakeryAPIClient = Depends(get_bakery_client)):
    return await coupon_service.create_coupon(client, data)


@router.put("/coupons/{coupon_id}")
async def update_coupon(
    coupon_id: str,
    data: dict = Body(...),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await coupon_service.update_coupon(client, coupon_id, data)


@router.delete("/coupons/{coupon_id}")
async def delete_coupon(coupon_id: str, client: BakeryAPIClient = Depends(get_bakery_client)):
    return await coupon_service.delete_coupon(client, coupon_id)
