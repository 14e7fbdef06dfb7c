from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from bakery_admin.core.bakery_api import BakeryAPIClient
from bakery_admin.core.dependencies import get_bakery_client
from bakery_admin.domain.points_service import DEFAULT_DAILY_STATS_DAYS, PointsService
from bakery_admin.schemas import (
    PaymentStatusUpdate,
    PointSettingsUpdate,
    PointsAdjustRequest,
    PointsExportRequest,
    VirtualCardStatusUpdate,
)

router = APIRouter()
points_service = PointsService()


@router.get("/points/users")
async def list_user_points(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    filters = {
        "page": page,
        "limit": limit,
        "search": (search or "").strip(),
        "sortBy": sort_by,
        "sortOrder": sort_order.upper() if sort_order else None,
    }
    return await points_service.list_user_points(client, filters)


@router.post("/points/earn")
async def earn_points(
    body: PointsAdjustRequest,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await points_service.earn_points(
        client,
        body.line_user_id,
        body.points,
        description=body.description,
        admin_note=body.admin_note,
    )


@router.post("/points/deduct")
async def deduct_points(
    body: PointsAdjustRequest,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await points_service.deduct_points(
        client,
        body.line_user_id,
        body.points,
        description=body.description,
        admin_note=body.admin_note,
    )


@router.get("/points/transactions")
async def list_transactions(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    transaction_type: Optional[str] = Query(None, alias="transactionType"),
    status: Optional[str] = None,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    line_user_id: Optional[int] = Query(None, alias="lineUserId"),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    filters = {
        "page": page,
        "limit": limit,
        "transactionType": transaction_type,
        "status": status,
        "startDate": start_date,
        "endDate": end_date,
        "lineUserId": line_user_id,
    }
    return await points_service.list_transactions(client, filters)


@router.get("/points/stats/overview")
async def overview_stats(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await points_service.overview_stats(client, start_date=start_date, end_date=end_date)


@router.get("/points/stats/daily")
async def daily_stats(
    days: int = DEFAULT_DAILY_STATS_DAYS,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await points_service.daily_stats(client, days)


@router.get("/points/virtual-cards/products")
async def list_card_products(
    include_inactive: bool = Query(False, alias="includeInactive"),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return {
        "data": await points_service.list_card_products(client, include_inactive=include_inactive)
    }


@router.post("/points/virtual-cards/products")
async def create_card_product(
    data: dict = Body(...),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await points_service.create_card_product(client, data)


@router.put("/points/virtual-cards/products/{product_id}")
async def update_card_product(
    product_id: str,
    data: dict = Body(...),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await points_service.update_card_product(client, product_id, data)


@router.patch("/points/virtual-cards/products/{product_id}/status")
async def update_card_product_status(
    product_id: str,
    body: VirtualCardStatusUpdate,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await points_service.update_card_product_status(client, product_id, body.status)


@router.get("/points/virtual-cards/purchases")
async def list_card_purchases(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    payment_status: Optional[str] = Query(None, alias="paymentStatus"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    filters = {
        "page": page,
        "limit": limit,
        "paymentStatus": payment_status,
        "startDate": start_date,
        "endDate": end_date,
    }
    return await points_service.list_card_purchases(client, filters)


@router.put("/points/virtual-cards/purchases/{purchase_id}/payment")
async def update_payment_status(
    purchase_id: str,
    body: PaymentStatusUpdate,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await points_service.update_payment_status(
        client,
        purchase_id,
        body.payment_status,
        transaction_id=body.transaction_id,
        payment_details=body.payment_details,
        admin_note=body.admin_note,
    )


@router.get("/points/virtual-cards/stats")
async def card_sales_stats(client: BakeryAPIClient = Depends(get_bakery_client)):
    return {"data": await points_service.card_sales_stats(client)}


@router.get("/points/settings")
async def get_settings(client: BakeryAPIClient = Depends(get_bakery_client)):
    return {"data": await points_service.get_settings(client)}


@router.put("/points/settings")
async def update_settings(
    body: PointSettingsUpdate,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    settings = [{"id": item.id, "settingValue": item.setting_value} for item in body.settings]
    return {"data": await points_service.update_settings(client, settings)}


@router.post("/points/export")
async def export_points_data(
    body: PointsExportRequest,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await points_service.export_data(
        client,
        body.type,
        start_date=body.start_date,
        end_date=body.end_date,
        file_format=body.format,
    )
