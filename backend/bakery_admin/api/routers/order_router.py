from fastapi import APIRouter, Body, Depends, Query

from bakery_admin.core.bakery_api import BakeryAPIClient
from bakery_admin.core.dependencies import get_bakery_client, get_page_limit
from bakery_admin.domain.order_service import OrderFilters, OrderService
from bakery_admin.domain.order_status import (
    DATE_FILTER_OPTIONS,
    PAYMENT_METHOD_OPTIONS,
    PAYMENT_STATUS_OPTIONS,
    SHIPPING_METHOD_OPTIONS,
    SHIPPING_STATUS_OPTIONS,
    available_status_transitions,
    can_cancel_order,
    can_edit_order,
    get_status_display,
    status_options,
)
from bakery_admin.schemas import (
    OrderCancelRequest,
    OrderItemCreate,
    OrderItemsUpdate,
    OrderStatusUpdate,
)

router = APIRouter()
order_service = OrderService()


def _with_status_info(order: dict) -> dict:
    status = order.get("status")
    return {
        **order,
        "status_display": get_status_display(status),
        "can_cancel": can_cancel_order(status),
        "can_edit": can_edit_order(status),
        "available_statuses": available_status_transitions(status),
    }


@router.get("/orders")
async def list_orders(
    page: int = 1,
    search: str = Query("", alias="search"),
    status: str = "",
    date_filter: str = Query("", alias="dateFilter"),
    company_name: str = Query("", alias="companyName"),
    start_date: str = Query("", alias="startDate"),
    end_date: str = Query("", alias="endDate"),
    salesperson_id: str = Query("", alias="salespersonId"),
    limit: int = Depends(get_page_limit),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    filters = OrderFilters(
        search_query=search,
        status_filter=status,
        date_filter=date_filter,
        company_name_filter=company_name,
        start_date=start_date,
        end_date=end_date,
        salesperson_id=salesperson_id,
    )
    result = await order_service.list_orders(client, filters, page=page, limit=limit)
    result["orders"] = [_with_status_info(o) for o in result["orders"] if o]
    return result


@router.get("/orders/pending-count")
async def get_pending_count(client: BakeryAPIClient = Depends(get_bakery_client)):
    return {"count": await order_service.pending_count(client)}


@router.get("/orders/options")
async def get_order_options():
    return {
        "statuses": status_options(),
        "payment_methods": PAYMENT_METHOD_OPTIONS,
        "payment_statuses": PAYMENT_STATUS_OPTIONS,
        "shipping_methods": SHIPPING_METHOD_OPTIONS,
        "shipping_statuses": SHIPPING_STATUS_OPTIONS,
        "date_filters": DATE_FILTER_OPTIONS,
    }


@router.post("/orders/cancel")
async def cancel_order(
    body: OrderCancelRequest,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await order_service.cancel_order(client, body.order_number)


@router.get("/orders/{order_number}")
async def get_order(
    order_number: str,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    order = await order_service.get_order_detail(client, order_number)
    return _with_status_info(order)


@router.put("/orders/{order_id}")
async def update_order(
    order_id: str,
    form: dict = Body(...),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await order_service.update_order(client, order_id, form)


@router.put("/orders/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await order_service.update_order_status(
        client,
        order_id,
        body.status,
        current_status=body.current_status,
        note=body.note,
    )


@router.post("/orders/{order_id}/items")
async def add_order_item(
    order_id: str,
    body: OrderItemCreate,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await order_service.add_order_item(
        client,
        order_id,
        product_id=body.product_id,
        quantity=body.quantity,
        price=body.price,
    )


@router.put("/orders/{order_id}/items")
async def update_order_items(
    order_id: str,
    body: OrderItemsUpdate,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await order_service.update_order_items(client, order_id, body.items)


@router.delete("/orders/{order_id}/items/{item_id}")
async def delete_order_item(
    order_id: str,
    item_id: str,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await order_service.delete_order_item(client, order_id, item_id)
