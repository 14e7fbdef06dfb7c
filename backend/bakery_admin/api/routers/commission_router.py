from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from bakery_admin.core.bakery_api import BakeryAPIClient
from bakery_admin.core.dependencies import get_bakery_client
from bakery_admin.domain.commission_service import CommissionService
from bakery_admin.schemas import (
    CommissionBatchPayRequest,
    CommissionPlanAssign,
    CommissionRecordStatusUpdate,
)

router = APIRouter()
commission_service = CommissionService()


@router.get("/commissions/plans")
async def list_plans(
    simple: bool = False, client: BakeryAPIClient = Depends(get_bakery_client)
):
    return {"data": await commission_service.list_plans(client, simple=simple)}


@router.post("/commissions/plans")
async def create_plan(data: dict = Body(...), client: BakeryAPIClient = Depends(get_bakery_client)):
    return await commission_service.create_plan(client, data)


@router.put("/commissions/plans/{plan_id}")
async def update_plan(
    plan_id: str,
    data: dict = Body(...),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await commission_service.update_plan(client, plan_id, data)


@router.delete("/commissions/plans/{plan_id}")
async def delete_plan(plan_id: str, client: BakeryAPIClient = Depends(get_bakery_client)):
    return await commission_service.delete_plan(client, plan_id)


@router.post("/commissions/assignments/{customer_id}")
async def assign_plan(
    customer_id: str,
    body: CommissionPlanAssign,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await commission_service.assign_plan(
        client, customer_id, plan_id=body.plan_id, effective_date=body.effective_date
    )


@router.delete("/commissions/assignments/{customer_id}")
async def remove_plan(customer_id: str, client: BakeryAPIClient = Depends(get_bakery_client)):
    return await commission_service.remove_plan(client, customer_id)


@router.get("/commissions/history")
async def get_history(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    salesperson_id: Optional[str] = Query(None, alias="salespersonId"),
    plan_id: Optional[str] = Query(None, alias="planId"),
    status: Optional[str] = None,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    filters = {
        "page": page,
        "limit": limit,
        "salespersonId": salesperson_id,
        "planId": plan_id,
        "status": status,
        "startDate": start_date,
        "endDate": end_date,
    }
    return await commission_service.history(client, filters)


@router.get("/commissions/stats")
async def get_stats(period: str = "month", client: BakeryAPIClient = Depends(get_bakery_client)):
    return await commission_service.stats(client, period)


@router.get("/commissions/performance")
async def get_performance_stats(
    period: str = "this_month",
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await commission_service.performance_stats(
        client, period, start_date=start_date, end_date=end_date
    )


@router.put("/commissions/records/{record_id}/status")
async def update_record_status(
    record_id: str,
    body: CommissionRecordStatusUpdate,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await commission_service.update_record_status(
        client,
        record_id,
        body.status,
        notes=body.notes,
        payment_reference=body.payment_reference,
        payment_method=body.payment_method,
    )


@router.post("/commissions/records/mark-paid")
async def batch_mark_paid(
    body: CommissionBatchPayRequest,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await commission_service.batch_mark_paid(client, body.record_ids)
