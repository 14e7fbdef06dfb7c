from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from bakery_admin.core.bakery_api import BakeryAPIClient
from bakery_admin.core.dependencies import get_bakery_client, get_page_limit
from bakery_admin.domain.customer_service import CustomerService

router = APIRouter()
customer_service = CustomerService()


@router.get("/customers")
async def list_customers(
    page: int = 1,
    sort_by: str = Query("created_at", alias="sortBy"),
    order: str = "DESC",
    status: Optional[str] = None,
    industry: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Depends(get_page_limit),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await customer_service.list_customers(
        client,
        page=page,
        limit=limit,
        sort_by=sort_by,
        order=order,
        status=status,
        industry=industry,
        search=search,
    )


@router.get("/customers/{customer_id}")
async def get_customer(customer_id: str, client: BakeryAPIClient = Depends(get_bakery_client)):
    return await customer_service.get_customer(client, customer_id)


@router.post("/customers")
async def create_customer(
    data: dict = Body(...), client: BakeryAPIClient = Depends(get_bakery_client)
):
    return await customer_service.create_customer(client, data)


@router.put("/customers/{customer_id}")
async def update_customer(
    customer_id: str,
    data: dict = Body(...),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await customer_service.update_customer(client, customer_id, data)


@router.delete("/customers/{customer_id}")
async def delete_customer(
    customer_id: str, client: BakeryAPIClient = Depends(get_bakery_client)
):
    return await customer_service.delete_customer(client, customer_id)


@router.get("/owners")
async def list_owners(
    page: int = 1,
    sort_by: str = Query("created_at", alias="sortBy"),
    order: str = "DESC",
    status: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Depends(get_page_limit),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await customer_service.list_owners(
        client,
        page=page,
        limit=limit,
        sort_by=sort_by,
        order=order,
        status=status,
        search=search,
    )


@router.get("/owners/{owner_id}")
async def get_owner(owner_id: str, client: BakeryAPIClient = Depends(get_bakery_client)):
    return await customer_service.get_customer(client, owner_id)


@router.post("/owners")
async def create_owner(data: dict = Body(...), client: BakeryAPIClient = Depends(get_bakery_client)):
    return await customer_service.create_customer(client, data)


@router.put("/owners/{owner_id}")
async def update_owner(
    owner_id: str,
    data: dict = Body(...),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await customer_service.update_customer(client, owner_id, data)


@router.delete("/owners/{owner_id}")
async def delete_owner(owner_id: str, client: BakeryAPIClient = Depends(get_bakery_client)):
    return await customer_service.delete_customer(client, owner_id)


@router.get("/sales-people")
async def list_sales_people(client: BakeryAPIClient = Depends(get_bakery_client)):
    return {"data": await customer_service.list_salespersons(client)}
