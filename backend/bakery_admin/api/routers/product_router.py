from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from bakery_admin.core.bakery_api import BakeryAPIClient
from bakery_admin.core.dependencies import get_bakery_client, get_page_limit
from bakery_admin.domain.product_service import ProductService

router = APIRouter()
product_service = ProductService()


@router.get("/products")
async def list_products(
    page: int = 1,
    search: Optional[str] = None,
    category_id: Optional[str] = Query(None, alias="categoryId"),
    status: Optional[str] = None,
    sort_by: str = Query("newest", alias="sortBy"),
    limit: int = Depends(get_page_limit),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await product_service.list_products(
        client,
        page=page,
        limit=limit,
        search=search,
        category_id=category_id,
        status=status,
        sort_by=sort_by,
    )


@router.get("/products/{product_id}")
async def get_product(product_id: str, client: BakeryAPIClient = Depends(get_bakery_client)):
    return await product_service.get_product(client, product_id)


@router.post("/products")
async def create_product(
    data: dict = Body(...), client: BakeryAPIClient = Depends(get_bakery_client)
):
    return await product_service.create_product(client, data)


@router.put("/products/{product_id}")
async def update_product(
    product_id: str,
    data: dict = Body(...),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await product_service.update_product(client, product_id, data)


@router.delete("/products/{product_id}")
async def delete_product(product_id: str, client: BakeryAPIClient = Depends(get_bakery_client)):
    return await product_service.delete_product(client, product_id)
