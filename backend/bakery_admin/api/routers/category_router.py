from typing import Optional

from fastapi import APIRouter, Depends

from bakery_admin.core.bakery_api import BakeryAPIClient
from bakery_admin.core.dependencies import get_bakery_client, get_page_limit
from bakery_admin.domain.category_service import CategoryService
from bakery_admin.schemas import CategoryCreate, CategoryUpdate

router = APIRouter()
category_service = CategoryService()


@router.get("/categories")
async def list_categories(
    page: int = 1,
    search: Optional[str] = None,
    status: Optional[str] = None,
    parent: Optional[str] = None,
    limit: int = Depends(get_page_limit),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await category_service.list_categories(
        client, page=page, limit=limit, search=search, status=status, parent=parent
    )


@router.get("/categories/parents")
async def list_parent_options(
    editing_id: Optional[int] = None,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await category_service.get_parent_options(client, editing_id)


@router.post("/categories")
async def create_category(
    body: CategoryCreate,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await category_service.create_category(
        client, name=body.name, parent_id=body.parent_id, status=body.status
    )


@router.put("/categories/{category_id}")
async def update_category(
    category_id: int,
    body: CategoryUpdate,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await category_service.update_category(
        client,
        category_id,
        name=body.name,
        parent_id=body.parent_id,
        status=body.status,
    )


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: int,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    return await category_service.delete_category(client, category_id)
