from typing import Optional

from fastapi import APIRouter, Depends

from bakery_admin.core.bakery_api import BakeryAPIClient
from bakery_admin.core.dependencies import (
    get_bakery_client,
    get_reorder_service,
    get_reorder_session,
)
from bakery_admin.core.errors import BakeryRequestError
from bakery_admin.domain.category_ordering import ParentFilter
from bakery_admin.domain.category_reorder_service import (
    CategoryReorderService,
    CategoryReorderSession,
)
from bakery_admin.schemas import CategoryMoveRequest

router = APIRouter()


@router.get("/categories/sort")
async def get_sort_session(
    parent_id: Optional[str] = None,
    reload: bool = False,
    session: CategoryReorderSession = Depends(get_reorder_session),
    service: CategoryReorderService = Depends(get_reorder_service),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    if parent_id is not None:
        try:
            service.set_filter(session, ParentFilter.parse(parent_id))
        except ValueError as exc:
            raise BakeryRequestError(str(exc)) from exc
    if reload or not session.loaded:
        await service.load(session, client)
    return service.snapshot(session)


@router.post("/categories/sort/move")
async def move_category(
    body: CategoryMoveRequest,
    session: CategoryReorderSession = Depends(get_reorder_session),
    service: CategoryReorderService = Depends(get_reorder_service),
):
    result = None
    if body.over_id is not None:
        result = service.move(session, body.active_id, body.over_id)
    return {
        "moved": result is not None,
        "renumbered": bool(result and result.renumbered),
        "new_sort": result.new_sort if result else None,
        **service.snapshot(session),
    }


@router.post("/categories/sort/save")
async def save_sort_order(
    session: CategoryReorderSession = Depends(get_reorder_session),
    service: CategoryReorderService = Depends(get_reorder_service),
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    saved = await service.save(session, client)
    return {"saved": saved, **service.snapshot(session)}
