from fastapi import APIRouter

from bakery_admin.core.settings import get_settings

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "ok", "api_base_url": get_settings().api.normalized_base_url}
