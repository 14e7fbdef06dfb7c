from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from bakery_admin.core.bakery_api import BakeryAPIClient
from bakery_admin.core.dependencies import get_bakery_client
from bakery_admin.core.settings import get_settings
from bakery_admin.domain.order_export_service import OrderExportService, content_disposition
from bakery_admin.schemas import ExportRequest

router = APIRouter()
settings = get_settings()
order_export_service = OrderExportService(
    limit=settings.export_order_limit, tz_name=settings.export_timezone
)

MEDIA_TYPES = {
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "csv": "text/csv; charset=utf-8",
}


@router.post("/orders/export")
async def export_orders(
    request: ExportRequest,
    client: BakeryAPIClient = Depends(get_bakery_client),
):
    filename, content, order_count = await order_export_service.export_orders(
        client,
        request.filters.to_filters(),
        export_all=request.export_all,
        selected_ids=request.selected_ids,
        file_format=request.format,
    )
    headers = {
        "Content-Disposition": content_disposition(filename),
        "X-Export-Count": str(order_count),
    }
    return StreamingResponse(
        iter([content]),
        media_type=MEDIA_TYPES[request.format],
        headers=headers,
    )


@router.get("/orders/export/companies")
async def list_export_companies(client: BakeryAPIClient = Depends(get_bakery_client)):
    return {"companies": await order_export_service.fetch_companies(client)}
