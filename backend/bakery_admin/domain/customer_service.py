from __future__ import annotations

import logging
from typing import Any, Optional

from bakery_admin.core.bakery_api import BakeryAPIClient, unwrap_list, unwrap_meta

logger = logging.getLogger(__name__)

CUSTOMERS_PATH = "/api/customers"
SALESPERSONS_PATH = "/api/admin/customers/salespersons"

CUSTOMER_SORT_FIELDS = ("created_at", "updated_at", "name", "companyName")


def _list_response(payload: Any, page: int, limit: int) -> dict:
    items = unwrap_list(payload, "data")
    meta = unwrap_meta(payload) or {
        "total": len(items),
        "page": page,
        "limit": limit,
        "totalPages": 1,
    }
    return {"data": items, "meta": meta}


class CustomerService:
    """Customers and owners share ``/api/customers``; owners never filter by industry."""

    async def list_customers(
        self,
        client: BakeryAPIClient,
        *,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "created_at",
        order: str = "DESC",
        status: Optional[str] = None,
        industry: Optional[str] = None,
        search: Optional[str] = None,
    ) -> dict:
        params = {
            "page": page,
            "limit": limit,
            "sortBy": sort_by,
            "order": order.upper(),
            "status": status or None,
            "industry": industry or None,
            "search": (search or "").strip() or None,
        }
        payload = await client.api_get(CUSTOMERS_PATH, params=params)
        return _list_response(payload, page, limit)

    async def list_owners(
        self,
        client: BakeryAPIClient,
        *,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "created_at",
        order: str = "DESC",
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> dict:
        return await self.list_customers(
            client,
            page=page,
            limit=limit,
            sort_by=sort_by,
            order=order,
            status=status,
            search=search,
        )

    async def get_customer(self, client: BakeryAPIClient, customer_id: str) -> dict:
        payload = await client.api_get(f"{CUSTOMERS_PATH}/{customer_id}")
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            return payload["data"]
        return payload

    async def create_customer(self, client: BakeryAPIClient, data: dict) -> dict:
        return await client.api_post(CUSTOMERS_PATH, data)

    async def update_customer(
        self, client: BakeryAPIClient, customer_id: str, data: dict
    ) -> dict:
        return await client.api_put(f"{CUSTOMERS_PATH}/{customer_id}", data)

    async def delete_customer(self, client: BakeryAPIClient, customer_id: str) -> dict:
        await client.api_delete(f"{CUSTOMERS_PATH}/{customer_id}")
        logger.info("customer deleted: %s", customer_id)
        return {"message": "客戶刪除成功"}

    async def list_salespersons(self, client: BakeryAPIClient) -> list[dict]:
        payload = await client.api_get(SALESPERSONS_PATH)
        return unwrap_list(payload, "data", "salespersons")
