from __future__ import annotations

from typing import Optional

from bakery_admin.core.bakery_api import BakeryAPIClient, unwrap_list
from bakery_admin.domain.listing import filter_products, paginate

PRODUCTS_PATH = "/api/products"
FETCH_ALL_LIMIT = 500


class ProductService:
    async def fetch_all(self, client: BakeryAPIClient) -> list[dict]:
        payload = await client.api_get(PRODUCTS_PATH, params={"limit": FETCH_ALL_LIMIT})
        return unwrap_list(payload, "data", "products")

    async def list_products(
        self,
        client: BakeryAPIClient,
        *,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        category_id: Optional[str] = None,
        status: Optional[str] = None,
        sort_by: Optional[str] = "newest",
    ) -> dict:
        products = await self.fetch_all(client)
        filtered = filter_products(
            products,
            search=search,
            category_id=category_id,
            status=status,
            sort_by=sort_by,
        )
        return paginate(filtered, page, limit)

    async def get_product(self, client: BakeryAPIClient, product_id: str) -> dict:
        payload = await client.api_get(f"{PRODUCTS_PATH}/{product_id}")
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            return payload["data"]
        return payload

    async def create_product(self, client: BakeryAPIClient, data: dict) -> dict:
        return await client.api_post(PRODUCTS_PATH, data)

    async def update_product(self, client: BakeryAPIClient, product_id: str, data: dict) -> dict:
        return await client.api_put(f"{PRODUCTS_PATH}/{product_id}", data)

    async def delete_product(self, client: BakeryAPIClient, product_id: str) -> dict:
        await client.api_delete(f"{PRODUCTS_PATH}/{product_id}")
        return {"message": "產品刪除成功"}
