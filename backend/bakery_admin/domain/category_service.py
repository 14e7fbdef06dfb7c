from __future__ import annotations

from typing import Optional

from bakery_admin.core.bakery_api import BakeryAPIClient, unwrap_list
from bakery_admin.core.errors import BakeryRequestError
from bakery_admin.domain.listing import filter_categories, paginate

CATEGORIES_PATH = "/api/categories"


def build_category_payload(
    *, name: str, parent_id: Optional[int], status: Optional[str]
) -> dict:
    cleaned_name = (name or "").strip()
    if not cleaned_name:
        raise BakeryRequestError("分類名稱不能為空")
    return {
        "name": cleaned_name,
        "parent_id": parent_id,
        "level": 1 if parent_id is None else 2,
        "status": status or "active",
    }


def parent_options(categories: list[dict], editing_id: Optional[int] = None) -> list[dict]:
    return [
        {"id": c.get("id"), "name": c.get("name")}
        for c in categories
        if c.get("level") == 1 and (editing_id is None or c.get("id") != editing_id)
    ]


class CategoryService:
    async def fetch_all(self, client: BakeryAPIClient) -> list[dict]:
        payload = await client.api_get(CATEGORIES_PATH)
        return unwrap_list(payload, "data")

    async def list_categories(
        self,
        client: BakeryAPIClient,
        *,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        status: str | None = None,
        parent: str | None = None,
    ) -> dict:
        categories = await self.fetch_all(client)
        try:
            filtered = filter_categories(
                categories, search=search, status=status, parent=parent
            )
        except ValueError as exc:
            raise BakeryRequestError(str(exc)) from exc
        return paginate(filtered, page, limit)

    async def get_parent_options(
        self, client: BakeryAPIClient, editing_id: Optional[int] = None
    ) -> list[dict]:
        return parent_options(await self.fetch_all(client), editing_id)

    async def create_category(
        self,
        client: BakeryAPIClient,
        *,
        name: str,
        parent_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> dict:
        payload = build_category_payload(name=name, parent_id=parent_id, status=status)
        return await client.api_post(CATEGORIES_PATH, payload)

    async def update_category(
        self,
        client: BakeryAPIClient,
        category_id: int,
        *,
        name: str,
        parent_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> dict:
        if parent_id is not None and parent_id == category_id:
            raise BakeryRequestError("分類不能設定自己為父分類")
        payload = build_category_payload(name=name, parent_id=parent_id, status=status)
        return await client.api_put(f"{CATEGORIES_PATH}/{category_id}", payload)

    async def delete_category(self, client: BakeryAPIClient, category_id: int) -> dict:
        await client.api_delete(f"{CATEGORIES_PATH}/{category_id}")
        return {"message": "分類刪除成功"}
