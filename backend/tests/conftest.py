from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from bakery_admin.core.bakery_api import BakeryAPIClient
from bakery_admin.domain.category_ordering import Category

API_BASE_URL = "http://bakery.test"
ACCESS_TOKEN = "test-token"


class FakeBakeryAPI:
    """In-memory stand-in for the bakery REST API behind ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        *,
        status_code: int = 200,
        handler: Callable[[httpx.Request], httpx.Response] | None = None,
    ) -> None:
        if handler is None:

            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status_code, json=json_body)

        self.routes[(method.upper(), path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": f"未找到: {request.url.path}"})
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def last_json(self, method: str, path: str) -> Any:
        return json.loads(self.calls(method, path)[-1].content)


@pytest.fixture()
def fake_api() -> FakeBakeryAPI:
    return FakeBakeryAPI()


@pytest.fixture()
def make_client(fake_api: FakeBakeryAPI) -> Callable[..., BakeryAPIClient]:
    def _make_client(access_token: str | None = ACCESS_TOKEN) -> BakeryAPIClient:
        return BakeryAPIClient(
            API_BASE_URL,
            access_token=access_token,
            transport=fake_api.transport,
        )

    return _make_client


@pytest.fixture()
def bakery_client(make_client) -> BakeryAPIClient:
    return make_client()


@pytest.fixture()
def make_category() -> Callable[..., Category]:
    def _make_category(category_id: int, sort=None, parent_id: int | None = None, **overrides):
        payload = {
            "id": category_id,
            "name": overrides.pop("name", f"分類{category_id}"),
            "parent_id": parent_id,
            "level": 1 if parent_id is None else 2,
            "status": "active",
            "sort": sort,
        }
        payload.update(overrides)
        return Category(**payload)

    return _make_category


@pytest.fixture()
def api_client(fake_api: FakeBakeryAPI) -> Iterator[TestClient]:
    from bakery_admin.core.dependencies import (
        get_api_transport,
        get_reorder_service,
        get_reorder_store,
    )
    from bakery_admin.domain.category_reorder_service import (
        CategoryReorderService,
        ReorderSessionStore,
    )
    from bakery_admin.main import create_app

    app = create_app()
    store = ReorderSessionStore()
    service = CategoryReorderService()
    app.dependency_overrides[get_api_transport] = lambda: fake_api.transport
    app.dependency_overrides[get_reorder_store] = lambda: store
    app.dependency_overrides[get_reorder_service] = lambda: service
    with TestClient(app) as client:
        client.headers["Authorization"] = f"Bearer {ACCESS_TOKEN}"
        yield client
    app.dependency_overrides.clear()
