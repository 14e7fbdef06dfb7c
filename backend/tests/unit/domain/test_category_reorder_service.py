import asyncio

import httpx
import pytest

from bakery_admin.core.errors import BakeryRequestError
from bakery_admin.domain.category_ordering import ParentFilter
from bakery_admin.domain.category_reorder_service import (
    CATEGORIES_PATH,
    CATEGORIES_SORT_PATH,
    CategoryReorderService,
    CategoryReorderSession,
    ReorderSessionStore,
)

CATEGORY_ROWS = [
    {"id": 1, "name": "麵包", "parent_id": None, "level": 1, "status": "active", "sort": 20},
    {"id": 2, "name": "蛋糕", "parent_id": None, "level": 1, "status": "active", "sort": 10},
    {"id": 3, "name": "吐司", "parent_id": 1, "level": 2, "status": "active", "sort": 10},
    {"id": 4, "name": "貝果", "parent_id": 1, "level": 2, "status": "active", "sort": 11},
    {"id": 5, "name": "可頌", "parent_id": 1, "level": 2, "status": "active", "sort": 30},
]


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def service(clock) -> CategoryReorderService:
    return CategoryReorderService(save_banner_seconds=5, auth_warning_seconds=5, clock=clock)


@pytest.fixture()
def session() -> CategoryReorderSession:
    return CategoryReorderSession(session_key="test")


def load(service, session, fake_api, bakery_client, rows=CATEGORY_ROWS):
    fake_api.add("GET", CATEGORIES_PATH, {"data": rows})
    asyncio.run(service.load(session, bakery_client))


def test_load_sorts_categories_and_queries_by_id(service, session, fake_api, bakery_client):
    load(service, session, fake_api, bakery_client)

    assert session.loaded is True
    assert session.is_dirty is False
    assert [c.id for c in session.categories] == [2, 3, 4, 1, 5]
    request = fake_api.calls("GET", CATEGORIES_PATH)[0]
    assert request.url.params["sortBy"] == "id"
    assert request.url.params["order"] == "ASC"


def test_load_accepts_bare_list(service, session, fake_api, bakery_client):
    fake_api.add("GET", CATEGORIES_PATH, CATEGORY_ROWS[:2])
    asyncio.run(service.load(session, bakery_client))
    assert [c.id for c in session.categories] == [2, 1]


def test_load_failure_sets_error_and_hides_categories(service, session, fake_api, bakery_client):
    fake_api.add("GET", CATEGORIES_PATH, {"message": "伺服器錯誤"}, status_code=500)
    asyncio.run(service.load(session, bakery_client))

    snapshot = service.snapshot(session)
    assert snapshot["error"] == "伺服器錯誤"
    assert snapshot["categories"] == []
    assert snapshot["auth_warning"] is False


def test_load_auth_failure_raises_auth_warning_for_a_while(
    service, session, fake_api, bakery_client, clock
):
    fake_api.add("GET", CATEGORIES_PATH, {"message": "未授權"}, status_code=401)
    asyncio.run(service.load(session, bakery_client))

    assert service.snapshot(session)["auth_warning"] is True
    clock.now += 6
    assert service.snapshot(session)["auth_warning"] is False


def test_move_marks_dirty_and_noop_does_not(service, session, fake_api, bakery_client):
    load(service, session, fake_api, bakery_client)

    assert service.move(session, 1, 1) is None
    assert session.is_dirty is False

    result = service.move(session, 1, 2)
    assert result is not None
    assert result.new_sort == 5
    assert session.is_dirty is True


def test_move_before_load_is_rejected(service, session):
    with pytest.raises(BakeryRequestError) as exc_info:
        service.move(session, 1, 2)
    assert exc_info.value.status_code == 409


def test_filtered_move_renumbers_only_the_scope(service, session, fake_api, bakery_client):
    load(service, session, fake_api, bakery_client)
    service.set_filter(session, ParentFilter(parent_id=1))

    result = service.move(session, 5, 4)

    assert result.renumbered is True
    by_id = {c.id: c.sort for c in session.categories}
    assert by_id == {1: 20, 2: 10, 3: 10, 4: 30, 5: 20}
    snapshot = service.snapshot(session)
    assert [c["id"] for c in snapshot["categories"]] == [3, 5, 4]
    assert snapshot["parent_filter"] == "1"


def test_save_sends_every_category_and_clears_dirty(
    service, session, fake_api, bakery_client, clock
):
    load(service, session, fake_api, bakery_client)
    service.set_filter(session, ParentFilter(top_level=True))
    service.move(session, 1, 2)
    fake_api.add("PUT", CATEGORIES_SORT_PATH, {"success": True})

    assert asyncio.run(service.save(session, bakery_client)) is True

    body = fake_api.last_json("PUT", CATEGORIES_SORT_PATH)
    assert {item["id"] for item in body["sortData"]} == {1, 2, 3, 4, 5}
    assert {"id": 1, "sort": 5} in body["sortData"]
    request = fake_api.calls("PUT", CATEGORIES_SORT_PATH)[0]
    assert request.headers["Authorization"] == "Bearer test-token"
    assert "accessToken=test-token" in request.headers["cookie"]

    assert session.is_dirty is False
    assert service.snapshot(session)["save_success"] is True
    clock.now += 5
    assert service.snapshot(session)["save_success"] is False


def test_move_during_save_keeps_session_dirty(service, session, fake_api, bakery_client):
    load(service, session, fake_api, bakery_client)
    service.move(session, 1, 2)

    def put_while_user_drags(request: httpx.Request) -> httpx.Response:
        assert service.move(session, 5, 2) is not None
        return httpx.Response(200, json={"success": True})

    fake_api.add("PUT", CATEGORIES_SORT_PATH, handler=put_while_user_drags)

    assert asyncio.run(service.save(session, bakery_client)) is True
    assert session.is_dirty is True
    sent = {item["id"]: item["sort"] for item in fake_api.last_json("PUT", CATEGORIES_SORT_PATH)["sortData"]}
    assert sent[5] != {c.id: c.sort for c in session.categories}[5]


def test_save_failure_keeps_dirty_state(service, session, fake_api, bakery_client):
    load(service, session, fake_api, bakery_client)
    service.move(session, 1, 2)
    fake_api.add("PUT", CATEGORIES_SORT_PATH, {"message": "保存失敗"}, status_code=500)

    assert asyncio.run(service.save(session, bakery_client)) is False
    assert session.is_dirty is True
    assert session.save_error == "保存失敗"
    assert {c.id: c.sort for c in session.categories}[1] == 5


def test_save_auth_failure_raises_auth_warning(service, session, fake_api, bakery_client):
    load(service, session, fake_api, bakery_client)
    fake_api.add("PUT", CATEGORIES_SORT_PATH, {"message": "認證已過期"}, status_code=403)

    assert asyncio.run(service.save(session, bakery_client)) is False
    snapshot = service.snapshot(session)
    assert snapshot["save_error"] == "認證已過期"
    assert snapshot["auth_warning"] is True


def test_save_without_token_does_not_call_api(service, session, fake_api, make_client):
    client = make_client(access_token=None)
    assert asyncio.run(service.save(session, client)) is False
    assert session.save_error == "未獲取到認證令牌，請重新登入"
    assert fake_api.requests == []


def test_save_network_error_is_reported(service, session, fake_api, bakery_client):
    load(service, session, fake_api, bakery_client)

    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    fake_api.add("PUT", CATEGORIES_SORT_PATH, handler=boom)
    assert asyncio.run(service.save(session, bakery_client)) is False
    assert session.save_error.startswith("無法連線後端服務")


def test_session_store_keys_by_token_and_expires(clock):
    store = ReorderSessionStore(ttl_seconds=60, clock=clock)
    first = store.get_or_create("token-a")
    assert store.get_or_create("token-a") is first
    assert store.get_or_create("token-b") is not first
    assert len(store) == 2

    clock.now += 61
    assert store.get_or_create("token-a") is not first
    assert len(store) == 1

    store.discard("token-a")
    assert len(store) == 0


def test_session_key_does_not_expose_token(clock):
    store = ReorderSessionStore(clock=clock)
    session = store.get_or_create("secret-token")
    assert "secret-token" not in session.session_key
