from functools import lru_cache
from typing import Optional

import httpx
from fastapi import Depends, Request

from bakery_admin.core.bakery_api import BakeryAPIClient
from bakery_admin.core.errors import BakeryAuthError
from bakery_admin.core.settings import get_settings
from bakery_admin.domain.category_reorder_service import (
    CategoryReorderService,
    CategoryReorderSession,
    ReorderSessionStore,
)


def extract_access_token(request: Request) -> str:
    api = get_settings().api
    token = (request.cookies.get(api.access_token_cookie) or "").strip()
    if token:
        return token
    authorization = request.headers.get("Authorization") or ""
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return ""


def get_access_token(request: Request) -> str:
    token = extract_access_token(request)
    if not token:
        raise BakeryAuthError()
    return token


def get_api_transport() -> Optional[httpx.AsyncBaseTransport]:
    return None


def get_bakery_client(
    access_token: str = Depends(get_access_token),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_api_transport),
) -> BakeryAPIClient:
    api = get_settings().api
    return BakeryAPIClient(
        api.normalized_base_url,
        access_token=access_token,
        cookie_name=api.access_token_cookie,
        timeout=httpx.Timeout(api.timeout, connect=api.connect_timeout),
        transport=transport,
    )


@lru_cache(maxsize=1)
def get_reorder_store() -> ReorderSessionStore:
    return ReorderSessionStore(ttl_seconds=get_settings().reorder_session_ttl_seconds)


@lru_cache(maxsize=1)
def get_reorder_service() -> CategoryReorderService:
    banners = get_settings().banners
    return CategoryReorderService(
        save_banner_seconds=banners.save_success_seconds,
        auth_warning_seconds=banners.auth_warning_seconds,
    )


def get_reorder_session(
    access_token: str = Depends(get_access_token),
    store: ReorderSessionStore = Depends(get_reorder_store),
) -> CategoryReorderSession:
    return store.get_or_create(access_token)


def get_page_limit(limit: Optional[int] = None) -> int:
    return get_settings().pagination.clamp_limit(limit)
