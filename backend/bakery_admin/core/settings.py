from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BACKEND_DIR = Path(__file__).resolve().parents[2]
ENV_FILE = BACKEND_DIR / ".env"


@dataclass(frozen=True)
class BakeryAPISettings:
    base_url: str
    timeout: float
    connect_timeout: float
    access_token_cookie: str

    @property
    def normalized_base_url(self) -> str:
        return self.base_url.strip().rstrip("/") or "http://localhost:4000"


@dataclass(frozen=True)
class BannerSettings:
    save_success_seconds: int
    auth_warning_seconds: int


@dataclass(frozen=True)
class PaginationSettings:
    default_page_size: int
    max_page_size: int

    def clamp_limit(self, limit: int | None) -> int:
        if not limit or limit <= 0:
            return self.default_page_size
        return min(limit, self.max_page_size)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    bakery_api_base_url: str = Field(default="http://localhost:4000", alias="BAKERY_API_BASE_URL")
    bakery_api_timeout: float = Field(default=10.0, alias="BAKERY_API_TIMEOUT")
    bakery_api_connect_timeout: float = Field(default=5.0, alias="BAKERY_API_CONNECT_TIMEOUT")
    access_token_cookie: str = Field(default="accessToken", alias="ACCESS_TOKEN_COOKIE")

    allowed_origins: str = Field(default="", alias="ALLOWED_ORIGINS")

    default_page_size: int = Field(default=10, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, alias="MAX_PAGE_SIZE")
    export_order_limit: int = Field(default=1000, alias="EXPORT_ORDER_LIMIT")
    export_timezone: str = Field(default="Asia/Taipei", alias="EXPORT_TIMEZONE")

    save_banner_seconds: int = Field(default=5, alias="SAVE_BANNER_SECONDS")
    auth_warning_seconds: int = Field(default=5, alias="AUTH_WARNING_SECONDS")
    reorder_session_ttl_seconds: int = Field(default=1800, alias="REORDER_SESSION_TTL_SECONDS")

    @property
    def api(self) -> BakeryAPISettings:
        return BakeryAPISettings(
            base_url=self.bakery_api_base_url,
            timeout=self.bakery_api_timeout,
            connect_timeout=self.bakery_api_connect_timeout,
            access_token_cookie=self.access_token_cookie.strip(),
        )

    @property
    def banners(self) -> BannerSettings:
        return BannerSettings(
            save_success_seconds=self.save_banner_seconds,
            auth_warning_seconds=self.auth_warning_seconds,
        )

    @property
    def pagination(self) -> PaginationSettings:
        return PaginationSettings(
            default_page_size=self.default_page_size,
            max_page_size=self.max_page_size,
        )

    @property
    def cors_allow_origins(self) -> list[str]:
        raw = self.allowed_origins.strip()
        if not raw:
            return ["http://localhost:3000", "http://127.0.0.1:3000"]
        if raw == "*":
            return ["*"]

        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                return [str(origin).strip() for origin in parsed if str(origin).strip()]

        return [origin.strip() for origin in raw.split(",") if origin.strip()]


def validate_startup_settings(settings: AppSettings) -> None:
    errors: list[str] = []

    api = settings.api
    if not api.base_url.strip():
        errors.append("BAKERY_API_BASE_URL 不能為空")
    elif not api.base_url.strip().startswith(("http://", "https://")):
        errors.append("BAKERY_API_BASE_URL 必須以 http:// 或 https:// 開頭")
    if api.timeout <= 0:
        errors.append("BAKERY_API_TIMEOUT 必須大於 0")
    if api.connect_timeout <= 0:
        errors.append("BAKERY_API_CONNECT_TIMEOUT 必須大於 0")
    if not api.access_token_cookie:
        errors.append("ACCESS_TOKEN_COOKIE 不能為空")

    pagination = settings.pagination
    if pagination.default_page_size <= 0:
        errors.append("DEFAULT_PAGE_SIZE 必須為正整數")
    if pagination.max_page_size < pagination.default_page_size:
        errors.append("MAX_PAGE_SIZE 不能小於 DEFAULT_PAGE_SIZE")
    if settings.export_order_limit <= 0:
        errors.append("EXPORT_ORDER_LIMIT 必須為正整數")
    try:
        ZoneInfo(settings.export_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        errors.append(f"EXPORT_TIMEZONE 無效: {settings.export_timezone}")

    banners = settings.banners
    if banners.save_success_seconds <= 0:
        errors.append("SAVE_BANNER_SECONDS 必須大於 0")
    if banners.auth_warning_seconds <= 0:
        errors.append("AUTH_WARNING_SECONDS 必須大於 0")
    if settings.reorder_session_ttl_seconds <= 0:
        errors.append("REORDER_SESSION_TTL_SECONDS 必須大於 0")

    if errors:
        detail = "\n".join(f"- {item}" for item in errors)
        raise RuntimeError(f"啟動配置校驗失敗:\n{detail}")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()
