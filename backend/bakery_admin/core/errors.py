import asyncio

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

AUTH_ERROR_MARKER = "認證"
MISSING_TOKEN_MESSAGE = "未獲取到認證令牌，請重新登入"


class BakeryAPIError(Exception):
    def __init__(self, message: str, error_type: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.status_code = status_code

    @property
    def auth_required(self) -> bool:
        return self.error_type == "auth"


class BakeryAuthError(BakeryAPIError):
    def __init__(self, message: str = MISSING_TOKEN_MESSAGE):
        super().__init__(message, error_type="auth", status_code=401)


class BakeryNotFoundError(BakeryAPIError):
    def __init__(self, message: str):
        super().__init__(message, error_type="not_found", status_code=404)


class BakeryRequestError(BakeryAPIError):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message, error_type="request", status_code=status_code)


class BakeryTimeoutError(BakeryAPIError):
    def __init__(self, message: str):
        super().__init__(message, error_type="timeout", status_code=504)


class BakeryUnavailableError(BakeryAPIError):
    def __init__(self, message: str):
        super().__init__(message, error_type="external", status_code=502)


def is_auth_error(message: str | None) -> bool:
    return bool(message) and AUTH_ERROR_MARKER in message


def error_for_status(status_code: int, message: str) -> BakeryAPIError:
    if status_code == 401 or is_auth_error(message):
        return BakeryAuthError(message)
    if status_code == 404:
        return BakeryNotFoundError(message)
    if status_code in (408, 504):
        return BakeryTimeoutError(message)
    if 400 <= status_code < 500:
        return BakeryRequestError(message, status_code=status_code)
    return BakeryUnavailableError(message)


def normalize_api_error(exc: Exception) -> BakeryAPIError:
    if isinstance(exc, BakeryAPIError):
        return exc

    message = str(exc) or exc.__class__.__name__
    lowered = message.lower()

    if is_auth_error(message) or "401" in message or "unauthorized" in lowered:
        return BakeryAuthError(message)

    if isinstance(exc, asyncio.TimeoutError) or "timeout" in lowered or "逾時" in message:
        return BakeryTimeoutError(message)

    if isinstance(exc, (ValueError, KeyError)):
        return BakeryRequestError(message)

    return BakeryUnavailableError(message)


def error_payload(error: BakeryAPIError) -> dict:
    return {
        "detail": error.message,
        "error_type": error.error_type,
        "auth_required": error.auth_required,
    }


def configure_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(BakeryAPIError)
    async def bakery_api_error_handler(request: Request, exc: BakeryAPIError):
        return JSONResponse(status_code=exc.status_code, content=error_payload(exc))
