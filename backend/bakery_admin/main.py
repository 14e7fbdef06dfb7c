from fastapi import FastAPI

from bakery_admin.core.errors import configure_error_handlers
from bakery_admin.core.http import configure_cors, configure_request_middleware
from bakery_admin.core.settings import get_settings, validate_startup_settings


def create_app() -> FastAPI:
    settings = get_settings()
    validate_startup_settings(settings)

    from bakery_admin.api.router_registry import register_routers

    app = FastAPI(title="烘焙後台管理API", version="1.0.0")

    configure_request_middleware(app)
    configure_cors(app, settings)
    configure_error_handlers(app)

    register_routers(app)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
