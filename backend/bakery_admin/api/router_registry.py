from fastapi import FastAPI

from bakery_admin.api.routers.category_router import router as category_router
from bakery_admin.api.routers.category_sort_router import router as category_sort_router
from bakery_admin.api.routers.commission_router import router as commission_router
from bakery_admin.api.routers.coupon_router import router as coupon_router
from bakery_admin.api.routers.customer_router import router as customer_router
from bakery_admin.api.routers.export_router import router as export_router
from bakery_admin.api.routers.health_router import router as health_router
from bakery_admin.api.routers.order_router import router as order_router
from bakery_admin.api.routers.points_router import router as points_router
from bakery_admin.api.routers.product_router import router as product_router

ADMIN_PREFIX = "/admin-api"


def register_routers(app: FastAPI) -> None:
    prefix = ADMIN_PREFIX
    # sort routes before /categories/{category_id}
    app.include_router(category_sort_router, prefix=prefix)
    app.include_router(category_router, prefix=prefix)
    app.include_router(export_router, prefix=prefix)
    app.include_router(order_router, prefix=prefix)
    app.include_router(customer_router, prefix=prefix)
    app.include_router(product_router, prefix=prefix)
    app.include_router(coupon_router, prefix=prefix)
    app.include_router(commission_router, prefix=prefix)
    app.include_router(points_router, prefix=prefix)

    app.include_router(health_router, prefix=prefix)
