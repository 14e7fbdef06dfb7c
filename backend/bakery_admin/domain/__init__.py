from bakery_admin.domain.category_reorder_service import (
    CategoryReorderService,
    CategoryReorderSession,
    ReorderSessionStore,
)
from bakery_admin.domain.category_service import CategoryService
from bakery_admin.domain.commission_service import CommissionService
from bakery_admin.domain.coupon_service import CouponService
from bakery_admin.domain.customer_service import CustomerService
from bakery_admin.domain.order_export_service import OrderExportService
from bakery_admin.domain.order_service import OrderFilters, OrderService
from bakery_admin.domain.points_service import PointsService
from bakery_admin.domain.product_service import ProductService

__all__ = [
    "CategoryReorderService",
    "CategoryReorderSession",
    "CategoryService",
    "CommissionService",
    "CouponService",
    "CustomerService",
    "OrderExportService",
    "OrderFilters",
    "OrderService",
    "PointsService",
    "ProductService",
    "ReorderSessionStore",
]
