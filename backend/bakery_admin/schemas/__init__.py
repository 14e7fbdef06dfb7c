from bakery_admin.schemas.category import (
    CategoryCreate,
    CategoryMoveRequest,
    CategoryUpdate,
)
from bakery_admin.schemas.commission import (
    CommissionBatchPayRequest,
    CommissionPlanAssign,
    CommissionRecordStatusUpdate,
)
from bakery_admin.schemas.order import (
    ExportRequest,
    OrderCancelRequest,
    OrderFiltersModel,
    OrderItemCreate,
    OrderItemsUpdate,
    OrderStatusUpdate,
)
from bakery_admin.schemas.points import (
    PaymentStatusUpdate,
    PointSettingsUpdate,
    PointSettingValue,
    PointsAdjustRequest,
    PointsExportRequest,
    VirtualCardStatusUpdate,
)

__all__ = [
    "CategoryCreate",
    "CategoryMoveRequest",
    "CategoryUpdate",
    "CommissionBatchPayRequest",
    "CommissionPlanAssign",
    "CommissionRecordStatusUpdate",
    "ExportRequest",
    "OrderCancelRequest",
    "OrderFiltersModel",
    "OrderItemCreate",
    "OrderItemsUpdate",
    "OrderStatusUpdate",
    "PaymentStatusUpdate",
    "PointSettingValue",
    "PointSettingsUpdate",
    "PointsAdjustRequest",
    "PointsExportRequest",
    "VirtualCardStatusUpdate",
]
