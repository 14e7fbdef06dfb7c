from typing import Literal, Optional

from pydantic import BaseModel

from bakery_admin.domain.order_service import OrderFilters


class OrderFiltersModel(BaseModel):
    search_query: str = ""
    status_filter: str = ""
    date_filter: str = ""
    company_name_filter: str = ""
    start_date: str = ""
    end_date: str = ""
    salesperson_id: str = ""

    def to_filters(self) -> OrderFilters:
        return OrderFilters(**self.model_dump())


class OrderStatusUpdate(BaseModel):
    status: str
    current_status: Optional[str] = None
    note: Optional[str] = None


class OrderCancelRequest(BaseModel):
    order_number: str


class OrderItemCreate(BaseModel):
    product_id: str
    quantity: int
    price: Optional[float] = None


class OrderItemsUpdate(BaseModel):
    items: list[dict]


class ExportRequest(BaseModel):
    filters: OrderFiltersModel = OrderFiltersModel()
    export_all: bool = False
    selected_ids: Optional[list[str]] = None
    format: Literal["xlsx", "csv"] = "xlsx"
