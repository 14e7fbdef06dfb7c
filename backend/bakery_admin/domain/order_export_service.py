"""ERP spreadsheet export for orders.

Each order item becomes one 37-column row in the layout the ERP import
expects; an order with a shipping fee gets one extra ``運費`` row after its
last item. The sheet starts with a Chinese header row followed by the ERP
field-code row.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional
from urllib.parse import quote
from zoneinfo import ZoneInfo

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from bakery_admin.core.bakery_api import BakeryAPIClient, extract_error_message, unwrap_list
from bakery_admin.core.errors import BakeryRequestError
from bakery_admin.domain.order_service import OrderFilters, append_filter_params, format_order_data

logger = logging.getLogger(__name__)

ORDERS_WITH_ITEMS_PATH = "/api/orders/with-items"
CUSTOMERS_PATH = "/api/customers"

SHEET_TITLE = "訂單數據"
COLUMN_WIDTH = 15
DELIVERY_LEAD_DAYS = 7
DEFAULT_TIMEZONE = "Asia/Taipei"

CUSTOMER_CODE = "WEB01"
DEPARTMENT_CODE = "AE01"
WAREHOUSE_CODE = "01"
WAREHOUSE_NAME = "總倉"
CURRENCY = "NTD"
SHIPPING_FEE_PRODUCT_CODE = "902002"
SHIPPING_FEE_PRODUCT_NAME = "運費"

EXPORT_HEADERS = [
    "訂貨日期", "交貨日期", "客戶代號", "客戶名稱", "客戶全名", "統一編號",
    "訂單單號/客戶單號", "訂貨部門", "部門名稱", "業務人員代號", "業務人員姓名",
    "預收訂金", "訂貨人", "訂貨電話", "提貨人", "提貨電話", "送貨方式",
    "提貨門市", "提貨門市名稱", "送貨地址", "發票地址", "配送方式", "幣別",
    "匯率", "備註", "類別", "品號", "品名", "規格", "單位", "單位名稱",
    "庫別", "庫別名稱", "數量", "單價", "折扣率", "明細備註",
]

EXPORT_CODES = [
    "ODMF003", "ODMF092", "ODMF004", "CUST003", "ODMF055", "ODMF074",
    "ODMF007", "ODMF008", "DEPT002", "ODMF009", "PA51004", "ODMFA3FAMNT",
    "ODMF005", "ODMF080", "ODMF079", "ODMF081", "ODMF096", "ODMF102",
    "ODMF102NAME", "ODMF049", "ODMF075", "ODMF143", "ODMF010", "ODMFA01EXRA",
    "ODMF054", "ODDT005", "ODDT004", "ODDT043", "ODDT044", "ODDT009",
    "UTMF002", "ODDT010", "STRG002", "ODDTA01IQTY", "ODDTA1FPRIC",
    "ODDTA01IRAT", "ODDT026",
]

# Offsets of the item-level columns inside a row.
COL_PRODUCT_CODE = 26
COL_PRODUCT_NAME = 27
COL_UNIT = 29
COL_QUANTITY = 33
COL_PRICE = 34


def format_number(value: Any) -> str:
    if value is None or value == "":
        return "0"
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _to_number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def shipping_fee_of(order: dict) -> float:
    return _to_number(order.get("shipping_fee"))


def parse_order_date(value: Any, tz_name: str = DEFAULT_TIMEZONE) -> Optional[date]:
    raw = str(value or "").strip()
    if not raw:
        return None
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(ZoneInfo(tz_name))
    return parsed.date()


def format_erp_date(day: Optional[date]) -> str:
    if day is None:
        return ""
    return f"{day.year}/{day.month:02d}/{day.day:02d}"


def format_address(address: Any) -> str:
    if not address:
        return ""
    if isinstance(address, dict):
        parts = [address.get("postal_code"), address.get("city"), address.get("address1")]
        return "".join(str(part) for part in parts if part)
    return str(address)


def build_remark(order: dict) -> str:
    salesperson = order.get("salesperson") or {}
    fee = shipping_fee_of(order)
    address = format_address(order.get("address"))

    remark = f"推薦者:{salesperson.get('companyName') or ''}"
    remark += f"/ 運費:{format_number(order.get('shipping_fee'))}/ " if fee > 0 else "/ "
    if order.get("shipping_method") == "pickup":
        remark += f"配送方式:{address}/ "
    else:
        remark += "配送方式:黑貓宅配/ "
    if order.get("carrier"):
        remark += f"載具:{order['carrier']}/"
    elif order.get("taxId"):
        remark += f"統編:{order['taxId']}/"
    else:
        remark += "/"
    return remark


def _base_row(order: dict, tz_name: str) -> list[str]:
    order_day = parse_order_date(order.get("created_at"), tz_name)
    delivery_day = order_day + timedelta(days=DELIVERY_LEAD_DAYS) if order_day else None
    address = format_address(order.get("address"))
    customer_name = order.get("customer_name") or ""
    customer_phone = order.get("customer_phone") or ""
    return [
        format_erp_date(order_day),
        format_erp_date(delivery_day),
        CUSTOMER_CODE,
        "",
        "",
        order.get("taxId") or "",
        order.get("order_number") or "",
        DEPARTMENT_CODE,
        "",
        "",
        "",
        "0",
        customer_name,
        customer_phone,
        customer_name,
        customer_phone,
        "1",
        "",
        "",
        address,
        address,
        "1",
        CURRENCY,
        "1",
        build_remark(order),
        "",
        "",
        "",
        "",
        "",
        "",
        WAREHOUSE_CODE,
        WAREHOUSE_NAME,
        "0",
        "0",
        "",
        "",
    ]


def create_export_row(order: dict, item: Optional[dict], tz_name: str = DEFAULT_TIMEZONE) -> list[str]:
    row = _base_row(order, tz_name)
    if item is not None:
        product_id = item.get("product_id")
        row[COL_PRODUCT_CODE] = "" if product_id is None else str(product_id)
        row[COL_PRODUCT_NAME] = item.get("product_name") or ""
        row[COL_UNIT] = item.get("product_unit_code") or ""
        row[COL_QUANTITY] = format_number(item.get("quantity"))
        row[COL_PRICE] = format_number(item.get("price"))
    return row


def create_shipping_fee_row(order: dict, tz_name: str = DEFAULT_TIMEZONE) -> list[str]:
    row = _base_row(order, tz_name)
    row[COL_PRODUCT_CODE] = SHIPPING_FEE_PRODUCT_CODE
    row[COL_PRODUCT_NAME] = SHIPPING_FEE_PRODUCT_NAME
    row[COL_QUANTITY] = "1"
    row[COL_PRICE] = format_number(order.get("shipping_fee"))
    return row


def order_rows(order: dict, tz_name: str = DEFAULT_TIMEZONE) -> list[list[str]]:
    formatted = format_order_data(order) or {}
    items = formatted.get("orderItems") or []
    rows = [create_export_row(formatted, item, tz_name) for item in items]
    if not rows:
        rows.append(create_export_row(formatted, None, tz_name))
    if shipping_fee_of(formatted) > 0:
        rows.append(create_shipping_fee_row(formatted, tz_name))
    return rows


def flatten_orders(orders: Iterable[dict], tz_name: str = DEFAULT_TIMEZONE) -> list[list[str]]:
    rows: list[list[str]] = []
    for order in orders:
        rows.extend(order_rows(order, tz_name))
    return rows


def select_orders(orders: list[dict], selected_ids: Optional[Iterable[Any]]) -> list[dict]:
    if selected_ids is None:
        return list(orders)
    wanted = {str(order_id) for order_id in selected_ids}
    if not wanted:
        raise BakeryRequestError("請至少選擇一個訂單進行匯出")
    return [order for order in orders if str(order.get("id")) in wanted]


def build_workbook_bytes(rows: list[list[str]]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    ws.append(EXPORT_HEADERS)
    ws.append(EXPORT_CODES)
    for row in rows:
        ws.append(row)

    header_font = Font(bold=True)
    for c in ws[1]:
        c.font = header_font
        c.alignment = Alignment(vertical="center")

    for idx in range(1, len(EXPORT_HEADERS) + 1):
        ws.column_dimensions[get_column_letter(idx)].width = COLUMN_WIDTH

    bio = io.BytesIO()
    wb.save(bio)
    return bio.getvalue()


def build_csv_bytes(rows: list[list[str]]) -> bytes:
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(EXPORT_HEADERS)
    writer.writerow(EXPORT_CODES)
    writer.writerows(rows)
    # BOM so spreadsheet apps detect UTF-8
    return out.getvalue().encode("utf-8-sig")


def export_filename(today: date, extension: str = "xlsx") -> str:
    return f"訂單匯出_{today.year}{today.month:02d}{today.day:02d}.{extension}"


def content_disposition(filename: str) -> str:
    ascii_name = "orders_export." + filename.rsplit(".", 1)[-1]
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


def build_export_query_params(
    filters: OrderFilters, export_all: bool, limit: int = 1000
) -> list[tuple[str, str]]:
    params = [
        ("limit", str(limit)),
        ("sortBy", "created_at"),
        ("sortOrder", "desc"),
    ]
    if not export_all:
        append_filter_params(params, filters)
    return params


def extract_companies(payload: Any) -> list[dict]:
    """Company options for the export filter, one entry per company name."""
    if not isinstance(payload, dict):
        return []

    data = payload.get("data")
    entries: list[dict] = []
    if payload.get("status") == "success" and isinstance(data, dict) and "lineUsers" in data:
        for user in unwrap_list(payload, "data.lineUsers"):
            company = (user.get("customer") or {}).get("companyName")
            if company:
                entries.append(
                    {
                        "id": user.get("id"),
                        "name": user.get("name") or user.get("displayName") or "未知",
                        "companyName": company,
                    }
                )
    elif isinstance(data, list):
        for customer in data:
            company = (customer.get("companyName") or "").strip()
            if company:
                entries.append(
                    {
                        "id": customer.get("id") or "",
                        "name": customer.get("name") or "未知",
                        "companyName": customer.get("companyName"),
                    }
                )
    elif isinstance(payload.get("customers"), list):
        for customer in payload["customers"]:
            if customer.get("companyName"):
                entries.append(
                    {
                        "id": customer.get("id"),
                        "name": customer.get("name") or "未知",
                        "companyName": customer.get("companyName"),
                    }
                )
    else:
        logger.warning("獲取客戶數據失敗: 未知的數據格式")

    unique: dict[str, dict] = {}
    for entry in entries:
        unique[entry["companyName"]] = entry
    return list(unique.values())


class OrderExportService:
    def __init__(self, *, limit: int = 1000, tz_name: str = DEFAULT_TIMEZONE):
        self.limit = limit
        self.tz_name = tz_name

    async def fetch_orders_for_export(
        self, client: BakeryAPIClient, filters: OrderFilters, export_all: bool = False
    ) -> list[dict]:
        params = build_export_query_params(filters, export_all, limit=self.limit)
        payload = await client.api_get(ORDERS_WITH_ITEMS_PATH, params=params)
        if isinstance(payload, dict) and isinstance(payload.get("orders"), list):
            return payload["orders"]
        raise BakeryRequestError(extract_error_message(payload, "獲取訂單數據失敗"))

    async def fetch_companies(self, client: BakeryAPIClient) -> list[dict]:
        params = {"limit": 100, "sortBy": "companyName", "order": "ASC"}
        payload = await client.api_get(CUSTOMERS_PATH, params=params)
        return extract_companies(payload)

    async def export_orders(
        self,
        client: BakeryAPIClient,
        filters: OrderFilters,
        *,
        export_all: bool = False,
        selected_ids: Optional[list[Any]] = None,
        file_format: str = "xlsx",
        today: Optional[date] = None,
    ) -> tuple[str, bytes, int]:
        if selected_ids is not None and not selected_ids:
            raise BakeryRequestError("請至少選擇一個訂單進行匯出")
        orders = await self.fetch_orders_for_export(client, filters, export_all)
        chosen = select_orders(orders, selected_ids)
        rows = flatten_orders(chosen, self.tz_name)
        logger.info("exporting %s orders as %s rows (%s)", len(chosen), len(rows), file_format)

        today = today or datetime.now(ZoneInfo(self.tz_name)).date()
        if file_format == "csv":
            return export_filename(today, "csv"), build_csv_bytes(rows), len(chosen)
        return export_filename(today), build_workbook_bytes(rows), len(chosen)
