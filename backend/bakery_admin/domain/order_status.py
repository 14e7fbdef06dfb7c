ORDER_STATUS_PENDING = "pending"
ORDER_STATUS_PROCESSING = "processing"
ORDER_STATUS_SHIPPED = "shipped"
ORDER_STATUS_DELIVERED = "delivered"
ORDER_STATUS_CANCELLED = "cancelled"

ORDER_STATUSES = (
    ORDER_STATUS_PENDING,
    ORDER_STATUS_PROCESSING,
    ORDER_STATUS_SHIPPED,
    ORDER_STATUS_DELIVERED,
    ORDER_STATUS_CANCELLED,
)

_STATUS_LABELS = {
    ORDER_STATUS_PENDING: "待處理",
    ORDER_STATUS_PROCESSING: "處理中",
    ORDER_STATUS_SHIPPED: "已出貨",
    ORDER_STATUS_DELIVERED: "已送達",
    ORDER_STATUS_CANCELLED: "已取消",
}

STATUS_DISPLAY: dict[str, str] = {
    **{status.upper(): label for status, label in _STATUS_LABELS.items()},
    **_STATUS_LABELS,
}

REVERSE_STATUS_MAP: dict[str, str] = {
    label: status.upper() for status, label in _STATUS_LABELS.items()
}

ALLOWED_ORDER_STATUS_TRANSITIONS: dict[str, list[str]] = {
    ORDER_STATUS_PENDING: [
        ORDER_STATUS_PROCESSING,
        ORDER_STATUS_SHIPPED,
        ORDER_STATUS_DELIVERED,
        ORDER_STATUS_CANCELLED,
    ],
    ORDER_STATUS_PROCESSING: [
        ORDER_STATUS_SHIPPED,
        ORDER_STATUS_DELIVERED,
        ORDER_STATUS_CANCELLED,
    ],
    ORDER_STATUS_SHIPPED: [ORDER_STATUS_DELIVERED, ORDER_STATUS_CANCELLED],
    ORDER_STATUS_DELIVERED: [ORDER_STATUS_DELIVERED],
    ORDER_STATUS_CANCELLED: [ORDER_STATUS_CANCELLED],
}

PAYMENT_METHOD_OPTIONS = [
    {"value": "cash", "label": "現金"},
    {"value": "credit_card", "label": "信用卡"},
    {"value": "bank_transfer", "label": "銀行轉帳"},
    {"value": "line_pay", "label": "Line Pay"},
]

PAYMENT_STATUS_OPTIONS = [
    {"value": "pending", "label": "未付款"},
    {"value": "paid", "label": "已付款"},
    {"value": "refunded", "label": "已退款"},
    {"value": "failed", "label": "付款失敗"},
]

SHIPPING_METHOD_OPTIONS = [
    {"value": "takkyubin_payment", "label": "黑貓宅急便-匯款"},
    {"value": "takkyubin_cod", "label": "黑貓宅急便-貨到付款"},
    {"value": "pickup", "label": "自取"},
]

SHIPPING_STATUS_OPTIONS = [
    {"value": "pending", "label": "待出貨"},
    {"value": "processing", "label": "準備中"},
    {"value": "shipped", "label": "已出貨"},
    {"value": "delivered", "label": "已送達"},
    {"value": "cancelled", "label": "已取消"},
]

DATE_FILTER_OPTIONS = [
    {"value": "", "label": "所有時間"},
    {"value": "today", "label": "今天"},
    {"value": "yesterday", "label": "昨天"},
    {"value": "this_week", "label": "本週"},
    {"value": "this_month", "label": "本月"},
    {"value": "last_month", "label": "上個月"},
    {"value": "custom", "label": "自訂日期範圍"},
]


def get_status_display(status: str | None) -> str:
    if not status:
        return "未知"
    return STATUS_DISPLAY.get(status) or STATUS_DISPLAY.get(status.upper()) or status


def to_api_status(status: str) -> str:
    return REVERSE_STATUS_MAP.get(status, status)


def can_cancel_order(status: str | None) -> bool:
    if not status:
        return False
    return status.lower() in (ORDER_STATUS_PENDING, ORDER_STATUS_PROCESSING)


def can_edit_order(status: str | None) -> bool:
    if not status:
        return False
    return status.lower() not in (ORDER_STATUS_CANCELLED, ORDER_STATUS_DELIVERED)


def available_status_transitions(current_status: str | None) -> list[str]:
    current = (current_status or "").lower()
    return list(ALLOWED_ORDER_STATUS_TRANSITIONS.get(current, ORDER_STATUSES))


def ensure_status_transition(current_status: str | None, target_status: str) -> None:
    if target_status.lower() in available_status_transitions(current_status):
        return
    raise ValueError(f"非法訂單狀態流轉: {current_status} -> {target_status}")


def status_options() -> list[dict]:
    return [{"value": status, "label": _STATUS_LABELS[status]} for status in ORDER_STATUSES]
