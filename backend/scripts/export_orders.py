#!/usr/bin/env python3
"""Write the ERP order spreadsheet without going through the admin UI.

Usage:
  cd backend
  BAKERY_ACCESS_TOKEN=... python scripts/export_orders.py --start-date 2024-01-01 --end-date 2024-01-31
  BAKERY_ACCESS_TOKEN=... python scripts/export_orders.py --all --format csv
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

import httpx

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from bakery_admin.core.bakery_api import BakeryAPIClient
from bakery_admin.core.errors import BakeryAPIError
from bakery_admin.core.settings import get_settings
from bakery_admin.domain.order_export_service import OrderExportService
from bakery_admin.domain.order_service import OrderFilters


def build_filters(args: argparse.Namespace) -> OrderFilters:
    if args.start_date or args.end_date:
        return OrderFilters(
            status_filter=args.status or "",
            date_filter="custom",
            start_date=args.start_date or "",
            end_date=args.end_date or "",
        )
    return OrderFilters(status_filter=args.status or "")


async def run(args: argparse.Namespace, token: str) -> int:
    settings = get_settings()
    api = settings.api
    client = BakeryAPIClient(
        api.normalized_base_url,
        access_token=token,
        cookie_name=api.access_token_cookie,
        timeout=httpx.Timeout(api.timeout, connect=api.connect_timeout),
    )
    service = OrderExportService(
        limit=args.limit or settings.export_order_limit,
        tz_name=settings.export_timezone,
    )
    filename, content, order_count = await service.export_orders(
        client,
        build_filters(args),
        export_all=args.all,
        file_format=args.format,
    )

    output = Path(args.output) if args.output else Path.cwd() / filename
    output.write_bytes(content)
    print(f"exported_orders={order_count}")
    print(f"output={output}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Export bakery orders to the ERP spreadsheet")
    parser.add_argument("--start-date", default=None, help="YYYY-MM-DD")
    parser.add_argument("--end-date", default=None, help="YYYY-MM-DD")
    parser.add_argument("--status", default=None, help="Only export orders with this status")
    parser.add_argument("--all", action="store_true", help="Ignore filters and export all orders")
    parser.add_argument("--format", choices=("xlsx", "csv"), default="xlsx")
    parser.add_argument("--limit", type=int, default=None, help="Override EXPORT_ORDER_LIMIT")
    parser.add_argument("--output", default=None, help="Output file path")
    parser.add_argument(
        "--token",
        default=None,
        help="Access token (defaults to BAKERY_ACCESS_TOKEN)",
    )
    args = parser.parse_args()

    token = args.token or os.getenv("BAKERY_ACCESS_TOKEN", "")
    if not token:
        print("missing access token: pass --token or set BAKERY_ACCESS_TOKEN", file=sys.stderr)
        return 2

    try:
        return asyncio.run(run(args, token))
    except BakeryAPIError as exc:
        print(f"export_failed={exc.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
