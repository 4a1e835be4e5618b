"""
Sales Reporting

Aggregations behind the admin dashboard and the sales report, computed with
pandas over plain rows pulled from the database:

    - daily sales for the last 30 days ("YYYY-MM-DD")
    - monthly sales for the last 12 months ("YYYY-MM")
    - top 10 products by quantity sold

Cancelled orders never count towards revenue, order counts or quantities.
Days and months are calendar periods in UTC.

The same report can be exported as an .xlsx workbook (openpyxl engine) with
one sheet per table.
"""

import logging
from datetime import datetime, timedelta
from io import BytesIO
from typing import Any, Callable

import pandas as pd
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_api.models import Order, OrderItem, OrderStatus, Product, utcnow

logger = logging.getLogger(__name__)

DAILY_WINDOW_DAYS = 30
MONTHLY_WINDOW_MONTHS = 12
TOP_ITEMS_LIMIT = 10

DAILY_COLUMNS = ["date", "total_orders", "total_revenue"]
MONTHLY_COLUMNS = ["month", "total_orders", "total_revenue"]
TOP_ITEM_COLUMNS = ["product_id", "product_name", "category", "quantity_sold"]

SHEET_DAILY = "Daily Sales"
SHEET_MONTHLY = "Monthly Sales"
SHEET_TOP_ITEMS = "Top Items"


def _month_cutoff(now: datetime, months: int) -> str:
    """First month ("YYYY-MM") of a window of ``months`` ending with ``now``."""
    year, month = now.year, now.month - (months - 1)
    while month <= 0:
        month += 12
        year -= 1
    return f"{year:04d}-{month:02d}"


def _aggregate_by(df: pd.DataFrame, key: str) -> list[dict[str, Any]]:
    if df.empty:
        return []
    grouped = (
        df.groupby(key)
        .agg(total_orders=("id", "count"), total_revenue=("total_price", "sum"))
        .reset_index()
        .sort_values(key, ascending=False)
    )
    return [
        {
            key: row[key],
            "total_orders": int(row["total_orders"]),
            "total_revenue": round(float(row["total_revenue"]), 2),
        }
        for row in grouped.to_dict("records")
    ]


class ReportService:
    """
    Read-only aggregations for admins.

    Attributes:
        now: Clock returning an aware UTC datetime
    """

    def __init__(self, session: AsyncSession, now: Callable[[], datetime] = utcnow):
        self.session = session
        self.now = now

    # ==========================================================================
    # DATA LOADING
    # ==========================================================================

    async def _orders_frame(self) -> pd.DataFrame:
        result = await self.session.execute(
            select(Order.id, Order.created_at, Order.total_price)
            .where(Order.status != OrderStatus.CANCELLED)
        )
        df = pd.DataFrame(
            [tuple(row) for row in result.all()],
            columns=["id", "created_at", "total_price"],
        )
        if not df.empty:
            # SQLite hands back naive datetimes; they were written as UTC
            df["created_at"] = pd.to_datetime(df["created_at"], utc=True)
        return df

    async def _items_frame(self) -> pd.DataFrame:
        result = await self.session.execute(
            select(
                OrderItem.product_id,
                Product.name,
                Product.category,
                OrderItem.quantity,
            )
            .join(Order, OrderItem.order_id == Order.id)
            .join(Product, OrderItem.product_id == Product.id)
            .where(Order.status != OrderStatus.CANCELLED)
        )
        return pd.DataFrame(
            [
                (product_id, name, category.value, quantity)
                for product_id, name, category, quantity in result.all()
            ],
            columns=["product_id", "product_name", "category", "quantity"],
        )

    # ==========================================================================
    # AGGREGATIONS
    # ==========================================================================

    def daily_sales(self, orders: pd.DataFrame) -> list[dict[str, Any]]:
        """Order count and revenue per day, newest day first."""
        if orders.empty:
            return []
        cutoff = (self.now().date() - timedelta(days=DAILY_WINDOW_DAYS - 1)).isoformat()
        df = orders.assign(date=orders["created_at"].dt.strftime("%Y-%m-%d"))
        return _aggregate_by(df[df["date"] >= cutoff], "date")

    def monthly_sales(self, orders: pd.DataFrame) -> list[dict[str, Any]]:
        """Order count and revenue per calendar month, newest month first."""
        if orders.empty:
            return []
        cutoff = _month_cutoff(self.now(), MONTHLY_WINDOW_MONTHS)
        df = orders.assign(month=orders["created_at"].dt.strftime("%Y-%m"))
        return _aggregate_by(df[df["month"] >= cutoff], "month")

    @staticmethod
    def top_items(items: pd.DataFrame, limit: int = TOP_ITEMS_LIMIT) -> list[dict[str, Any]]:
        """Best sellers by quantity; ties broken by lowest product id."""
        if items.empty:
            return []
        grouped = (
            items.groupby(["product_id", "product_name", "category"])
            .agg(quantity_sold=("quantity", "sum"))
            .reset_index()
            .sort_values(["quantity_sold", "product_id"], ascending=[False, True])
            .head(limit)
        )
        return [
            {
                "product_id": int(row["product_id"]),
                "product_name": row["product_name"],
                "category": row["category"],
                "quantity_sold": int(row["quantity_sold"]),
            }
            for row in grouped.to_dict("records")
        ]

    # ==========================================================================
    # REPORTS
    # ==========================================================================

    async def dashboard(self) -> dict[str, Any]:
        """Totals, inventory with low stock items, and the daily series."""
        orders = await self._orders_frame()

        result = await self.session.execute(select(Product).order_by(Product.id))
        inventory = list(result.scalars().all())

        return {
            "total_orders": int(len(orders)),
            "total_revenue": round(float(orders["total_price"].sum()), 2) if not orders.empty else 0.0,
            "low_stock_items": [p for p in inventory if p.is_low_stock],
            "inventory": inventory,
            "daily_stats": self.daily_sales(orders),
        }

    async def sales_report(self) -> dict[str, Any]:
        orders = await self._orders_frame()
        items = await self._items_frame()

        report = {
            "daily_sales": self.daily_sales(orders),
            "monthly_sales": self.monthly_sales(orders),
            "top_items": self.top_items(items),
        }
        logger.debug(
            f"Sales report: {len(report['daily_sales'])} days, "
            f"{len(report['monthly_sales'])} months, {len(report['top_items'])} top items"
        )
        return report


def sales_report_workbook(report: dict[str, Any]) -> bytes:
    """Render a sales report as an .xlsx file, one sheet per table."""
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame(report["daily_sales"], columns=DAILY_COLUMNS).to_excel(
            writer, sheet_name=SHEET_DAILY, index=False
        )
        pd.DataFrame(report["monthly_sales"], columns=MONTHLY_COLUMNS).to_excel(
            writer, sheet_name=SHEET_MONTHLY, index=False
        )
        pd.DataFrame(report["top_items"], columns=TOP_ITEM_COLUMNS).to_excel(
            writer, sheet_name=SHEET_TOP_ITEMS, index=False
        )
    return buffer.getvalue()
