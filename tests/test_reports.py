from datetime import datetime, timezone
from io import BytesIO

import pytest
import pytest_asyncio
from openpyxl import load_workbook

from restaurant_api.models import Order, OrderItem, OrderStatus
from restaurant_api.services.reports import ReportService, sales_report_workbook
from tests.helpers import bearer

pytestmark = pytest.mark.asyncio

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def at(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest_asyncio.fixture()
async def order_history(session_maker, products, customer):
    """
    Six orders spread over a year; one cancelled.

    Quantities sold (not cancelled): Falafel 6, Cheeseburger 4, Shawarma 3.
    """
    shawarma, falafel, burger = products

    def order(created_at, total, status, lines):
        return Order(
            user_id=customer.id,
            total_price=total,
            status=status,
            created_at=created_at,
            items=[
                OrderItem(product_id=p.id, quantity=q, portion_size="Medium", customizations=[])
                for p, q in lines
            ],
        )

    orders = [
        order(at(2024, 6, 15, 10), 20.0, OrderStatus.PENDING, [(shawarma, 2)]),
        order(at(2024, 6, 15, 11), 30.0, OrderStatus.COMPLETED, [(falafel, 1), (shawarma, 1)]),
        order(at(2024, 6, 10, 9), 15.0, OrderStatus.COMPLETED, [(falafel, 5)]),
        order(at(2024, 6, 14, 9), 100.0, OrderStatus.CANCELLED, [(burger, 50)]),
        order(at(2024, 3, 1, 18), 40.0, OrderStatus.COMPLETED, [(burger, 1)]),
        order(at(2023, 5, 20, 18), 99.0, OrderStatus.COMPLETED, [(burger, 3)]),
    ]
    async with session_maker() as session:
        async with session.begin():
            session.add_all(orders)
    return orders


class TestSalesReport:
    async def test_daily_sales_last_30_days(self, session_maker, order_history):
        async with session_maker() as session:
            report = await ReportService(session, now=lambda: NOW).sales_report()

        assert report["daily_sales"] == [
            {"date": "2024-06-15", "total_orders": 2, "total_revenue": 50.0},
            {"date": "2024-06-10", "total_orders": 1, "total_revenue": 15.0},
        ]

    async def test_monthly_sales_last_12_months(self, session_maker, order_history):
        async with session_maker() as session:
            report = await ReportService(session, now=lambda: NOW).sales_report()

        assert report["monthly_sales"] == [
            {"month": "2024-06", "total_orders": 3, "total_revenue": 65.0},
            {"month": "2024-03", "total_orders": 1, "total_revenue": 40.0},
        ]

    async def test_top_items_exclude_cancelled(self, session_maker, order_history, products):
        async with session_maker() as session:
            report = await ReportService(session, now=lambda: NOW).sales_report()

        assert [(i["product_name"], i["quantity_sold"]) for i in report["top_items"]] == [
            ("Falafel Wrap", 6),
            ("Cheeseburger", 4),
            ("Shawarma Plate", 3),
        ]
        assert report["top_items"][1]["category"] == "western"
        assert report["top_items"][0]["product_id"] == products[1].id

    async def test_empty_database(self, session_maker):
        async with session_maker() as session:
            report = await ReportService(session, now=lambda: NOW).sales_report()
        assert report == {"daily_sales": [], "monthly_sales": [], "top_items": []}


class TestDashboard:
    async def test_totals_and_low_stock(self, session_maker, order_history):
        async with session_maker() as session:
            stats = await ReportService(session, now=lambda: NOW).dashboard()

        assert stats["total_orders"] == 5
        assert stats["total_revenue"] == 204.0
        assert [p.name for p in stats["low_stock_items"]] == ["Falafel Wrap"]
        assert len(stats["inventory"]) == 3
        assert stats["daily_stats"][0]["date"] == "2024-06-15"


class TestWorkbook:
    def read(self, content: bytes):
        return load_workbook(BytesIO(content))

    async def test_sheets_and_rows(self):
        report = {
            "daily_sales": [{"date": "2024-06-15", "total_orders": 2, "total_revenue": 50.0}],
            "monthly_sales": [{"month": "2024-06", "total_orders": 2, "total_revenue": 50.0}],
            "top_items": [
                {"product_id": 2, "product_name": "Falafel Wrap", "category": "eastern", "quantity_sold": 6}
            ],
        }
        workbook = self.read(sales_report_workbook(report))

        assert workbook.sheetnames == ["Daily Sales", "Monthly Sales", "Top Items"]
        rows = list(workbook["Top Items"].iter_rows(values_only=True))
        assert rows == [
            ("product_id", "product_name", "category", "quantity_sold"),
            (2, "Falafel Wrap", "eastern", 6),
        ]

    async def test_empty_report_keeps_headers(self):
        workbook = self.read(
            sales_report_workbook({"daily_sales": [], "monthly_sales": [], "top_items": []})
        )
        rows = list(workbook["Daily Sales"].iter_rows(values_only=True))
        assert rows == [("date", "total_orders", "total_revenue")]


class TestReportEndpoints:
    async def test_sales_report_camel_case(self, client, admin_auth):
        response = await client.get("/api/reports/sales", headers=bearer(admin_auth["token"]))
        assert response.status_code == 200
        assert set(response.json()) == {"dailySales", "monthlySales", "topItems"}

    async def test_sales_report_requires_admin(self, client, customer_auth):
        response = await client.get("/api/reports/sales", headers=bearer(customer_auth["token"]))
        assert response.status_code == 403

    async def test_xlsx_export(self, client, admin_auth):
        response = await client.get("/api/reports/sales.xlsx", headers=bearer(admin_auth["token"]))

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert "attachment" in response.headers["content-disposition"]
        assert load_workbook(BytesIO(response.content)).sheetnames == [
            "Daily Sales",
            "Monthly Sales",
            "Top Items",
        ]

    async def test_dashboard_lists_low_stock(self, client, admin_auth, products):
        response = await client.get("/api/dashboard", headers=bearer(admin_auth["token"]))
        assert response.status_code == 200
        body = response.json()
        assert [p["name"] for p in body["lowStockItems"]] == ["Falafel Wrap"]
        assert len(body["inventory"]) == 3
