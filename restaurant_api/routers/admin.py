"""
Admin Routes

Dashboard and sales reports. Every route runs Authenticate, then
Authorize(role=admin).
"""

from fastapi import APIRouter, Depends, Response
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_api.database import get_db
from restaurant_api.models import utcnow
from restaurant_api.schemas import (
    DailyStat,
    DashboardStats,
    ErrorResponse,
    ProductResponse,
    SalesReport,
)
from restaurant_api.services.auth import SessionClaims, require_admin
from restaurant_api.services.reports import ReportService, sales_report_workbook

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

router = APIRouter(
    prefix="/api",
    tags=["Admin"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


@router.get("/dashboard", response_model=DashboardStats)
async def dashboard(
    claims: SessionClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> DashboardStats:
    """Order totals, inventory with low stock items, and daily stats."""
    stats = await ReportService(db).dashboard()
    return DashboardStats(
        total_orders=stats["total_orders"],
        total_revenue=stats["total_revenue"],
        low_stock_items=[ProductResponse.model_validate(p) for p in stats["low_stock_items"]],
        inventory=[ProductResponse.model_validate(p) for p in stats["inventory"]],
        daily_stats=[DailyStat(**s) for s in stats["daily_stats"]],
    )


@router.get("/reports/sales", response_model=SalesReport)
async def sales_report(
    claims: SessionClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> SalesReport:
    """Daily (30 days) and monthly (12 months) sales plus the top 10 items."""
    return SalesReport.model_validate(await ReportService(db).sales_report())


@router.get(
    "/reports/sales.xlsx",
    response_class=Response,
    responses={200: {"content": {XLSX_MEDIA_TYPE: {}}}},
)
async def sales_report_export(
    claims: SessionClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """The sales report as an Excel workbook."""
    report = await ReportService(db).sales_report()
    content = await run_in_threadpool(sales_report_workbook, report)
    filename = f"sales_report_{utcnow():%Y%m%d}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
