from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth import Principal, any_user
from app.config import settings
from app.db import get_db
from app.errors import StoreError
from app.responses import error_response
from app.schemas import ApiResponse, DashboardResponse, ProductMetricsResponse, RegionCountResponse, ok
from app.services.report_service import build_dashboard, load_snapshot, product_metrics, supplier_region_breakdown

router = APIRouter(prefix='/api/dashboard', tags=['dashboard'])


@router.get('', response_model=ApiResponse[DashboardResponse])
def dashboard(_: Principal = Depends(any_user), db: Session = Depends(get_db)):
    try:
        snapshot = load_snapshot(db)
    except StoreError as exc:
        return error_response(exc, store_message='Failed to load dashboard data')
    summary = build_dashboard(
        snapshot.products,
        snapshot.orders,
        snapshot.suppliers,
        datetime.now(tz=timezone.utc).date(),
        trend_months=settings.trend_months,
        supplier_limit=settings.dashboard_supplier_limit,
        low_stock_preview=settings.low_stock_preview_limit,
    )
    return ok(DashboardResponse.model_validate(summary))


@router.get('/products', response_model=ApiResponse[ProductMetricsResponse])
def product_stats(_: Principal = Depends(any_user), db: Session = Depends(get_db)):
    try:
        snapshot = load_snapshot(db)
    except StoreError as exc:
        return error_response(exc, store_message='Failed to load product metrics')
    return ok(ProductMetricsResponse.model_validate(product_metrics(snapshot.products)))


@router.get('/suppliers/regions', response_model=ApiResponse[list[RegionCountResponse]])
def supplier_regions(_: Principal = Depends(any_user), db: Session = Depends(get_db)):
    try:
        snapshot = load_snapshot(db)
    except StoreError as exc:
        return error_response(exc, store_message='Failed to load supplier regions')
    rows = supplier_region_breakdown(snapshot.suppliers, limit=settings.supplier_region_limit)
    return ok([RegionCountResponse.model_validate(row) for row in rows])
