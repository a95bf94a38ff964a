from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum

from sqlalchemy.orm import Session

from app.models import Category, Order, OrderType, Product, Supplier
from app.store import EntityStore

UNASSIGNED = 'Unassigned'
ZERO = Decimal('0')


class StockStatus(str, Enum):
    OUT = 'Out'
    LOW = 'Low'
    HEALTHY = 'Healthy'


@dataclass(frozen=True)
class ProductSnapshot:
    name: str
    sku: str
    quantity: int
    reorder_level: int
    unit_price: Decimal
    id: int | None = None
    category_name: str | None = None


@dataclass(frozen=True)
class OrderSnapshot:
    type: OrderType | str
    total_amount: Decimal
    order_date: datetime | date | str | None
    supplier_name: str | None = None


@dataclass(frozen=True)
class SupplierSnapshot:
    name: str
    address: str | None = None


@dataclass(frozen=True)
class OrderRollup:
    sales_value: Decimal
    purchase_value: Decimal
    avg_order_value: Decimal


@dataclass(frozen=True)
class MonthBucket:
    month_start: date
    month: str
    sales: Decimal
    purchases: Decimal


@dataclass(frozen=True)
class SupplierVolume:
    name: str
    orders: int
    volume: Decimal


@dataclass(frozen=True)
class RegionCount:
    name: str
    count: int


@dataclass(frozen=True)
class ProductMetrics:
    total_skus: int
    inventory_value: Decimal
    low_stock_count: int
    out_of_stock_count: int
    category_count: int


@dataclass(frozen=True)
class DashboardSummary:
    total_products: int
    total_orders: int
    total_suppliers: int
    low_stock_products: list[ProductSnapshot]
    low_stock_count: int
    out_of_stock_count: int
    inventory_value: Decimal
    low_stock_value: Decimal
    sales_value: Decimal
    purchase_value: Decimal
    avg_order_value: Decimal
    monthly_trend: list[MonthBucket]
    supplier_rollup: list[SupplierVolume]


@dataclass(frozen=True)
class Snapshot:
    products: list[ProductSnapshot]
    orders: list[OrderSnapshot]
    suppliers: list[SupplierSnapshot]


def _decimal_or_zero(raw_value: object) -> Decimal:
    try:
        return Decimal(str(raw_value)) if raw_value is not None else ZERO
    except (InvalidOperation, TypeError, ValueError):
        return ZERO


def _order_type(order: OrderSnapshot) -> OrderType | None:
    try:
        return OrderType(order.type)
    except ValueError:
        return None


def _parse_order_date(raw: datetime | date | str | None) -> date | None:
    if raw is None or raw == '':
        return None
    if isinstance(raw, datetime):
        return raw.astimezone(timezone.utc).date() if raw.tzinfo else raw.date()
    if isinstance(raw, date):
        return raw
    try:
        parsed = datetime.fromisoformat(str(raw).strip().replace('Z', '+00:00'))
    except ValueError:
        return None
    return parsed.astimezone(timezone.utc).date() if parsed.tzinfo else parsed.date()


def _shift_month(month_start: date, months: int) -> date:
    index = month_start.year * 12 + (month_start.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def classify_stock(quantity: int, reorder_level: int) -> StockStatus:
    # Oversold (negative) stock is neither out nor low.
    if quantity == 0:
        return StockStatus.OUT
    if 0 < quantity <= reorder_level:
        return StockStatus.LOW
    return StockStatus.HEALTHY


def low_stock_products(products: Iterable[ProductSnapshot]) -> list[ProductSnapshot]:
    return [p for p in products if classify_stock(p.quantity, p.reorder_level) == StockStatus.LOW]


def out_of_stock_products(products: Iterable[ProductSnapshot]) -> list[ProductSnapshot]:
    return [p for p in products if classify_stock(p.quantity, p.reorder_level) == StockStatus.OUT]


def inventory_value(products: Iterable[ProductSnapshot]) -> Decimal:
    return sum((Decimal(p.quantity) * _decimal_or_zero(p.unit_price) for p in products), ZERO)


def low_stock_value(products: Iterable[ProductSnapshot]) -> Decimal:
    return inventory_value(low_stock_products(products))


def order_rollup(orders: Iterable[OrderSnapshot]) -> OrderRollup:
    orders = list(orders)
    sales = sum((_decimal_or_zero(o.total_amount) for o in orders if _order_type(o) == OrderType.SALES), ZERO)
    purchases = sum((_decimal_or_zero(o.total_amount) for o in orders if _order_type(o) == OrderType.PURCHASE), ZERO)
    average = (sales + purchases) / Decimal(len(orders)) if orders else ZERO
    return OrderRollup(sales_value=sales, purchase_value=purchases, avg_order_value=average)


def monthly_trend(orders: Iterable[OrderSnapshot], today: date, months: int = 6) -> list[MonthBucket]:
    """Sales and purchase totals for the current month and the ``months - 1`` before it.

    Buckets are calendar months, oldest first. Orders dated outside the window or
    with a missing or unparsable date are left out.
    """
    current = date(today.year, today.month, 1)
    starts = [_shift_month(current, -offset) for offset in range(months - 1, -1, -1)]
    totals = {(start.year, start.month): {OrderType.SALES: ZERO, OrderType.PURCHASE: ZERO} for start in starts}

    for order in orders:
        order_day = _parse_order_date(order.order_date)
        if order_day is None:
            continue
        bucket = totals.get((order_day.year, order_day.month))
        order_type = _order_type(order)
        if bucket is None or order_type is None:
            continue
        bucket[order_type] += _decimal_or_zero(order.total_amount)

    return [
        MonthBucket(
            month_start=start,
            month=start.strftime('%b'),
            sales=totals[(start.year, start.month)][OrderType.SALES],
            purchases=totals[(start.year, start.month)][OrderType.PURCHASE],
        )
        for start in starts
    ]


def supplier_rollup(orders: Iterable[OrderSnapshot], limit: int = 4) -> list[SupplierVolume]:
    grouped: dict[str, tuple[int, Decimal]] = {}
    for order in orders:
        if _order_type(order) != OrderType.PURCHASE:
            continue
        key = order.supplier_name or UNASSIGNED
        count, volume = grouped.get(key, (0, ZERO))
        grouped[key] = (count + 1, volume + _decimal_or_zero(order.total_amount))

    rows = [SupplierVolume(name=name, orders=count, volume=volume) for name, (count, volume) in grouped.items()]
    rows.sort(key=lambda row: row.volume, reverse=True)
    return rows[:limit]


def supplier_region(address: str | None) -> str:
    if not address or not address.strip():
        return UNASSIGNED
    return address.split(',')[-1].strip() or UNASSIGNED


def supplier_region_breakdown(suppliers: Iterable[SupplierSnapshot], limit: int = 5) -> list[RegionCount]:
    counts: dict[str, int] = {}
    for supplier in suppliers:
        region = supplier_region(supplier.address)
        counts[region] = counts.get(region, 0) + 1
    rows = [RegionCount(name=name, count=count) for name, count in counts.items()]
    rows.sort(key=lambda row: row.count, reverse=True)
    return rows[:limit]


def product_metrics(products: Iterable[ProductSnapshot]) -> ProductMetrics:
    products = list(products)
    return ProductMetrics(
        total_skus=len(products),
        inventory_value=inventory_value(products),
        low_stock_count=len(low_stock_products(products)),
        out_of_stock_count=len(out_of_stock_products(products)),
        category_count=len({p.category_name for p in products}),
    )


def build_dashboard(
    products: list[ProductSnapshot],
    orders: list[OrderSnapshot],
    suppliers: list[SupplierSnapshot],
    today: date,
    *,
    trend_months: int = 6,
    supplier_limit: int = 4,
    low_stock_preview: int = 5,
) -> DashboardSummary:
    low_stock = low_stock_products(products)
    rollup = order_rollup(orders)
    return DashboardSummary(
        total_products=len(products),
        total_orders=len(orders),
        total_suppliers=len(suppliers),
        low_stock_products=low_stock[:low_stock_preview],
        low_stock_count=len(low_stock),
        out_of_stock_count=len(out_of_stock_products(products)),
        inventory_value=inventory_value(products),
        low_stock_value=inventory_value(low_stock),
        sales_value=rollup.sales_value,
        purchase_value=rollup.purchase_value,
        avg_order_value=rollup.avg_order_value,
        monthly_trend=monthly_trend(orders, today, months=trend_months),
        supplier_rollup=supplier_rollup(orders, limit=supplier_limit),
    )


def load_snapshot(db: Session) -> Snapshot:
    store = EntityStore(db)
    supplier_rows = store.find(Supplier, order_by=Supplier.name.asc())
    supplier_names = {supplier.id: supplier.name for supplier in supplier_rows}

    category_names = {category.id: category.name for category in store.find(Category)}
    products = [
        ProductSnapshot(
            id=product.id,
            name=product.name,
            sku=product.sku,
            quantity=product.quantity,
            reorder_level=product.reorder_level,
            unit_price=product.unit_price,
            category_name=category_names.get(product.category_id, 'Unknown'),
        )
        for product in store.find(Product, order_by=Product.name.asc())
    ]
    orders = [
        OrderSnapshot(
            type=order.type,
            total_amount=order.total_amount,
            order_date=order.order_date,
            supplier_name=supplier_names.get(order.supplier_id) if order.supplier_id is not None else None,
        )
        for order in store.find(Order, order_by=Order.order_date.desc())
    ]
    suppliers = [SupplierSnapshot(name=supplier.name, address=supplier.address) for supplier in supplier_rows]
    return Snapshot(products=products, orders=orders, suppliers=suppliers)
