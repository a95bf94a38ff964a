from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from app.errors import NotFoundError, StoreError, ValidationError
from app.models import Order, OrderItem, OrderType, Product, Supplier
from app.schemas import OrderItemResponse, OrderResponse, PurchaseOrderRequest, SalesOrderRequest
from app.services.audit_service import ORDER_CREATED, ORDER_DELETED, log_order_event
from app.services.inventory_service import apply_stock_deltas, order_deltas
from app.store import EntityStore

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = {OrderType.PURCHASE: 'PO', OrderType.SALES: 'SO'}
ORDER_NUMBER_FORMAT = '%Y%m%d%H%M%S'


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def generate_order_number(order_type: OrderType, now: datetime | None = None) -> str:
    """``PO-``/``SO-`` followed by the UTC timestamp to the second.

    Two orders of the same type created within one second share a number.
    """
    moment = (now or _now()).astimezone(timezone.utc)
    return f'{ORDER_NUMBER_PREFIX[order_type]}-{moment.strftime(ORDER_NUMBER_FORMAT)}'


def _line_total(quantity: int, unit_price: Decimal) -> Decimal:
    return Decimal(quantity) * Decimal(unit_price)


def _hydrate(store: EntityStore, order: Order, supplier_name: str | None) -> OrderResponse:
    product_ids = {item.product_id for item in order.items}
    names = {
        product.id: product.name
        for product in (store.find(Product, Product.id.in_(list(product_ids))) if product_ids else [])
    }
    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        order_date=order.order_date,
        type=order.type,
        supplier_id=order.supplier_id,
        supplier_name=supplier_name,
        customer_name=order.customer_name,
        total_amount=order.total_amount,
        items=[
            OrderItemResponse(
                id=item.id,
                product_id=item.product_id,
                product_name=names.get(item.product_id, ''),
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=_line_total(item.quantity, item.unit_price),
            )
            for item in order.items
        ],
    )


def _supplier_names(store: EntityStore, orders: list[Order]) -> dict[int, str]:
    supplier_ids = {order.supplier_id for order in orders if order.supplier_id is not None}
    if not supplier_ids:
        return {}
    return {supplier.id: supplier.name for supplier in store.find(Supplier, Supplier.id.in_(list(supplier_ids)))}


def _hydrate_one(store: EntityStore, order: Order) -> OrderResponse:
    return _hydrate(store, order, _supplier_names(store, [order]).get(order.supplier_id))


def list_orders(db: Session) -> list[OrderResponse]:
    store = EntityStore(db)
    orders = store.find(Order, order_by=Order.order_date.desc())
    suppliers = _supplier_names(store, orders)
    return [_hydrate(store, order, suppliers.get(order.supplier_id)) for order in orders]


def get_order(db: Session, order_id: int) -> OrderResponse:
    store = EntityStore(db)
    order = store.find_one(Order, Order.id == order_id)
    if order is None:
        raise NotFoundError('Order not found')
    return _hydrate_one(store, order)


def _validate_request(store: EntityStore, request: SalesOrderRequest | PurchaseOrderRequest) -> dict[int, Product]:
    if not request.items:
        raise ValidationError('Order requires at least one item')

    product_ids = {item.product_id for item in request.items}
    products = {product.id: product for product in store.find(Product, Product.id.in_(list(product_ids)))}
    if len(products) != len(product_ids):
        raise ValidationError('One or more products not found')

    if isinstance(request, PurchaseOrderRequest):
        if not store.exists(Supplier, Supplier.id == request.supplier_id):
            raise ValidationError('Supplier not found')
    else:
        # First shortfall in request order wins; lines are checked independently.
        for item in request.items:
            product = products[item.product_id]
            if product.quantity < item.quantity:
                raise ValidationError(f'Insufficient stock for {product.name}')
    return products


def create_order(
    db: Session,
    request: SalesOrderRequest | PurchaseOrderRequest,
    *,
    actor_principal_id: int | None = None,
) -> OrderResponse:
    """Validate, adjust stock and persist a sales or purchase order.

    Validation happens before any write, so a rejected request leaves every
    product untouched. The stock check and the increments are not guarded by a
    row lock; concurrent sales of the same product can both pass the check.
    """
    store = EntityStore(db)
    try:
        _validate_request(store, request)

        order_type = request.order_type
        now = _now()
        order = Order(
            order_number=generate_order_number(order_type, now),
            order_date=now,
            type=order_type,
            supplier_id=getattr(request, 'supplier_id', None),
            customer_name=getattr(request, 'customer_name', None),
            created_by_principal_id=actor_principal_id,
            items=[
                OrderItem(product_id=item.product_id, quantity=item.quantity, unit_price=item.unit_price)
                for item in request.items
            ],
        )
        order.total_amount = sum(
            (_line_total(item.quantity, item.unit_price) for item in order.items),
            Decimal('0'),
        )

        apply_stock_deltas(store, order_deltas(order_type, order.items))
        store.insert_one(order)
        log_order_event(db, action=ORDER_CREATED, order=order, actor_principal_id=actor_principal_id)
        store.commit()
    except (ValidationError, StoreError):
        store.rollback()
        raise

    logger.info(
        'Order %s created: type=%s lines=%d total=%s',
        order.order_number,
        order.type.value,
        len(order.items),
        order.total_amount,
    )
    return _hydrate_one(store, order)


def delete_order(db: Session, order_id: int, *, actor_principal_id: int | None = None) -> None:
    """Remove an order and reverse the stock movement it caused.

    Lines whose product has since been deleted are skipped without error.
    """
    store = EntityStore(db)
    try:
        order = store.find_one(Order, Order.id == order_id)
        if order is None:
            raise NotFoundError('Order not found')

        present = {
            product.id
            for product in store.find(Product, Product.id.in_([item.product_id for item in order.items]))
        }
        reversible = [item for item in order.items if item.product_id in present]
        if len(reversible) != len(order.items):
            logger.warning(
                'Order %s references %d deleted product(s); their stock reversal is skipped',
                order.order_number,
                len(order.items) - len(reversible),
            )
        apply_stock_deltas(store, order_deltas(order.type, reversible, reverse=True))

        log_order_event(db, action=ORDER_DELETED, order=order, actor_principal_id=actor_principal_id)
        store.delete_one(Order, Order.id == order_id)
        store.commit()
    except (NotFoundError, StoreError):
        store.rollback()
        raise

    logger.info('Order %s deleted and stock reversed', order.order_number)
