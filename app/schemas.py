from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Generic, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, StringConstraints
from pydantic.alias_generators import to_camel

from app.models import OrderType, PrincipalRole

DataT = TypeVar('DataT')

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used='json')]
NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(ApiModel, Generic[DataT]):
    success: bool
    message: str | None = None
    data: DataT | None = None


def ok(data=None, message: str | None = None) -> ApiResponse:
    return ApiResponse(success=True, message=message, data=data)


def fail(message: str) -> ApiResponse:
    return ApiResponse(success=False, message=message, data=None)


# Orders


class OrderItemRequest(ApiModel):
    product_id: int
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0, decimal_places=2)


class SalesOrderRequest(ApiModel):
    type: Literal['Sales']
    customer_name: NonBlank
    items: list[OrderItemRequest] = Field(default_factory=list)

    @property
    def order_type(self) -> OrderType:
        return OrderType.SALES


class PurchaseOrderRequest(ApiModel):
    type: Literal['Purchase']
    supplier_id: int
    items: list[OrderItemRequest] = Field(default_factory=list)

    @property
    def order_type(self) -> OrderType:
        return OrderType.PURCHASE


OrderCreateRequest = Annotated[Union[SalesOrderRequest, PurchaseOrderRequest], Field(discriminator='type')]


class OrderItemResponse(ApiModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: Money
    line_total: Money


class OrderResponse(ApiModel):
    id: int
    order_number: str
    order_date: datetime
    type: OrderType
    supplier_id: int | None = None
    supplier_name: str | None = None
    customer_name: str | None = None
    total_amount: Money
    items: list[OrderItemResponse]


# Catalog


class CategoryPayload(ApiModel):
    name: str = ''
    description: str | None = None


class CategoryResponse(ApiModel):
    id: int
    name: str
    description: str | None = None


class SupplierPayload(ApiModel):
    name: str = ''
    contact_email: str = ''
    phone: str | None = None
    address: str | None = None


class SupplierResponse(ApiModel):
    id: int
    name: str
    contact_email: str
    phone: str | None = None
    address: str | None = None


class ProductPayload(ApiModel):
    name: str = ''
    sku: str = ''
    category_id: int
    supplier_id: int | None = None
    quantity: int = 0
    reorder_level: int = 0
    unit_price: Decimal = Decimal('0')


class ProductResponse(ApiModel):
    id: int
    name: str
    sku: str
    category_id: int
    category_name: str
    supplier_id: int | None = None
    supplier_name: str | None = None
    quantity: int
    reorder_level: int
    unit_price: Money
    created_at: datetime | None = None


# Auth


class RegisterRequest(ApiModel):
    username: str = Field(min_length=3, max_length=50, pattern=r'^[a-zA-Z0-9_-]+$')
    email: str = Field(max_length=255)
    password: str = Field(min_length=6, max_length=255)
    role: PrincipalRole | None = None


class LoginRequest(ApiModel):
    username_or_email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6, max_length=255)


class AuthResponse(ApiModel):
    token: str
    username: str
    email: str
    role: PrincipalRole
    expires_at: datetime


class PrincipalResponse(ApiModel):
    id: int
    username: str
    role: PrincipalRole


# Dashboard


class LowStockProductResponse(ApiModel):
    id: int | None = None
    name: str
    sku: str
    quantity: int
    reorder_level: int
    unit_price: Money


class MonthBucketResponse(ApiModel):
    month_start: date
    month: str
    sales: Money
    purchases: Money


class SupplierVolumeResponse(ApiModel):
    name: str
    orders: int
    volume: Money


class RegionCountResponse(ApiModel):
    name: str
    count: int


class ProductMetricsResponse(ApiModel):
    total_skus: int
    inventory_value: Money
    low_stock_count: int
    out_of_stock_count: int
    category_count: int


class DashboardResponse(ApiModel):
    total_products: int
    total_orders: int
    total_suppliers: int
    low_stock_products: list[LowStockProductResponse]
    low_stock_count: int
    out_of_stock_count: int
    inventory_value: Money
    low_stock_value: Money
    sales_value: Money
    purchase_value: Money
    avg_order_value: Money
    monthly_trend: list[MonthBucketResponse]
    supplier_rollup: list[SupplierVolumeResponse]
