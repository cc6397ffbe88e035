from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]
PaymentMethod = Literal["credit_card", "paypal", "stripe"]
PaymentStatus = Literal["pending", "completed", "failed", "refunded"]


@dataclass(slots=True, frozen=True)
class Address:
    full_name: str
    street: str
    city: str
    postal_code: str
    apartment: str | None = None
    state: str | None = None
    country: str = "United States"
    phone: str | None = None


@dataclass(slots=True)
class OrderItemInfo:
    product_id: int
    product_name: str
    product_image: str
    size: str
    quantity: int
    price: float


@dataclass(slots=True)
class OrderInfo:
    user_id: str
    items: List[OrderItemInfo]
    shipping_address: Address
    billing_address: Address
    payment_method: PaymentMethod
    subtotal: float
    tax: float
    shipping_cost: float
    total: float
    status: OrderStatus = "pending"
    payment_status: PaymentStatus = "pending"
    transaction_id: str | None = None
    notes: str | None = None


@dataclass(slots=True)
class OrderEntity:
    id: int
    info: OrderInfo
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(slots=True)
class OrderLineRequest:
    product_id: int
    size: str
    quantity: int


@dataclass(slots=True)
class PlaceOrderResult:
    """Outcome of placing an order.

    ``order`` is set when the order was accepted; otherwise ``unknown`` and
    ``out_of_stock`` list the lines that blocked it.
    """

    order: OrderEntity | None = None
    unknown: List[OrderLineRequest] = field(default_factory=list)
    out_of_stock: List[OrderLineRequest] = field(default_factory=list)
