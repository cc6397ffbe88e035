"""Hand-off from the cart to whatever accepts orders."""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, replace
from typing import Iterable, Protocol

import structlog

from storefront.cart.cart_models import CartLineItem
from storefront.cart.ledger import Cart
from storefront.services.pricing import calculate_pricing, subtotal_of
from storefront.store.order_models import Address, PaymentMethod

logger = structlog.get_logger(__name__)


class OrderRejected(Exception):
    """The order was refused or could not be submitted; the cart is unchanged."""

    def __init__(self, reason: str, status_code: int | None = None):
        self.reason = reason
        self.status_code = status_code
        super().__init__(reason)


@dataclass(slots=True, frozen=True)
class OrderSnapshot:
    items: tuple[CartLineItem, ...]
    subtotal: float
    shipping_cost: float
    tax_amount: float
    total: float
    shipping_address: Address
    billing_address: Address
    payment_method: PaymentMethod


@dataclass(slots=True, frozen=True)
class OrderReceipt:
    order_id: int
    total: float
    status: str = "pending"


class OrderGateway(Protocol):
    async def place(self, snapshot: OrderSnapshot) -> OrderReceipt: ...


def build_order_snapshot(
    items: Iterable[CartLineItem],
    shipping_address: Address,
    payment_method: PaymentMethod,
    billing_address: Address | None = None,
) -> OrderSnapshot:
    lines = tuple(replace(item) for item in items)
    pricing = calculate_pricing(subtotal_of(lines))
    return OrderSnapshot(
        items=lines,
        subtotal=pricing.subtotal,
        shipping_cost=pricing.shipping_cost,
        tax_amount=pricing.tax_amount,
        total=pricing.total,
        shipping_address=shipping_address,
        billing_address=billing_address or shipping_address,
        payment_method=payment_method,
    )


async def submit_order(
    cart: Cart,
    shipping_address: Address,
    payment_method: PaymentMethod,
    gateway: OrderGateway,
    billing_address: Address | None = None,
) -> OrderReceipt:
    if len(cart) == 0:
        raise OrderRejected("Cart is empty")

    snapshot = build_order_snapshot(cart.items, shipping_address, payment_method, billing_address)
    try:
        receipt = await gateway.place(snapshot)
    except OrderRejected as exc:
        logger.warning("order rejected", reason=exc.reason, status_code=exc.status_code)
        raise

    cart.clear()
    logger.info("order accepted", order_id=receipt.order_id, total=receipt.total)
    return receipt


class MockOrderGateway:
    """Accepts every order, optionally after a delay, without persisting anything."""

    def __init__(self, delay: float = 0.0, start_id: int = 1) -> None:
        self.delay = delay
        self.placed: list[OrderSnapshot] = []
        self._ids = itertools.count(start_id)

    async def place(self, snapshot: OrderSnapshot) -> OrderReceipt:
        if self.delay:
            await asyncio.sleep(self.delay)
        self.placed.append(snapshot)
        return OrderReceipt(order_id=next(self._ids), total=snapshot.total)
