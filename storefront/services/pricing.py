"""Order-total rules shared by the client cart and the order endpoint."""

from dataclasses import dataclass
from typing import Iterable, Protocol

FREE_SHIPPING_THRESHOLD = 75.0
FLAT_SHIPPING_COST = 8.99
TAX_RATE = 0.07


class PricedLine(Protocol):
    unit_price: float
    quantity: int


@dataclass(slots=True, frozen=True)
class PricingResult:
    subtotal: float
    shipping_cost: float
    tax_amount: float
    total: float


def calculate_pricing(subtotal: float) -> PricingResult:
    # shipping is free only strictly above the threshold
    shipping_cost = 0.0 if subtotal > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_COST
    tax_amount = subtotal * TAX_RATE
    return PricingResult(
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        tax_amount=tax_amount,
        total=subtotal + shipping_cost + tax_amount,
    )


def subtotal_of(lines: Iterable[PricedLine]) -> float:
    return sum((line.unit_price * line.quantity for line in lines), 0.0)


def format_money(value: float) -> str:
    return f"{value:.2f}"
