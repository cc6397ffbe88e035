from __future__ import annotations

from dataclasses import dataclass

from storefront.store.product_models import ProductEntity

# The product page caps one add-step at 10 units; the ledger itself does not.
MAX_QUANTITY_PER_ADD = 10


@dataclass(slots=True)
class CartLineItem:
    product_id: int
    name: str
    brand: str
    unit_price: float
    image: str
    size: str
    quantity: int = 1

    def __post_init__(self) -> None:
        if not self.size:
            raise ValueError("size must be a non-empty string")
        if self.unit_price < 0:
            raise ValueError("unit_price must be >= 0")
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")

    @property
    def key(self) -> tuple[int, str]:
        return (self.product_id, self.size)

    @staticmethod
    def from_product(product: ProductEntity, size: str, quantity: int = 1) -> CartLineItem:
        """Snapshot ``product`` into a line; later catalog edits do not reach it."""
        if size not in {s.size for s in product.info.sizes}:
            raise ValueError(f"product {product.id} has no size {size!r}")
        return CartLineItem(
            product_id=product.id,
            name=product.info.name,
            brand=product.info.brand,
            unit_price=product.info.effective_price,
            image=product.info.images[0] if product.info.images else "",
            size=size,
            quantity=quantity,
        )
