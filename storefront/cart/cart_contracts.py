from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, PositiveInt, TypeAdapter

from storefront.cart.cart_models import CartLineItem


class StoredCartLineItem(BaseModel):
    """One element of the persisted cart array."""

    product_id: int
    name: str
    brand: str
    unit_price: NonNegativeFloat
    image: str = ""
    size: str = Field(min_length=1)
    quantity: PositiveInt

    model_config = ConfigDict(extra="ignore")

    @staticmethod
    def from_line_item(item: CartLineItem) -> StoredCartLineItem:
        return StoredCartLineItem(
            product_id=item.product_id,
            name=item.name,
            brand=item.brand,
            unit_price=item.unit_price,
            image=item.image,
            size=item.size,
            quantity=item.quantity,
        )

    def as_line_item(self) -> CartLineItem:
        return CartLineItem(
            product_id=self.product_id,
            name=self.name,
            brand=self.brand,
            unit_price=self.unit_price,
            image=self.image,
            size=self.size,
            quantity=self.quantity,
        )


stored_cart_adapter = TypeAdapter(List[StoredCartLineItem])
