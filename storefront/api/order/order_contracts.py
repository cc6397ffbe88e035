from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from storefront.store.order_models import (
    Address,
    OrderEntity,
    OrderLineRequest,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)


class AddressModel(BaseModel):
    full_name: str = Field(min_length=1)
    street: str = Field(min_length=1)
    apartment: str | None = None
    city: str = Field(min_length=1)
    state: str | None = None
    postal_code: str = Field(min_length=1)
    country: str = "United States"
    phone: str | None = None

    model_config = ConfigDict(str_strip_whitespace=True)

    @staticmethod
    def from_address(address: Address) -> AddressModel:
        return AddressModel(
            full_name=address.full_name,
            street=address.street,
            apartment=address.apartment,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
            phone=address.phone,
        )

    def as_address(self) -> Address:
        return Address(
            full_name=self.full_name,
            street=self.street,
            apartment=self.apartment,
            city=self.city,
            state=self.state,
            postal_code=self.postal_code,
            country=self.country,
            phone=self.phone,
        )


class OrderLineModel(BaseModel):
    product_id: int
    size: str = Field(min_length=1)
    quantity: PositiveInt

    # clients may send their full cart line; only the key and quantity count
    model_config = ConfigDict(extra="ignore")

    def as_order_line(self) -> OrderLineRequest:
        return OrderLineRequest(product_id=self.product_id, size=self.size, quantity=self.quantity)


class OrderRequest(BaseModel):
    items: List[OrderLineModel] = Field(min_length=1)
    shipping_address: AddressModel
    billing_address: AddressModel | None = None
    payment_method: PaymentMethod
    notes: str | None = None

    # totals sent by the client are accepted but never used
    model_config = ConfigDict(extra="ignore")


class OrderItemResponse(BaseModel):
    product_id: int
    product_name: str
    product_image: str
    size: str
    quantity: int
    price: float


class OrderResponse(BaseModel):
    id: int
    user_id: str
    items: List[OrderItemResponse]
    status: OrderStatus
    shipping_address: AddressModel
    billing_address: AddressModel
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    subtotal: float
    tax: float
    shipping_cost: float
    total: float
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def from_entity(entity: OrderEntity) -> OrderResponse:
        info = entity.info
        return OrderResponse(
            id=entity.id,
            user_id=info.user_id,
            items=[
                OrderItemResponse(
                    product_id=it.product_id,
                    product_name=it.product_name,
                    product_image=it.product_image,
                    size=it.size,
                    quantity=it.quantity,
                    price=it.price,
                )
                for it in info.items
            ],
            status=info.status,
            shipping_address=AddressModel.from_address(info.shipping_address),
            billing_address=AddressModel.from_address(info.billing_address),
            payment_method=info.payment_method,
            payment_status=info.payment_status,
            subtotal=info.subtotal,
            tax=info.tax,
            shipping_cost=info.shipping_cost,
            total=info.total,
            notes=info.notes,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )


class OrderStatusRequest(BaseModel):
    status: OrderStatus

    model_config = ConfigDict(extra="forbid")
