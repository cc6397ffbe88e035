from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from storefront.store.db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductOrm(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    brand = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)
    price = Column(Numeric(12, 2), nullable=False, index=True)
    discount_price = Column(Numeric(12, 2), nullable=True)
    gender = Column(String(16), nullable=False, index=True)
    category = Column(String(255), nullable=False, index=True)
    images = Column(JSON, nullable=False, default=list)
    featured = Column(Boolean, nullable=False, default=False, index=True)
    is_new = Column(Boolean, nullable=False, default=False, index=True)
    rating = Column(Float, nullable=False, default=0.0)
    tags = Column(JSON, nullable=False, default=list)
    ingredients = Column(JSON, nullable=False, default=list)
    reviews = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    sizes = relationship(
        "ProductSizeOrm",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductSizeOrm.position",
    )


class ProductSizeOrm(Base):
    __tablename__ = "product_sizes"
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    size = Column(String(64), primary_key=True)
    stock = Column(Integer, nullable=False, default=0)
    position = Column(Integer, nullable=False, default=0)

    product = relationship("ProductOrm", back_populates="sizes")


class OrderOrm(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True)
    user_id = Column(String(255), nullable=False, index=True)
    status = Column(String(16), nullable=False, default="pending", index=True)
    shipping_address = Column(JSON, nullable=False)
    billing_address = Column(JSON, nullable=False)
    payment_method = Column(String(16), nullable=False)
    payment_status = Column(String(16), nullable=False, default="pending")
    transaction_id = Column(String(255), nullable=True)
    # order amounts keep full precision, rounding happens on display
    subtotal = Column(Float, nullable=False)
    tax = Column(Float, nullable=False)
    shipping_cost = Column(Float, nullable=False)
    total = Column(Float, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    items = relationship(
        "OrderItemOrm",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemOrm.id",
    )


class OrderItemOrm(Base):
    __tablename__ = "order_items"
    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    # no FK to products: order lines survive product deletion
    product_id = Column(Integer, nullable=False)
    product_name = Column(String(255), nullable=False)
    product_image = Column(String(1024), nullable=False, default="")
    size = Column(String(64), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)

    order = relationship("OrderOrm", back_populates="items")
