from collections import OrderedDict
from decimal import Decimal
from typing import Iterable, Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from storefront.services.pricing import calculate_pricing
from storefront.store import product_queries
from storefront.store.db import SessionLocal
from storefront.store.order_models import (
    Address,
    OrderEntity,
    OrderInfo,
    OrderItemInfo,
    OrderLineRequest,
    OrderStatus,
    PaymentMethod,
    PlaceOrderResult,
)
from storefront.store.orm import OrderItemOrm, OrderOrm

logger = structlog.get_logger(__name__)


def _address_to_json(address: Address) -> dict:
    return {
        "full_name": address.full_name,
        "street": address.street,
        "apartment": address.apartment,
        "city": address.city,
        "state": address.state,
        "postal_code": address.postal_code,
        "country": address.country,
        "phone": address.phone,
    }


def _address_from_json(data: dict) -> Address:
    return Address(**data)


def _to_order_entity(orm: OrderOrm) -> OrderEntity:
    return OrderEntity(
        id=orm.id,
        info=OrderInfo(
            user_id=orm.user_id,
            items=[
                OrderItemInfo(
                    product_id=it.product_id,
                    product_name=it.product_name,
                    product_image=it.product_image,
                    size=it.size,
                    quantity=it.quantity,
                    price=float(it.price),
                )
                for it in orm.items
            ],
            shipping_address=_address_from_json(orm.shipping_address),
            billing_address=_address_from_json(orm.billing_address),
            payment_method=orm.payment_method,
            subtotal=orm.subtotal,
            tax=orm.tax,
            shipping_cost=orm.shipping_cost,
            total=orm.total,
            status=orm.status,
            payment_status=orm.payment_status,
            transaction_id=orm.transaction_id,
            notes=orm.notes,
        ),
        created_at=orm.created_at,
        updated_at=orm.updated_at,
    )


def _merge_lines(lines: Iterable[OrderLineRequest]) -> list[OrderLineRequest]:
    merged: OrderedDict[tuple[int, str], OrderLineRequest] = OrderedDict()
    for line in lines:
        key = (line.product_id, line.size)
        if key in merged:
            merged[key].quantity += line.quantity
        else:
            merged[key] = OrderLineRequest(line.product_id, line.size, line.quantity)
    return list(merged.values())


def place(
    user_id: str,
    lines: Sequence[OrderLineRequest],
    shipping_address: Address,
    billing_address: Address,
    payment_method: PaymentMethod,
    notes: str | None = None,
) -> PlaceOrderResult:
    """Price ``lines`` from the catalog, reserve stock and persist the order.

    Nothing is written unless every line can be fulfilled.
    """
    merged = _merge_lines(lines)

    with SessionLocal() as session:
        items: list[OrderItemInfo] = []
        unknown: list[OrderLineRequest] = []
        out_of_stock: list[OrderLineRequest] = []

        for line in merged:
            product = product_queries.load_for_order(session, line.product_id)
            sizes = {s.size: s.stock for s in product.info.sizes} if product else {}
            if product is None or line.size not in sizes:
                unknown.append(line)
                continue
            if sizes[line.size] < line.quantity:
                out_of_stock.append(line)
                continue
            items.append(
                OrderItemInfo(
                    product_id=product.id,
                    product_name=product.info.name,
                    product_image=product.info.images[0] if product.info.images else "",
                    size=line.size,
                    quantity=line.quantity,
                    price=product.info.effective_price,
                )
            )

        if unknown or out_of_stock:
            logger.info(
                "order refused",
                user_id=user_id,
                unknown=len(unknown),
                out_of_stock=len(out_of_stock),
            )
            return PlaceOrderResult(unknown=unknown, out_of_stock=out_of_stock)

        for item in items:
            if not product_queries.reserve_stock(session, item.product_id, item.size, item.quantity):
                # stock moved underneath us; closing the session rolls back earlier reservations
                line = OrderLineRequest(item.product_id, item.size, item.quantity)
                return PlaceOrderResult(out_of_stock=[line])

        pricing = calculate_pricing(sum(it.price * it.quantity for it in items))
        orm = OrderOrm(
            user_id=user_id,
            shipping_address=_address_to_json(shipping_address),
            billing_address=_address_to_json(billing_address),
            payment_method=payment_method,
            subtotal=pricing.subtotal,
            tax=pricing.tax_amount,
            shipping_cost=pricing.shipping_cost,
            total=pricing.total,
            notes=notes,
            items=[
                OrderItemOrm(
                    product_id=it.product_id,
                    product_name=it.product_name,
                    product_image=it.product_image,
                    size=it.size,
                    quantity=it.quantity,
                    price=Decimal(str(it.price)),
                )
                for it in items
            ],
        )
        session.add(orm)
        session.commit()
        session.refresh(orm)
        logger.info("order placed", order_id=orm.id, user_id=user_id, total=pricing.total)
        return PlaceOrderResult(order=_to_order_entity(orm))


def get_one(id: int) -> OrderEntity | None:
    with SessionLocal() as session:
        orm = session.get(OrderOrm, id, options=[selectinload(OrderOrm.items)])
        if orm is None:
            return None
        return _to_order_entity(orm)


def get_many(user_id: str, offset: int = 0, limit: int = 10) -> list[OrderEntity]:
    with SessionLocal() as session:
        stmt = (
            select(OrderOrm)
            .options(selectinload(OrderOrm.items))
            .where(OrderOrm.user_id == user_id)
            .order_by(OrderOrm.created_at.desc(), OrderOrm.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [_to_order_entity(orm) for orm in session.execute(stmt).scalars().all()]


def set_status(id: int, status: OrderStatus) -> OrderEntity | None:
    with SessionLocal.begin() as session:
        orm = session.get(OrderOrm, id)
        if orm is None:
            return None
        orm.status = status
        session.flush()
        session.refresh(orm)
        return _to_order_entity(orm)
