from http import HTTPStatus
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import NonNegativeInt, PositiveInt

from storefront.api.auth import Caller, require_admin, require_user
from storefront.store import order_queries as store

from .order_contracts import (
    OrderRequest,
    OrderResponse,
    OrderStatusRequest,
)

logger = structlog.get_logger(__name__)

order_router = APIRouter(prefix="/api/orders")


def _describe(lines) -> str:
    return ", ".join(f"{line.product_id}/{line.size}" for line in lines)


@order_router.post(
    "/",
    status_code=HTTPStatus.CREATED,
    responses={
        HTTPStatus.UNAUTHORIZED: {"description": "Caller is not authenticated"},
        HTTPStatus.CONFLICT: {"description": "Not enough stock for some items"},
        HTTPStatus.UNPROCESSABLE_ENTITY: {"description": "Unknown product or size"},
    },
)
async def post_order(
    info: OrderRequest,
    response: Response,
    caller: Annotated[Caller, Depends(require_user)],
) -> OrderResponse:
    shipping = info.shipping_address.as_address()
    billing = info.billing_address.as_address() if info.billing_address else shipping

    result = store.place(
        user_id=caller.user_id,
        lines=[item.as_order_line() for item in info.items],
        shipping_address=shipping,
        billing_address=billing,
        payment_method=info.payment_method,
        notes=info.notes,
    )

    if result.unknown:
        raise HTTPException(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            f"Unknown products or sizes: {_describe(result.unknown)}",
        )
    if result.out_of_stock or result.order is None:
        raise HTTPException(
            HTTPStatus.CONFLICT,
            f"Not enough stock for: {_describe(result.out_of_stock)}",
        )

    response.headers["location"] = f"/api/orders/{result.order.id}"
    return OrderResponse.from_entity(result.order)


@order_router.get("/")
async def get_order_list(
    caller: Annotated[Caller, Depends(require_user)],
    offset: Annotated[NonNegativeInt, Query()] = 0,
    limit: Annotated[PositiveInt, Query()] = 10,
) -> list[OrderResponse]:
    return [
        OrderResponse.from_entity(e)
        for e in store.get_many(caller.user_id, offset=offset, limit=limit)
    ]


@order_router.get(
    "/{id}",
    responses={
        HTTPStatus.OK: {
            "description": "Successfully returned requested order",
        },
        HTTPStatus.NOT_FOUND: {
            "description": "Failed to return requested order as one was not found",
        },
    },
)
async def get_order_by_id(
    id: int,
    caller: Annotated[Caller, Depends(require_user)],
) -> OrderResponse:
    entity = store.get_one(id)

    # other users' orders are reported as missing
    if entity is None or (entity.info.user_id != caller.user_id and not caller.is_admin):
        raise HTTPException(
            HTTPStatus.NOT_FOUND,
            f"Request resource /api/orders/{id} was not found",
        )

    return OrderResponse.from_entity(entity)


@order_router.patch(
    "/{id}/status",
    responses={
        HTTPStatus.FORBIDDEN: {"description": "Caller is not an admin"},
        HTTPStatus.NOT_FOUND: {"description": "Order was not found"},
    },
)
async def patch_order_status(
    id: int,
    info: OrderStatusRequest,
    caller: Annotated[Caller, Depends(require_admin)],
) -> OrderResponse:
    entity = store.set_status(id, info.status)

    if entity is None:
        raise HTTPException(
            HTTPStatus.NOT_FOUND,
            f"Requested resource /api/orders/{id} was not found",
        )

    logger.info("order status changed", order_id=id, status=info.status, by=caller.user_id)
    return OrderResponse.from_entity(entity)
