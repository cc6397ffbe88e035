import math
from http import HTTPStatus
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import NonNegativeFloat, PositiveInt

from storefront.api.auth import Caller, require_admin
from storefront.store import product_queries as store
from storefront.store.product_models import (
    Gender,
    ProductFilter,
    ProductSort,
    SortKey,
    SortOrder,
)

from .product_contracts import (
    FiltersResponse,
    PaginationResponse,
    PatchProductRequest,
    ProductListResponse,
    ProductRequest,
    ProductResponse,
)

logger = structlog.get_logger(__name__)

product_router = APIRouter(prefix="/api/products")


@product_router.get("/")
async def get_product_list(
    gender: Annotated[Gender | None, Query()] = None,
    category: Annotated[str | None, Query()] = None,
    brand: Annotated[str | None, Query()] = None,
    min_price: Annotated[NonNegativeFloat | None, Query()] = None,
    max_price: Annotated[NonNegativeFloat | None, Query()] = None,
    search: Annotated[str | None, Query()] = None,
    featured: Annotated[bool, Query()] = False,
    is_new: Annotated[bool, Query()] = False,
    sort_by: Annotated[SortKey, Query()] = "created_at",
    sort_order: Annotated[SortOrder, Query()] = "desc",
    page: Annotated[PositiveInt, Query()] = 1,
    limit: Annotated[PositiveInt, Query()] = 12,
) -> ProductListResponse:
    result = store.get_many(
        product_filter=ProductFilter(
            gender=gender,
            category=category,
            brand=brand,
            min_price=min_price,
            max_price=max_price,
            search=search,
            featured=featured,
            is_new=is_new,
        ),
        sort=ProductSort(key=sort_by, order=sort_order),
        page=page,
        limit=limit,
    )
    return ProductListResponse(
        products=[ProductResponse.from_entity(e) for e in result.items],
        pagination=PaginationResponse(
            current_page=page,
            total_pages=math.ceil(result.total_count / limit),
            total_products=result.total_count,
        ),
        filters=FiltersResponse(
            brands=store.distinct_brands(),
            categories=store.distinct_categories(),
        ),
    )


@product_router.get(
    "/{id}",
    responses={
        HTTPStatus.OK: {
            "description": "Successfully returned requested product",
        },
        HTTPStatus.NOT_FOUND: {
            "description": "Failed to return requested product as one was not found",
        },
    },
)
async def get_product_by_id(id: int) -> ProductResponse:
    entity = store.get_one(id)

    if not entity:
        raise HTTPException(
            HTTPStatus.NOT_FOUND,
            f"Request resource /api/products/{id} was not found",
        )

    return ProductResponse.from_entity(entity)


@product_router.post(
    "/",
    status_code=HTTPStatus.CREATED,
    responses={
        HTTPStatus.FORBIDDEN: {"description": "Caller is not an admin"},
    },
)
async def post_product(
    info: ProductRequest,
    response: Response,
    caller: Annotated[Caller, Depends(require_admin)],
) -> ProductResponse:
    entity = store.add(info.as_product_info())
    logger.info("product created", product_id=entity.id, by=caller.user_id)

    response.headers["location"] = f"/api/products/{entity.id}"

    return ProductResponse.from_entity(entity)


@product_router.patch(
    "/{id}",
    responses={
        HTTPStatus.OK: {
            "description": "Successfully patched product",
        },
        HTTPStatus.FORBIDDEN: {"description": "Caller is not an admin"},
        HTTPStatus.NOT_FOUND: {
            "description": "Failed to modify product as one was not found",
        },
    },
)
async def patch_product(
    id: int,
    info: PatchProductRequest,
    caller: Annotated[Caller, Depends(require_admin)],
) -> ProductResponse:
    entity = store.patch(id, info.as_patch_product_info())

    if entity is None:
        raise HTTPException(
            HTTPStatus.NOT_FOUND,
            f"Requested resource /api/products/{id} was not found",
        )

    logger.info("product patched", product_id=id, by=caller.user_id)
    return ProductResponse.from_entity(entity)


@product_router.put(
    "/{id}",
    responses={
        HTTPStatus.OK: {
            "description": "Successfully replaced product",
        },
        HTTPStatus.FORBIDDEN: {"description": "Caller is not an admin"},
        HTTPStatus.NOT_FOUND: {
            "description": "Failed to modify product as one was not found",
        },
    },
)
async def put_product(
    id: int,
    info: ProductRequest,
    caller: Annotated[Caller, Depends(require_admin)],
) -> ProductResponse:
    entity = store.update(id, info.as_product_info())

    if entity is None:
        raise HTTPException(
            HTTPStatus.NOT_FOUND,
            f"Requested resource /api/products/{id} was not found",
        )

    logger.info("product replaced", product_id=id, by=caller.user_id)
    return ProductResponse.from_entity(entity)


@product_router.delete(
    "/{id}",
    responses={
        HTTPStatus.FORBIDDEN: {"description": "Caller is not an admin"},
        HTTPStatus.NOT_FOUND: {"description": "Product was not found"},
    },
)
async def delete_product(
    id: int,
    caller: Annotated[Caller, Depends(require_admin)],
) -> dict[str, str]:
    if not store.delete(id):
        raise HTTPException(
            HTTPStatus.NOT_FOUND,
            f"Requested resource /api/products/{id} was not found",
        )

    logger.info("product deleted", product_id=id, by=caller.user_id)
    return {"message": "Product deleted successfully"}
