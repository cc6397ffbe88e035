"""Async client for the catalog endpoints.

Fetches never touch the cart. Failures raise ``CatalogError`` and are not
retried; a missing product is reported as ``None``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from http import HTTPStatus
from typing import List

import httpx
import structlog
from pydantic import ValidationError

from storefront.api.product.product_contracts import ProductListResponse, ProductResponse
from storefront.config import settings
from storefront.store.product_models import ProductFilter, ProductSort

logger = structlog.get_logger(__name__)


class CatalogError(Exception):
    """Catalog request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


@dataclass(slots=True)
class CatalogPage:
    items: List[ProductResponse]
    total_count: int
    total_pages: int
    brands: List[str]
    categories: List[str]


def _query_params(product_filter: ProductFilter, sort: ProductSort, page: int, limit: int) -> dict:
    params = {k: v for k, v in asdict(product_filter).items() if v not in (None, False)}
    params.update(sort_by=sort.key, sort_order=sort.order, page=page, limit=limit)
    return {k: str(v).lower() if isinstance(v, bool) else v for k, v in params.items()}


class CatalogClient:
    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client or httpx.AsyncClient(
            base_url=settings.api_url,
            timeout=settings.http_timeout,
        )

    async def __aenter__(self) -> CatalogClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, url: str, params: dict | None = None) -> httpx.Response:
        try:
            return await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            logger.warning("catalog request failed", url=url, error=str(exc))
            raise CatalogError(f"Catalog is unavailable: {exc}") from exc

    async def list_products(
        self,
        product_filter: ProductFilter | None = None,
        sort: ProductSort | None = None,
        page: int = 1,
        limit: int = 12,
    ) -> CatalogPage:
        params = _query_params(product_filter or ProductFilter(), sort or ProductSort(), page, limit)
        response = await self._get("/api/products/", params=params)
        if response.status_code != HTTPStatus.OK:
            raise CatalogError("Error fetching products", response.status_code)
        try:
            body = ProductListResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise CatalogError(f"Malformed catalog response: {exc}") from exc
        return CatalogPage(
            items=body.products,
            total_count=body.pagination.total_products,
            total_pages=body.pagination.total_pages,
            brands=body.filters.brands,
            categories=body.filters.categories,
        )

    async def get_product(self, id: int) -> ProductResponse | None:
        response = await self._get(f"/api/products/{id}")
        if response.status_code == HTTPStatus.NOT_FOUND:
            return None
        if response.status_code != HTTPStatus.OK:
            raise CatalogError("Error fetching product", response.status_code)
        try:
            return ProductResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise CatalogError(f"Malformed catalog response: {exc}") from exc
