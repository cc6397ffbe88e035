from __future__ import annotations

from typing import AsyncIterator

import httpx
import pytest

from storefront import main as app_module
from storefront.cart.cart_models import CartLineItem
from storefront.client.catalog_client import CatalogClient, CatalogError
from storefront.store import product_queries
from storefront.store.product_models import ProductFilter, ProductInfo, ProductSort, SizeStock


def add_product(name: str, price: float, **kwargs) -> int:
	info = ProductInfo(
		name=name,
		brand=kwargs.pop("brand", "Maison Aube"),
		description="Eau de parfum",
		price=price,
		gender=kwargs.pop("gender", "unisex"),
		category="parfum",
		sizes=[SizeStock("50ml", 3)],
		images=[f"/img/{name}.jpg"],
		**kwargs,
	)
	return product_queries.add(info).id


@pytest.fixture()
async def catalog(db: None) -> AsyncIterator[CatalogClient]:
	transport = httpx.ASGITransport(app=app_module.app)
	async with CatalogClient(httpx.AsyncClient(transport=transport, base_url="http://testserver")) as c:
		yield c


@pytest.mark.asyncio
async def test_list_products(catalog: CatalogClient) -> None:
	add_product("Ambre", 80.0, featured=True)
	add_product("Cedre", 25.0, brand="Nord")
	add_product("Iris", 50.0, featured=True)

	page = await catalog.list_products(
		ProductFilter(featured=True),
		ProductSort(key="price", order="asc"),
		page=1,
		limit=1,
	)

	assert [p.name for p in page.items] == ["Iris"]
	assert page.total_count == 2
	assert page.total_pages == 2
	assert page.brands == ["Maison Aube", "Nord"]

	page = await catalog.list_products(ProductFilter(brand="Nord", max_price=30))
	assert [p.name for p in page.items] == ["Cedre"]


@pytest.mark.asyncio
async def test_get_product_and_add_to_cart(catalog: CatalogClient) -> None:
	product_id = add_product("Ambre", 80.0, discount_price=70.0)

	product = await catalog.get_product(product_id)
	assert product is not None
	assert product.discount_price == 70.0

	entity = product_queries.get_one(product_id)
	item = CartLineItem.from_product(entity, product.sizes[0].size)
	assert item.unit_price == 70.0


@pytest.mark.asyncio
async def test_missing_product_is_none(catalog: CatalogClient) -> None:
	assert await catalog.get_product(31337) is None


@pytest.mark.asyncio
async def test_server_error_raises_catalog_error() -> None:
	calls = []

	def handler(request: httpx.Request) -> httpx.Response:
		calls.append(request.url.path)
		return httpx.Response(500, json={"message": "Error fetching products"})

	async with CatalogClient(httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://shop")) as catalog:
		with pytest.raises(CatalogError) as excinfo:
			await catalog.list_products()
		assert excinfo.value.status_code == 500

		with pytest.raises(CatalogError):
			await catalog.get_product(1)

	# failures are not retried
	assert calls == ["/api/products/", "/api/products/1"]


@pytest.mark.asyncio
async def test_transport_error_raises_catalog_error() -> None:
	def handler(request: httpx.Request) -> httpx.Response:
		raise httpx.ReadTimeout("timed out", request=request)

	async with CatalogClient(httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://shop")) as catalog:
		with pytest.raises(CatalogError):
			await catalog.get_product(1)


@pytest.mark.asyncio
async def test_query_params_sent() -> None:
	seen = {}

	def handler(request: httpx.Request) -> httpx.Response:
		seen.update(dict(request.url.params))
		return httpx.Response(
			200,
			json={
				"products": [],
				"pagination": {"current_page": 3, "total_pages": 0, "total_products": 0},
				"filters": {"brands": [], "categories": []},
			},
		)

	async with CatalogClient(httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://shop")) as catalog:
		await catalog.list_products(ProductFilter(gender="male", is_new=True, search="oud"), page=3, limit=6)

	assert seen == {
		"gender": "male",
		"search": "oud",
		"is_new": "true",
		"sort_by": "created_at",
		"sort_order": "desc",
		"page": "3",
		"limit": "6",
	}
