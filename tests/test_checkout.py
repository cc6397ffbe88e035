from __future__ import annotations

from typing import AsyncIterator

import httpx
import pytest

from storefront import main as app_module
from storefront.cart.cart_models import CartLineItem
from storefront.cart.ledger import Cart
from storefront.cart.storage import MemoryStorage
from storefront.client.order_client import HttpOrderGateway
from storefront.services.checkout import (
	MockOrderGateway,
	OrderReceipt,
	OrderRejected,
	OrderSnapshot,
	build_order_snapshot,
	submit_order,
)
from storefront.store import order_queries, product_queries
from storefront.store.order_models import Address
from storefront.store.product_models import ProductInfo, SizeStock

HOME = Address(full_name="Alice Doe", street="1 Main St", city="Springfield", postal_code="12345")
OFFICE = Address(full_name="Alice Doe", street="9 Work Rd", city="Capital City", postal_code="54321")


class RejectingGateway:
	def __init__(self) -> None:
		self.calls = 0

	async def place(self, snapshot: OrderSnapshot) -> OrderReceipt:
		self.calls += 1
		raise OrderRejected("Payment declined", 402)


def filled_cart() -> Cart:
	cart = Cart(MemoryStorage())
	cart.add(CartLineItem(1, "Bleu Nuit", "Maison Aube", 20.0, "", "50ml", 2))
	cart.add(CartLineItem(2, "Ambre", "Maison Aube", 10.0, "", "100ml", 1))
	return cart


def test_snapshot_recomputes_money_values() -> None:
	cart = filled_cart()
	snapshot = build_order_snapshot(cart.items, HOME, "paypal")

	assert snapshot.subtotal == pytest.approx(50.0)
	assert snapshot.shipping_cost == 8.99
	assert round(snapshot.total, 2) == 62.49
	assert snapshot.billing_address == HOME
	assert snapshot.payment_method == "paypal"

	cart.update_quantity(1, "50ml", 9)
	assert snapshot.items[0].quantity == 2

	assert build_order_snapshot(cart.items, HOME, "stripe", billing_address=OFFICE).billing_address == OFFICE


@pytest.mark.asyncio
async def test_accepted_order_clears_cart() -> None:
	cart = filled_cart()
	gateway = MockOrderGateway()

	receipt = await submit_order(cart, HOME, "credit_card", gateway)

	assert receipt.order_id == 1
	assert round(receipt.total, 2) == 62.49
	assert cart.total_items() == 0
	assert len(gateway.placed) == 1
	assert [i.key for i in gateway.placed[0].items] == [(1, "50ml"), (2, "100ml")]


@pytest.mark.asyncio
async def test_rejected_order_leaves_cart_untouched() -> None:
	cart = filled_cart()
	before = cart.items

	with pytest.raises(OrderRejected) as excinfo:
		await submit_order(cart, HOME, "credit_card", RejectingGateway())

	assert excinfo.value.reason == "Payment declined"
	assert cart.items == before


@pytest.mark.asyncio
async def test_empty_cart_is_rejected_before_gateway() -> None:
	gateway = RejectingGateway()
	with pytest.raises(OrderRejected):
		await submit_order(Cart(MemoryStorage()), HOME, "credit_card", gateway)
	assert gateway.calls == 0


@pytest.fixture()
async def api(db: None) -> AsyncIterator[httpx.AsyncClient]:
	transport = httpx.ASGITransport(app=app_module.app)
	async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
		yield c


def add_product(price: float, stock: int = 5) -> int:
	entity = product_queries.add(
		ProductInfo(
			name="Bleu Nuit",
			brand="Maison Aube",
			description="Woody",
			price=price,
			gender="unisex",
			category="parfum",
			sizes=[SizeStock("50ml", stock)],
			images=["/img/bleu-nuit.jpg"],
		)
	)
	return entity.id


@pytest.mark.asyncio
async def test_http_gateway_places_repriced_order(api: httpx.AsyncClient) -> None:
	product_id = add_product(price=30.0)
	cart = Cart(MemoryStorage())
	# stale snapshot price; the server charges the current catalog price
	cart.add(CartLineItem(product_id, "Bleu Nuit", "Maison Aube", 20.0, "", "50ml", 3))

	receipt = await submit_order(cart, HOME, "credit_card", HttpOrderGateway("alice", client=api))

	assert cart.total_items() == 0
	assert receipt.status == "pending"
	assert round(receipt.total, 2) == 96.30

	order = order_queries.get_one(receipt.order_id)
	assert order is not None
	assert order.info.user_id == "alice"
	assert order.info.items[0].price == 30.0
	assert order.info.shipping_address == HOME


@pytest.mark.asyncio
async def test_http_gateway_rejection_keeps_cart(api: httpx.AsyncClient) -> None:
	product_id = add_product(price=30.0, stock=1)
	cart = Cart(MemoryStorage())
	cart.add(CartLineItem(product_id, "Bleu Nuit", "Maison Aube", 30.0, "", "50ml", 2))

	with pytest.raises(OrderRejected) as excinfo:
		await submit_order(cart, HOME, "credit_card", HttpOrderGateway("alice", client=api))

	assert excinfo.value.status_code == 409
	assert "Not enough stock" in excinfo.value.reason
	assert cart.total_items() == 2


@pytest.mark.asyncio
async def test_http_gateway_transport_failure_is_rejection() -> None:
	def handler(request: httpx.Request) -> httpx.Response:
		raise httpx.ConnectError("connection refused", request=request)

	client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://shop")
	cart = filled_cart()

	with pytest.raises(OrderRejected) as excinfo:
		await submit_order(cart, HOME, "credit_card", HttpOrderGateway("alice", client=client))

	assert excinfo.value.status_code is None
	assert cart.total_items() == 3
	await client.aclose()


@pytest.mark.asyncio
async def test_http_gateway_malformed_created_body_is_rejection() -> None:
	def handler(request: httpx.Request) -> httpx.Response:
		return httpx.Response(201, json={"id": "not-an-order"})

	client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://shop")
	cart = filled_cart()

	with pytest.raises(OrderRejected) as excinfo:
		await submit_order(cart, HOME, "credit_card", HttpOrderGateway("alice", client=client))

	assert excinfo.value.status_code == 201
	assert cart.total_items() == 3
	await client.aclose()
