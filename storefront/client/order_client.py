"""Order gateway that submits snapshots to the storefront API."""

from __future__ import annotations

from http import HTTPStatus

import httpx
import structlog
from pydantic import ValidationError

from storefront.api.order.order_contracts import AddressModel, OrderResponse
from storefront.config import settings
from storefront.services.checkout import OrderReceipt, OrderRejected, OrderSnapshot

logger = structlog.get_logger(__name__)


def _snapshot_payload(snapshot: OrderSnapshot) -> dict:
    # money values are recomputed by the server; only lines and addresses are sent
    return {
        "items": [
            {"product_id": item.product_id, "size": item.size, "quantity": item.quantity}
            for item in snapshot.items
        ],
        "shipping_address": AddressModel.from_address(snapshot.shipping_address).model_dump(),
        "billing_address": AddressModel.from_address(snapshot.billing_address).model_dump(),
        "payment_method": snapshot.payment_method,
    }


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    return "There was a problem processing your order. Please try again."


class HttpOrderGateway:
    def __init__(
        self,
        user_id: str,
        client: httpx.AsyncClient | None = None,
        role: str = "user",
    ) -> None:
        self._client = client or httpx.AsyncClient(
            base_url=settings.api_url,
            timeout=settings.http_timeout,
        )
        self._headers = {"X-User-Id": user_id, "X-User-Role": role}

    async def aclose(self) -> None:
        await self._client.aclose()

    async def place(self, snapshot: OrderSnapshot) -> OrderReceipt:
        try:
            response = await self._client.post(
                "/api/orders/",
                json=_snapshot_payload(snapshot),
                headers=self._headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("order submission failed", error=str(exc))
            raise OrderRejected(f"Order service is unavailable: {exc}") from exc

        if response.status_code != HTTPStatus.CREATED:
            raise OrderRejected(_error_detail(response), response.status_code)

        try:
            order = OrderResponse.model_validate_json(response.content)
        except ValidationError as exc:
            logger.warning("malformed order response", status_code=response.status_code)
            raise OrderRejected(f"Malformed order response: {exc}", response.status_code) from exc
        if abs(order.total - snapshot.total) >= 0.005:
            logger.info("server repriced order", order_id=order.id, client_total=snapshot.total, total=order.total)
        return OrderReceipt(order_id=order.id, total=order.total, status=order.status)
