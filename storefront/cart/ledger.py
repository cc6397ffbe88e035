from __future__ import annotations

from dataclasses import replace
from typing import List

import structlog
from pydantic import ValidationError

from storefront.cart.cart_contracts import StoredCartLineItem, stored_cart_adapter
from storefront.cart.cart_models import CartLineItem
from storefront.cart.storage import JsonFileStorage, LocalStorage
from storefront.config import settings
from storefront.services.pricing import PricingResult, calculate_pricing, subtotal_of

logger = structlog.get_logger(__name__)

CART_STORAGE_KEY = "cart"


class Cart:
    """Line items selected in one browsing session.

    Lines are keyed by ``(product_id, size)`` and kept in insertion order.
    Every mutation writes the whole ledger to ``storage`` under ``key``;
    construction reads it back. A stored value that cannot be decoded is
    logged and replaced by an empty cart.
    """

    def __init__(self, storage: LocalStorage, key: str = CART_STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._items: List[CartLineItem] = self._load()

    def _load(self) -> List[CartLineItem]:
        raw = self._storage.get_item(self._key)
        if not raw:
            return []
        try:
            stored = stored_cart_adapter.validate_json(raw)
        except ValidationError as exc:
            logger.warning("failed to parse stored cart, starting empty", key=self._key, error=str(exc))
            return []

        items: List[CartLineItem] = []
        for line in stored:
            item = line.as_line_item()
            existing = self._find(items, item.product_id, item.size)
            if existing is None:
                items.append(item)
            else:
                existing.quantity += item.quantity
        return items

    def _persist(self) -> None:
        payload = stored_cart_adapter.dump_json(
            [StoredCartLineItem.from_line_item(item) for item in self._items]
        )
        self._storage.set_item(self._key, payload.decode("utf-8"))

    @staticmethod
    def _find(items: List[CartLineItem], product_id: int, size: str) -> CartLineItem | None:
        for item in items:
            if item.product_id == product_id and item.size == size:
                return item
        return None

    @property
    def items(self) -> tuple[CartLineItem, ...]:
        return tuple(replace(item) for item in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: CartLineItem) -> None:
        existing = self._find(self._items, item.product_id, item.size)
        if existing is not None:
            existing.quantity += item.quantity
            logger.debug("cart line updated", product_id=item.product_id, size=item.size, quantity=existing.quantity)
        else:
            self._items.append(replace(item))
            logger.debug("cart line added", product_id=item.product_id, size=item.size, quantity=item.quantity)
        self._persist()

    def remove(self, product_id: int, size: str) -> None:
        existing = self._find(self._items, product_id, size)
        if existing is None:
            return
        self._items.remove(existing)
        logger.debug("cart line removed", product_id=product_id, size=size)
        self._persist()

    def update_quantity(self, product_id: int, size: str, new_quantity: int) -> None:
        # removal goes through remove(), never through a zero quantity
        if new_quantity < 1:
            return
        existing = self._find(self._items, product_id, size)
        if existing is None:
            return
        existing.quantity = new_quantity
        self._persist()

    def clear(self) -> None:
        self._items = []
        logger.debug("cart cleared")
        self._persist()

    def total_items(self) -> int:
        return sum(item.quantity for item in self._items)

    def subtotal(self) -> float:
        return subtotal_of(self._items)

    def pricing(self) -> PricingResult:
        return calculate_pricing(self.subtotal())


def open_cart(path: str | None = None, key: str = CART_STORAGE_KEY) -> Cart:
    """Cart backed by the JSON storage file at ``path`` (``STOREFRONT_CART_PATH`` by default)."""
    return Cart(JsonFileStorage(path or settings.cart_path), key=key)
