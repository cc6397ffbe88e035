from __future__ import annotations

import json
import pathlib

from storefront.cart.cart_models import CartLineItem
from storefront.cart.ledger import CART_STORAGE_KEY, Cart, open_cart
from storefront.cart.storage import JsonFileStorage, MemoryStorage


def test_memory_storage_roundtrip() -> None:
	storage = MemoryStorage()
	assert storage.get_item("k") is None
	storage.set_item("k", "v")
	assert storage.get_item("k") == "v"
	storage.remove_item("k")
	storage.remove_item("k")
	assert storage.get_item("k") is None


def test_json_file_storage_creates_parent_dirs(tmp_path: pathlib.Path) -> None:
	path = tmp_path / "nested" / "storage.json"
	storage = JsonFileStorage(path)
	assert storage.get_item("cart") is None

	storage.set_item("cart", "[]")
	storage.set_item("theme", "dark")

	assert json.loads(path.read_text()) == {"cart": "[]", "theme": "dark"}
	assert JsonFileStorage(path).get_item("theme") == "dark"


def test_json_file_storage_remove(tmp_path: pathlib.Path) -> None:
	storage = JsonFileStorage(tmp_path / "storage.json")
	storage.set_item("a", "1")
	storage.set_item("b", "2")
	storage.remove_item("a")
	assert storage.get_item("a") is None
	assert storage.get_item("b") == "2"


def test_json_file_storage_leaves_no_temp_files(tmp_path: pathlib.Path) -> None:
	storage = JsonFileStorage(tmp_path / "storage.json")
	for i in range(5):
		storage.set_item("k", str(i))
	assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]


def test_json_file_storage_tolerates_corrupt_file(tmp_path: pathlib.Path) -> None:
	path = tmp_path / "storage.json"
	path.write_text("garbage")
	storage = JsonFileStorage(path)
	assert storage.get_item("cart") is None

	path.write_text("[1, 2]")
	assert storage.get_item("cart") is None


def test_cart_survives_process_restart(tmp_path: pathlib.Path) -> None:
	path = tmp_path / "storage.json"
	cart = Cart(JsonFileStorage(path))
	cart.add(CartLineItem(1, "Bleu Nuit", "Maison Aube", 40.0, "/img/1.jpg", "50ml", 2))
	cart.add(CartLineItem(2, "Ambre", "Maison Aube", 64.0, "/img/2.jpg", "100ml", 1))

	reloaded = Cart(JsonFileStorage(path))
	assert reloaded.items == cart.items
	assert reloaded.total_items() == 3


def test_corrupt_cart_value_in_file_yields_empty_cart(tmp_path: pathlib.Path) -> None:
	path = tmp_path / "storage.json"
	path.write_text(json.dumps({CART_STORAGE_KEY: "[{broken"}))
	assert Cart(JsonFileStorage(path)).items == ()


def test_open_cart_uses_json_file(tmp_path: pathlib.Path) -> None:
	path = tmp_path / "storage.json"
	open_cart(str(path)).add(CartLineItem(1, "Bleu Nuit", "Maison Aube", 40.0, "", "50ml", 1))
	assert open_cart(str(path)).total_items() == 1
	assert CART_STORAGE_KEY in json.loads(path.read_text())
