from __future__ import annotations

import os
import pathlib
import tempfile
from http import HTTPStatus
from typing import Any, Iterator

import pytest

if "DATABASE_URL" not in os.environ:
	os.environ["DATABASE_URL"] = "sqlite+pysqlite:///" + str(
		pathlib.Path(tempfile.gettempdir()) / "test_storefront.db"
	)

from fastapi.testclient import TestClient

from storefront import main as app_module
from storefront.store import orm  # noqa: F401
from storefront.store.db import Base, engine

ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}
ALICE = {"X-User-Id": "alice", "X-User-Role": "user"}
BOB = {"X-User-Id": "bob", "X-User-Role": "user"}


@pytest.fixture()
def db() -> Iterator[None]:
	db_url = os.environ.get("DATABASE_URL", "")
	if db_url.startswith("sqlite"):
		Base.metadata.drop_all(bind=engine)
		Base.metadata.create_all(bind=engine)
	yield


@pytest.fixture()
def client(db: None) -> Iterator[TestClient]:
	with TestClient(app_module.app) as c:
		yield c


def product_payload(**overrides: Any) -> dict[str, Any]:
	payload: dict[str, Any] = {
		"name": "Bleu Nuit",
		"brand": "Maison Aube",
		"description": "Woody eau de parfum",
		"price": 40.0,
		"gender": "unisex",
		"category": "eau-de-parfum",
		"sizes": [{"size": "50ml", "stock": 5}, {"size": "100ml", "stock": 2}],
		"images": ["/img/bleu-nuit.jpg"],
	}
	payload.update(overrides)
	return payload


def create_product(client: TestClient, **overrides: Any) -> dict[str, Any]:
	resp = client.post("/api/products/", json=product_payload(**overrides), headers=ADMIN)
	assert resp.status_code == HTTPStatus.CREATED, resp.text
	return resp.json()


def address_payload(**overrides: Any) -> dict[str, Any]:
	payload: dict[str, Any] = {
		"full_name": "Alice Doe",
		"street": "1 Main St",
		"city": "Springfield",
		"postal_code": "12345",
	}
	payload.update(overrides)
	return payload
