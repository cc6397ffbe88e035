from fastapi import FastAPI

from storefront.api.order.order_routes import order_router
from storefront.api.product.product_routes import product_router
from storefront.store.db import init_db
from storefront.utils.logging import configure_logging

configure_logging()

app = FastAPI(title="Storefront API")


@app.on_event("startup")
def _on_startup() -> None:
    init_db()


app.include_router(product_router)
app.include_router(order_router)
