# storefront/main.py
from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging

from .core.config import settings
from .core.error_handlers import setup_error_handlers, add_request_id_middleware
from .logging import configure_logging
from .database.core import Base, engine
# Import models so every table is registered before create_all
from .database import models  # noqa: F401
from .users.controller import router as users_router
from .products.controller import router as products_router
from .cart.controller import router as cart_router
from .orders.controller import router as orders_router
from .payments.controller import router as payments_router, webhook_router
from .shipping.controller import router as shipping_router

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")
    yield
    logger.info("Storefront API shutting down")


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=settings.API_TITLE,
        description=settings.API_DESCRIPTION,
        version=settings.API_VERSION,
        lifespan=lifespan
    )

    setup_error_handlers(app)
    app.middleware("http")(add_request_id_middleware)

    app.include_router(users_router, prefix=API_PREFIX)
    app.include_router(products_router, prefix=API_PREFIX)
    app.include_router(cart_router, prefix=API_PREFIX)
    app.include_router(orders_router, prefix=API_PREFIX)
    app.include_router(payments_router, prefix=API_PREFIX)
    app.include_router(webhook_router, prefix=API_PREFIX)
    app.include_router(shipping_router, prefix=API_PREFIX)

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
