import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from medistore.config import settings
from medistore.database import build_engine, create_db_and_tables
from medistore.routes import (
    admin_orders,
    content_admin,
    content_public,
    health,
    payments,
    products_admin,
    products_public,
    storage,
    user_orders,
    webhooks,
)
from medistore.services.storage_client import ObjectStore
from medistore.services.xendit_client import XenditClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.state.engine = build_engine()
    # Run DB creation ONLY in local
    if settings.env == "local":
        create_db_and_tables(app.state.engine)

    app.state.payment_gateway = XenditClient(
        settings.xendit_secret_key,
        api_base=settings.xendit_api_base,
        timeout=settings.xendit_timeout_seconds,
        currency=settings.invoice_currency,
        invoice_duration=settings.invoice_duration_seconds,
    )
    app.state.object_store = ObjectStore.from_settings(settings)
    logger.info(f"Medistore API started (env={settings.env})")

    yield

    app.state.payment_gateway.close()
    app.state.object_store.close()
    app.state.engine.dispose()


app = FastAPI(title="Medistore API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(products_public.router, prefix="/products", tags=["Public Products"])
app.include_router(content_public.router, tags=["Public Content"])
app.include_router(payments.router, prefix="/api/payments", tags=["Payments"])
app.include_router(webhooks.router, prefix="/api/webhooks", tags=["Webhooks"])
app.include_router(user_orders.router, prefix="/orders", tags=["Orders"])
app.include_router(products_admin.router, prefix="/admin/products", tags=["Admin Products"])
app.include_router(content_admin.router, prefix="/admin", tags=["Admin Content"])
app.include_router(admin_orders.router, prefix="/admin", tags=["Admin Orders"])
app.include_router(storage.router, prefix="/admin/uploads", tags=["Files Storage"])
