import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.engine import Engine
from sqlmodel import Session

from pos_api.config import Settings, settings as default_settings
from pos_api.database import build_engine, create_db_and_tables
from pos_api.errors import register_error_handlers
from pos_api.routes import admins, categories, orders, payment_settings, products
from pos_api.seed import seed_defaults
from pos_api.services.file_storage import LocalFileStorage, build_file_storage

logger = logging.getLogger(__name__)


def create_app(
    engine: Optional[Engine] = None,
    file_storage=None,
    app_settings: Optional[Settings] = None,
) -> FastAPI:
    app_settings = app_settings or default_settings
    logging.basicConfig(
        level=app_settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    owns_engine = engine is None
    if engine is None:
        engine = build_engine(app_settings.database_url)
    if file_storage is None:
        file_storage = build_file_storage(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Run DB creation ONLY in local
        if app_settings.ENV == "local":
            create_db_and_tables(app.state.engine)
            with Session(app.state.engine) as session:
                seed_defaults(session, app_settings)
        logger.info(f"TCG POS API started (env={app_settings.ENV})")
        yield
        if owns_engine:
            app.state.engine.dispose()

    app = FastAPI(title="TCG POS API", lifespan=lifespan)
    app.state.engine = engine
    app.state.file_storage = file_storage
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(orders.router, prefix="/orders", tags=["Orders"])
    app.include_router(categories.router, prefix="/categories", tags=["Categories"])
    app.include_router(products.router, prefix="/products", tags=["Products"])
    app.include_router(admins.router, prefix="/admin", tags=["Admin"])
    app.include_router(
        payment_settings.router, prefix="/payment-settings", tags=["Payment Settings"]
    )

    if isinstance(file_storage, LocalFileStorage):
        app.mount(
            file_storage.url_prefix,
            StaticFiles(directory=file_storage.base_dir),
            name="uploads",
        )

    @app.get("/")
    def root():
        return {
            "order_endpoints": [
                "/orders", "/orders/{order_id}", "/orders/{order_id}/payment-proof",
                "/orders/{order_id}/verify", "/orders/{order_id}/complete",
                "/orders/{order_id}/cancel", "/orders/payment-methods/available",
            ],
            "analytics_endpoints": [
                "/orders/analytics/sales-summary", "/orders/analytics/daily-sales",
                "/orders/analytics/date-range-sales",
                "/orders/analytics/date-range-sales/export",
            ],
            "catalog_endpoints": [
                "/categories", "/categories/{category_id}",
                "/products", "/products/{product_id}",
            ],
            "admin_endpoints": [
                "/admin/register", "/admin/login", "/admin/profile",
                "/admin/all", "/admin/create", "/admin/{admin_id}",
                "/payment-settings", "/payment-settings/{setting_id}",
            ],
        }

    return app


app = create_app()
