import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from tortoise import Tortoise
from tortoise.contrib.fastapi import tortoise_exception_handlers

from .core.config import DATABASE_URL, load_mail_settings
from .core.errors import ConfigurationError, register_exception_handlers
from .core.logging_config import configure_logging
from .features.auth.router import router as auth_router
from .features.customers.router import router as customers_router
from .features.dashboard.router import router as dashboard_router
from .features.inventory.router import router as inventory_router
from .features.reports.delivery import SmtpMailer, configure_mailer
from .features.reports.router import router as reports_router
from .features.sales.router import router as sales_router

logger = logging.getLogger("stockroom.main")  # This logger will inherit from 'stockroom'

TORTOISE_ORM_CONFIG = {
    "connections": {"default": DATABASE_URL},
    "apps": {
        "models": {  # This is an app label, can be anything
            "models": [
                "stockroom.features.auth.models",
                "stockroom.features.inventory.models",
                "stockroom.features.customers.models",
                "stockroom.features.sales.models",
                "aerich.models",  # For Aerich migrations
            ],
            "default_connection": "default",
        }
    },
    "use_tz": True,
    "timezone": "UTC",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Validates the mail transport settings before anything else so a bad
    deployment fails at startup, then connects to the database.
    """
    configure_logging()
    logger.info("Starting application...")
    try:
        mail_settings = load_mail_settings()
    except ConfigurationError as e:
        logger.critical(f"Refusing to start: {e.detail}")
        raise
    configure_mailer(SmtpMailer(mail_settings))
    logger.info(f"Mail transport configured for {mail_settings.host}:{mail_settings.port}")

    await Tortoise.init(config=TORTOISE_ORM_CONFIG)
    logger.info("Tortoise-ORM has been initialized.")

    yield

    await Tortoise.close_connections()
    configure_mailer(None)
    logger.info("Tortoise-ORM connections have been closed.")


app = FastAPI(
    title="Stockroom API",
    description="API for items, customers, sales and management reports.",
    version="0.1.0",
    exception_handlers=tortoise_exception_handlers(),
    lifespan=lifespan,
)
register_exception_handlers(app)


@app.get("/")
async def read_root(request: Request):
    """
    Root endpoint for the API.
    """
    client_host = request.client.host if request.client else "unknown client"
    logger.info(f"Root endpoint '/' accessed by {client_host}")
    return {"message": "Welcome to the Stockroom API!"}


app.include_router(auth_router, prefix="/api/v1")
app.include_router(inventory_router, prefix="/api/v1")
app.include_router(customers_router, prefix="/api/v1")
app.include_router(sales_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")
app.include_router(dashboard_router, prefix="/api/v1")
