"""Domain errors raised by the sale and reporting services.

Services raise these instead of ``HTTPException`` so the same code can be
driven from the HTTP layer, the CLI and tests. ``register_exception_handlers``
turns them into JSON responses at the request boundary.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class StockroomError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def extra(self) -> dict[str, Any]:
        return {}


class ValidationError(StockroomError):
    """Malformed or missing report/sale parameters. Never retried."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(detail)
        self.field = field

    def extra(self) -> dict[str, Any]:
        return {"field": self.field} if self.field else {}


class NotFoundError(StockroomError):
    status_code = status.HTTP_404_NOT_FOUND


class InsufficientStockError(StockroomError):
    """Business-rule rejection: the sale asks for more units than are on hand."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, item_name: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for {item_name}: requested {requested}, available {available}."
        )
        self.requested = requested
        self.available = available

    def extra(self) -> dict[str, Any]:
        return {"requested": self.requested, "available": self.available}


class DeliveryError(StockroomError):
    """The export was generated but could not be handed to the mail transport."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, detail: str, filename: Optional[str] = None, retryable: bool = False):
        super().__init__(detail)
        self.filename = filename
        self.retryable = retryable

    def extra(self) -> dict[str, Any]:
        return {"filename": self.filename, "retryable": self.retryable}


class StoreTimeoutError(StockroomError):
    """A store or transport call outlived the request timeout. Safe to retry."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def extra(self) -> dict[str, Any]:
        return {"retryable": True}


class ConfigurationError(StockroomError):
    """Fatal at startup; never produced while serving a request."""


async def stockroom_error_handler(request: Request, exc: StockroomError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.detail}")
    else:
        logger.info(f"{type(exc).__name__} on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, **exc.extra()},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed bodies (an unknown payment type, a zero quantity) are plain validation errors
    logger.info(f"Invalid request on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StockroomError, stockroom_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
