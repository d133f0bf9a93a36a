import logging
from enum import Enum

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    VALIDATION = "VALIDATION"
    CONFLICT = "CONFLICT"


class PosError(Exception):
    """Base class for domain failures that callers can act on."""

    kind: ErrorKind

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(PosError):
    kind = ErrorKind.NOT_FOUND


class InvalidStateError(PosError):
    kind = ErrorKind.INVALID_STATE

    def __init__(self, message: str, current_status=None, **details):
        super().__init__(message, **details)
        self.current_status = current_status


class InsufficientStockError(PosError):
    kind = ErrorKind.INSUFFICIENT_STOCK


class ValidationError(PosError):
    kind = ErrorKind.VALIDATION


class ConflictError(PosError):
    kind = ErrorKind.CONFLICT


STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_STATE: 400,
    ErrorKind.INSUFFICIENT_STOCK: 400,
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 409,
}


async def pos_error_handler(request: Request, exc: PosError):
    return JSONResponse(
        status_code=STATUS_CODES[exc.kind],
        content={"detail": exc.message, "error": exc.kind.value},
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Storage failure on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error": "INTERNAL"},
    )


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(PosError, pos_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
