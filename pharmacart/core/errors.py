from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette import status
import logging

logger = logging.getLogger("pharmacart.errors")


class PharmaCartError(Exception):
    """Base class for domain errors surfaced to API callers."""

    error_code = "bad_request"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidQuantityError(PharmaCartError, ValueError):
    error_code = "invalid_quantity"


class InvalidSurchargeError(PharmaCartError, ValueError):
    error_code = "invalid_surcharge"


class ProductNotFoundError(PharmaCartError, LookupError):
    error_code = "product_not_found"
    status_code = status.HTTP_404_NOT_FOUND


class CatalogLoadError(PharmaCartError):
    error_code = "catalog_load_failed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def domain_error_handler(request: Request, exc: PharmaCartError):  # type: ignore
    logger.info("domain error %s: %s", exc.error_code, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error_code, "detail": str(exc)},
    )


def not_found_handler(request: Request, exc):  # type: ignore
    if exc.status_code != status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "http_error", "detail": exc.detail},
        )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "not_found",
            "detail": f"No route for {request.method} {request.url.path}",
        },
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
