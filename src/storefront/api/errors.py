"""Exception handlers that render failures in the response envelope."""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError
from protean.exceptions import ValidationError as ProteanValidationError

from storefront.api.responses import envelope
from storefront.errors import StorefrontError

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, message: str, errors: list | None = None, code: str | None = None):
    body = envelope(message=message, success=False, errors=errors)
    if code:
        body["code"] = code
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, code=exc.code, error=exc.message)
    else:
        logger.info("Request rejected", path=request.url.path, code=exc.code, error=exc.message)
    return _error_response(exc.status_code, exc.message, exc.errors, exc.code)


async def protean_validation_handler(request: Request, exc: ProteanValidationError) -> JSONResponse:
    messages = exc.messages if isinstance(exc.messages, dict) else {"_entity": [str(exc.messages)]}
    errors = [
        {"field": name, "error": "; ".join(str(problem) for problem in problems)}
        for name, problems in messages.items()
    ]
    logger.info("Request rejected", path=request.url.path, code="VALIDATION_FAILED", errors=errors)
    return _error_response(400, "Validation failed", errors, "VALIDATION_FAILED")


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return _error_response(404, "Resource not found", code="NOT_FOUND")


async def expected_version_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    logger.warning("Concurrent write rejected", path=request.url.path, error=str(exc))
    return _error_response(409, "Stock changed during checkout, please retry", code="CONFLICT")


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(part) for part in error["loc"] if part != "body"), "error": error["msg"]}
        for error in exc.errors()
    ]
    return _error_response(400, "Invalid request", errors, "VALIDATION_FAILED")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path)
    return _error_response(500, "Internal server error", code="INTERNAL_ERROR")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(ProteanValidationError, protean_validation_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(ExpectedVersionError, expected_version_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
