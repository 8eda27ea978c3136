"""Map exceptions to the ``{"error": ..., "details": ...}`` response shape."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.exceptions import HTTPException

from ..database.repository import DuplicateRecordError, RecordNotFoundError
from ..webhook import WebhookError

logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    body = {"error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


async def _http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content=exc.detail)
    return error_response(exc.status_code, str(exc.detail))


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, "Invalid request body", str(exc.errors()))


async def _not_found(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    return error_response(404, str(exc))


async def _duplicate(request: Request, exc: DuplicateRecordError) -> JSONResponse:
    return error_response(409, str(exc))


async def _webhook_error(request: Request, exc: WebhookError) -> JSONResponse:
    logger.error("Webhook error on %s: %s", request.url.path, exc)
    return error_response(500, "Webhook request failed", str(exc))


async def _storage_error(request: Request, exc: RedisError) -> JSONResponse:
    logger.error("Storage error on %s: %s", request.url.path, exc)
    return error_response(500, "Storage unavailable", str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, _http_exception)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(RecordNotFoundError, _not_found)
    app.add_exception_handler(DuplicateRecordError, _duplicate)
    app.add_exception_handler(WebhookError, _webhook_error)
    app.add_exception_handler(RedisError, _storage_error)
