from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.errors import InventoryError, NotFoundError, StoreError, ValidationError
from app.schemas import fail

logger = logging.getLogger(__name__)


def failure_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=fail(message).model_dump(by_alias=True, mode='json'))


def error_response(exc: InventoryError, *, store_message: str) -> JSONResponse:
    """Map a service failure to the wrapper; store failures get a generic message."""
    if isinstance(exc, NotFoundError):
        return failure_response(status.HTTP_404_NOT_FOUND, exc.message)
    if isinstance(exc, ValidationError):
        return failure_response(status.HTTP_400_BAD_REQUEST, exc.message)
    if isinstance(exc, StoreError):
        logger.error('%s: %s', store_message, exc.message)
    return failure_response(status.HTTP_500_INTERNAL_SERVER_ERROR, store_message)


def _first_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return 'Invalid request'
    first = errors[0]
    location = '.'.join(str(part) for part in first.get('loc', ()) if part != 'body')
    return f"{location}: {first.get('msg', 'invalid value')}" if location else first.get('msg', 'Invalid request')


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return failure_response(status.HTTP_400_BAD_REQUEST, _first_error_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        response = failure_response(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response
