"""Response envelope and exception handlers.

Every response body is one of:
- { "success": true, "data": ... }
- { "success": false, "error": { "code": "E_...", "message": "...", "request_id": "..." } }

The CMS surfaces error.message to the admin verbatim, so messages are written
for people, and 5xx messages never include exception details.
"""

import json
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from kiosk.errors import ApiError, ApiErrorCode
from kiosk.logging import get_logger, get_request_id

logger = get_logger(__name__)

# Starlette-raised statuses that have no ApiErrorCode of their own
HTTP_STATUS_TO_CODE: dict[int, ApiErrorCode] = {
    400: ApiErrorCode.E_INVALID_REQUEST,
    401: ApiErrorCode.E_UNAUTHENTICATED,
    404: ApiErrorCode.E_NOT_FOUND,
    405: ApiErrorCode.E_INVALID_REQUEST,
    422: ApiErrorCode.E_INVALID_REQUEST,
}


def success_response(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def error_response(
    code: ApiErrorCode, message: str, request_id: str | None = None
) -> dict[str, Any]:
    """Build an error envelope.

    request_id defaults to the id of the request being handled, when there is one.
    """
    error = {"code": code.value, "message": message}
    request_id = request_id or get_request_id()
    if request_id:
        error["request_id"] = request_id
    return {"success": False, "error": error}


def _error_json(status_code: int, code: ApiErrorCode, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_response(code, message))


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("api_error", code=exc.code.value, message=exc.message)
    return _error_json(exc.status_code, exc.code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap routing errors (unknown path, wrong method) in the envelope."""
    code = HTTP_STATUS_TO_CODE.get(exc.status_code, ApiErrorCode.E_INTERNAL)
    return _error_json(exc.status_code, code, str(exc.detail) if exc.detail else "Request failed")


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render schema violations as 400 E_INVALID_REQUEST.

    Field-level details are logged, not returned.
    """
    logger.info(
        "request_validation_failed",
        fields=[".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()],
    )
    return _error_json(400, ApiErrorCode.E_INVALID_REQUEST, "Invalid request body")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", error_type=type(exc).__name__)
    return _error_json(500, ApiErrorCode.E_INTERNAL, "Internal server error")


async def reject_malformed_json(request: Request, call_next):
    """HTTP middleware: answer unparseable JSON bodies before routing."""
    if request.method in ("POST", "PUT", "PATCH") and "application/json" in request.headers.get(
        "content-type", ""
    ):
        body = await request.body()
        if body:
            try:
                json.loads(body)
            except json.JSONDecodeError:
                return _error_json(400, ApiErrorCode.E_INVALID_REQUEST, "Malformed JSON body")
    return await call_next(request)


def register_exception_handlers(app: FastAPI) -> None:
    """Install every envelope-producing handler on `app`."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    app.middleware("http")(reject_malformed_json)
