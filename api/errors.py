"""
API Error Handling

Every error leaves the API as ``{"ok": false, "error": {code, message,
details}}``. Domain exceptions keep their OracleException code; the HTTP
status comes from ORACLE_STATUS_CODES.
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from api.models.responses import ErrorDetail, ErrorResponse
from core.schemas.errors import ErrorCodes, OracleException

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Request-level error raised by the routes themselves."""

    code = "API_ERROR"
    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidRequestError(APIError):
    code = "INVALID_REQUEST"


class NotFoundError(APIError):
    code = "NOT_FOUND"
    status_code = 404


# anything unlisted is a 500
ORACLE_STATUS_CODES: dict[str, int] = {
    ErrorCodes.MARKET_NOT_FOUND: 404,
    ErrorCodes.MARKET_EXISTS: 409,
    ErrorCodes.RESOLUTION_IN_PROGRESS: 409,
    ErrorCodes.MARKET_ALREADY_RESOLVED: 409,
    ErrorCodes.INVALID_TRANSITION: 409,
    ErrorCodes.LEDGER_ALREADY_RESOLVED: 409,
    ErrorCodes.LEDGER_ALREADY_DISBURSED: 409,
    ErrorCodes.LEDGER_MARKET_NOT_OPEN: 409,
    ErrorCodes.LEDGER_UNAUTHORIZED: 403,
    ErrorCodes.SCHEMA_VALIDATION_ERROR: 400,
    ErrorCodes.PARSE_ERROR: 422,
    ErrorCodes.QUOTA_EXCEEDED: 429,
    ErrorCodes.GENERATION_FAILED: 502,
    ErrorCodes.GENERATION_EMPTY: 502,
    ErrorCodes.LEDGER_ERROR: 502,
    ErrorCodes.CONTENT_STORE_ERROR: 502,
}


def error_response(status_code: int, code: str, message: str, details: dict[str, Any] | None = None) -> JSONResponse:
    body = ErrorResponse(ok=False, error=ErrorDetail(code=code, message=message, details=details or {}))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


async def oracle_error_handler(request: Request, exc: OracleException) -> JSONResponse:
    status_code = ORACLE_STATUS_CODES.get(exc.code, 500)
    if status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return error_response(status_code, exc.code, exc.message, exc.details)


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(
        500, "INTERNAL_ERROR", "An unexpected error occurred", {"type": type(exc).__name__}
    )
