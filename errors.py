"""
API error taxonomy.

Handlers raise these; the app renders them with ``render_api_error``.
Bodies that fail schema validation are answered as a plain 400.
An error without a message is sent with an empty body.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500

    def __init__(self, message: Optional[str] = None, key: str = "error", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.key = key
        if status_code is not None:
            self.status_code = status_code

    def body(self) -> Optional[Dict[str, Any]]:
        if self.message is None:
            return None
        return {self.key: self.message}


class ValidationError(ApiError):
    status_code = 400


class ConflictError(ApiError):
    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class AuthError(ApiError):
    status_code = 403


class InternalError(ApiError):
    status_code = 500


async def render_api_error(request: Request, exc: ApiError) -> Response:
    body = exc.body()
    if body is None:
        return Response(status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=body)


async def render_request_validation_error(request: Request, exc: RequestValidationError) -> Response:
    # wrong field types in a body count as missing or invalid fields
    logger.info("Rejected request body for %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})
