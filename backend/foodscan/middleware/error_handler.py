"""
Error Handler Middleware

FastAPI middleware that catches all unhandled exceptions,
logs them with request context and returns a generic 500.
"""

import logging
import uuid
from typing import Callable
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware that catches all unhandled exceptions and logs them.

    HTTPExceptions raised by endpoints are already turned into responses
    by FastAPI and never reach this layer.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as exc:
            # Error ID lets support match a client report with the log line
            error_id = uuid.uuid4()
            logger.critical(
                f"[Unhandled] {request.method} {request.url.path} error_id={error_id}: {exc}",
                exc_info=True,
            )

            return JSONResponse(
                status_code=500,
                content={
                    "detail": "An internal error occurred.",
                    "error_id": str(error_id)
                }
            )
