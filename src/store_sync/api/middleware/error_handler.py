"""
Global error handling middleware and the error -> status code table.

The webhook sender reacts only to status codes: 5xx means "redeliver",
4xx means "give up". The table below is therefore the retry contract.
"""

import time
from typing import List, Tuple, Type

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from store_sync.utils.exceptions import (
    AuthError,
    ConfigurationError,
    NotFoundError,
    ProcessingError,
    StoreError,
    StoreSyncError,
    TransientStoreError,
    ValidationError,
)
from store_sync.utils.logger import get_logger

logger = get_logger(__name__)

# Most specific classes first
STATUS_BY_ERROR: List[Tuple[Type[StoreSyncError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (ProcessingError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (TransientStoreError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (StoreError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]

# Response bodies never carry error details
PUBLIC_MESSAGES = {
    status.HTTP_400_BAD_REQUEST: "Bad Request",
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
    status.HTTP_404_NOT_FOUND: "Not Found",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "Unprocessable Entity",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def status_for_error(error: StoreSyncError) -> int:
    """HTTP status code for an application error."""
    for error_class, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(error: StoreSyncError) -> JSONResponse:
    """Generic JSON error response for an application error."""
    status_code = status_for_error(error)
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "error": PUBLIC_MESSAGES[status_code]},
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware for consistent error handling and request logging.
    """

    async def dispatch(self, request: Request, call_next):
        """Process request with error handling."""
        start_time = time.time()

        try:
            response = await call_next(request)

            duration = time.time() - start_time
            logger.info(
                f"{request.method} {request.url.path} - {response.status_code} - {duration:.3f}s"
            )

            return response

        except StoreSyncError as e:
            logger.error(f"Unhandled application error on {request.url.path}: {e}")
            return error_response(e)

        except Exception as e:
            logger.error(f"Unhandled exception: {e}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"status": "error", "error": "Internal Server Error"},
            )
