"""
FastAPI middleware components.
"""

from .error_handler import ErrorHandlerMiddleware, error_response, status_for_error

__all__ = [
    "ErrorHandlerMiddleware",
    "error_response",
    "status_for_error",
]
