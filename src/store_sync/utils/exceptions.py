"""
Custom exceptions for Store Sync.

Every failure on the ingestion path is expressed as one of these classes.
The webhook route maps each class to an HTTP status code, and the status
code is what the upstream sender uses to decide whether to redeliver.
"""

import enum
from typing import Optional, Dict, Any


class StoreSyncError(Exception):
    """Base exception for all Store Sync errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception with message and optional details.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(StoreSyncError):
    """Raised when a request is missing required input or is malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {}
        if field:
            details["field"] = field

        super().__init__(message, details)
        self.field = field


class AuthError(StoreSyncError):
    """Raised when a webhook signature does not match."""
    pass


class NotFoundError(StoreSyncError):
    """Raised when no active tenant is registered for a shop domain."""
    pass


class ConfigurationError(StoreSyncError):
    """Raised when configuration is invalid or a tenant cannot be used."""
    pass


class ProcessingError(StoreSyncError):
    """
    Raised when a handler cannot apply an authenticated event.

    Redelivering the same event would fail the same way, so the sender
    is told not to retry.
    """

    def __init__(self, message: str, topic: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        if topic:
            details["topic"] = topic

        super().__init__(message, details)
        self.topic = topic


class ErrorKind(str, enum.Enum):
    """Storage fault categories exposed by the persistence gateway."""
    TRANSIENT = "transient"
    CONSTRAINT = "constraint"
    INVALID_DATA = "invalid_data"
    UNKNOWN = "unknown"


class StoreError(StoreSyncError):
    """Raised by the persistence gateway for any storage fault."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNKNOWN,
                 operation: Optional[str] = None, table: Optional[str] = None):
        """
        Initialize store error.

        Args:
            message: Error message
            kind: Category of the underlying fault
            operation: Storage operation that failed
            table: Table involved in operation
        """
        details: Dict[str, Any] = {"kind": kind.value}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table

        super().__init__(message, details)
        self.kind = kind
        self.operation = operation
        self.table = table

    @property
    def is_transient(self) -> bool:
        return self.kind is ErrorKind.TRANSIENT


class TransientStoreError(StoreError):
    """Storage is temporarily unavailable; retrying is safe and expected."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 table: Optional[str] = None):
        super().__init__(message, ErrorKind.TRANSIENT, operation, table)
