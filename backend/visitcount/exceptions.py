"""
Visit Counter Backend: Exception Hierarchy
===========================================

What:  Application-specific exceptions for configuration, storage and
       response-encoding failures.
How:   Each exception carries a client-safe message and a context dict that
       is logged server-side only. Global handlers registered in main.py map
       them to JSON error responses.

Exception Hierarchy:
    VisitCounterError (base)
    ├── ConfigurationError          fatal at startup, never reaches a client
    ├── StorageError
    │   ├── StorageConnectionError  → 500 storage_unavailable
    │   └── StorageQueryError       → 500 storage_error
    └── SerializationError          → 500 serialization_error

Rejected origins (403) and unsupported verbs (405) are ordinary responses,
not exceptions.
"""

from typing import Any, Dict, Optional


class VisitCounterError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Error description, safe to return in an API response
        context:  Debug info (driver errors, operation names), logged only
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ConfigurationError(VisitCounterError):
    """
    Raised when a required setting is missing or inconsistent.

    When:    Application startup (lifespan), before storage is constructed.
    Effect:  Startup aborts; uvicorn exits with a non-zero status.
    """

    def __init__(
        self,
        message: str = "Configuration is invalid",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(VisitCounterError):
    """
    Base class for failures raised by a VisitStorage backend.

    Storage errors are never retried; they surface to the HTTP caller as a
    500 with a descriptive body.
    """

    error_code = "storage_error"

    def __init__(
        self,
        message: str = "A storage error occurred",
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(message=message, context=ctx)
        self.operation = operation


class StorageConnectionError(StorageError):
    """
    The pool or database is unreachable.

    When:  Connection refused, authentication failure, pool exhausted past
           its timeout, or the reachability check at construction failed.
    """

    error_code = "storage_unavailable"


class StorageQueryError(StorageError):
    """
    The database was reached but rejected the statement.

    When:  Missing table, constraint violation, malformed SQL.
    """

    error_code = "storage_error"


class SerializationError(VisitCounterError):
    """Raised when a success payload cannot be encoded into its response contract."""

    def __init__(
        self,
        message: str = "Failed to encode response",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
