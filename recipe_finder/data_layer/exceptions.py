"""Structured error types for the recipe finder backend.

Every failure that crosses a module boundary is raised as a subclass of
:class:`RecipeFinderError`, carrying a machine-readable code, a message and
a context dictionary.

ERROR TAXONOMY:
- RecordNotFoundError: a persisted record is missing, corrupt or stale.
  Inside the lookup chain this is never raised; it collapses to a cache miss.
- ProviderError: network failure, timeout or non-2xx response from the
  external recipe API. Propagated to the caller, never retried.
- PersistenceError: the storage directory could not be read or written.
  Swallowed (and logged) after a successful provider fetch, raised from
  explicit maintenance operations.
- ConfigurationError: required settings are missing or invalid.
- InvalidQueryError: a query cannot be mapped onto a storage key.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Codes for every error raised by the backend."""

    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    PROVIDER_FAILURE = "PROVIDER_FAILURE"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVALID_QUERY = "INVALID_QUERY"


class RecipeFinderError(Exception):
    """Base exception for all recipe finder errors.

    Attributes:
        code: ErrorCode identifying the error type
        message: Human-readable error description
        context: Dictionary of relevant error context (query, filename, etc.)
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.context = context or {}
        super().__init__(f"[{code.value}] {message}")

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code!r}, "
            f"message={self.message!r}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a JSON-serializable dictionary.

        Returns:
            Dictionary with code, message and context
        """
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context,
        }


class RecordNotFoundError(RecipeFinderError):
    """Raised when a persisted record is absent, unreadable or stale."""

    def __init__(self, key: str, filename: str, reason: str = "missing"):
        self.key = key
        self.filename = filename
        self.reason = reason
        super().__init__(
            code=ErrorCode.RECORD_NOT_FOUND,
            message=f"No fresh record for '{key}' in {filename} ({reason})",
            context={"key": key, "filename": filename, "reason": reason}
        )


class ProviderError(RecipeFinderError):
    """Raised when the external recipe API call fails.

    Attributes:
        error_code: Provider-level code (TIMEOUT, CONNECTION_ERROR,
            RATE_LIMITED, NOT_FOUND, API_ERROR, INVALID_RESPONSE)
        status_code: HTTP status of the response, if one was received
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        status_code: Optional[int] = None,
        endpoint: str = ""
    ):
        self.error_code = error_code
        self.status_code = status_code
        self.endpoint = endpoint
        context: Dict[str, Any] = {"error_code": error_code}
        if status_code is not None:
            context["status_code"] = status_code
        if endpoint:
            context["endpoint"] = endpoint
        super().__init__(
            code=ErrorCode.PROVIDER_FAILURE,
            message=message,
            context=context
        )


class PersistenceError(RecipeFinderError):
    """Raised when the storage directory cannot be read or written."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(
            code=ErrorCode.PERSISTENCE_FAILURE,
            message=message,
            context={"path": path} if path else {}
        )


class ConfigurationError(RecipeFinderError):
    """Raised when required configuration is missing or invalid."""

    def __init__(self, setting: str, message: str):
        self.setting = setting
        super().__init__(
            code=ErrorCode.CONFIGURATION_ERROR,
            message=message,
            context={"setting": setting}
        )


class InvalidQueryError(RecipeFinderError):
    """Raised when a query cannot be turned into a storage key."""

    def __init__(self, query: str, message: str):
        self.query = query
        super().__init__(
            code=ErrorCode.INVALID_QUERY,
            message=message,
            context={"query": query}
        )
