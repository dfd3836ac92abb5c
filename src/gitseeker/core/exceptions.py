"""
Unified Exception Hierarchy for GitSeeker.

Exception Hierarchy:
    GitSeekerError (base)
    ├── APIError
    │   ├── RateLimitError
    │   ├── NetworkError
    │   └── ServiceUnavailableError
    ├── ValidationError
    │   ├── InvalidQueryError
    │   └── InvalidParameterError
    ├── ConfigurationError
    └── ChatError
        ├── ChatAbortedError
        ├── ChatBusyError
        └── EngineNotReadyError

Source adapters never let these escape to callers: transport and parse
failures degrade a source to an empty result. Only caller-input errors and
chat outcomes reach application code.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    WARNING = auto()  # Recoverable, can continue
    ERROR = auto()  # Failed for this call
    CRITICAL = auto()  # Cannot continue
    TRANSIENT = auto()  # Temporary upstream condition


class ErrorCategory(Enum):
    """Categories for error classification."""

    API = "api"
    VALIDATION = "validation"
    CONFIGURATION = "config"
    NETWORK = "network"
    CHAT = "chat"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Rich context for error messages."""

    operation: str | None = None
    input_value: Any = None
    suggestion: str | None = None
    retry_after: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class GitSeekerError(Exception):
    """
    Base exception for all GitSeeker errors.

    Provides:
    - Structured error context
    - Severity classification
    - Category for serialization
    """

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.API,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "category": self.category.value,
            "severity": self.severity.name.lower(),
        }
        if self.context.operation:
            result["operation"] = self.context.operation
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        if self.context.retry_after:
            result["retry_after_seconds"] = self.context.retry_after
        return result


# =============================================================================
# API Errors
# =============================================================================


class APIError(GitSeekerError):
    """Base class for upstream API errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.API,
        )


class RateLimitError(APIError):
    """Raised when an upstream registry signals rate limiting."""

    def __init__(
        self,
        message: str = "API rate limit exceeded",
        *,
        service: str | None = None,
        retry_after: float | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = replace(
            context or ErrorContext(),
            retry_after=retry_after,
        )
        if service:
            message = f"{service}: {message}"
        super().__init__(message, context=ctx)
        self.service = service
        self.severity = ErrorSeverity.TRANSIENT


class NetworkError(APIError):
    """Raised for network connectivity issues."""

    def __init__(
        self,
        message: str = "Network connection failed",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.category = ErrorCategory.NETWORK


class ServiceUnavailableError(APIError):
    """Raised when an upstream service answers with a 5xx status."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        *,
        service: str = "API",
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(f"{service}: {message}", context=context)
        self.severity = ErrorSeverity.TRANSIENT


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(GitSeekerError):
    """Base class for caller-input errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.VALIDATION,
        )


class InvalidQueryError(ValidationError):
    """Raised when a search query is empty or blank."""

    def __init__(
        self,
        query: str | None,
        reason: str = "Query cannot be empty",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = replace(
            context or ErrorContext(),
            input_value=query,
            suggestion=(context.suggestion if context else None) or "Provide a non-empty search query",
        )
        super().__init__(f"Invalid query: {reason}", context=ctx)


class InvalidParameterError(ValidationError):
    """Raised when a parameter value is invalid."""

    def __init__(
        self,
        param_name: str,
        value: Any,
        expected: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = replace(
            context or ErrorContext(),
            input_value=value,
            suggestion=f"Expected {expected}",
        )
        super().__init__(
            f"Invalid parameter '{param_name}': {value!r} (expected {expected})",
            context=ctx,
        )
        self.param_name = param_name


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(GitSeekerError):
    """Raised for configuration-related errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
        )


# =============================================================================
# Chat Errors
# =============================================================================


class ChatError(GitSeekerError):
    """Raised when a chat request fails."""

    def __init__(
        self,
        message: str,
        *,
        request_id: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.CHAT,
        )
        self.request_id = request_id


class ChatAbortedError(ChatError):
    """Raised for a chat request that was cancelled by the caller."""

    def __init__(self, request_id: str | None = None) -> None:
        super().__init__("Aborted", request_id=request_id)
        self.severity = ErrorSeverity.WARNING


class ChatBusyError(ChatError):
    """Raised when a chat is requested while another one is in flight."""

    def __init__(self) -> None:
        super().__init__("Already generating")


class EngineNotReadyError(ChatError):
    """Raised when chatting before the engine finished loading."""

    def __init__(self, status: str) -> None:
        super().__init__(f"Model not ready (status: {status})")
        self.status = status
