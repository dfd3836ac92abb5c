"""
Core module for GitSeeker.

Provides:
- Unified exception hierarchy
- Async utilities for concurrent source calls
- Process-wide configuration
"""

from .exceptions import (
    # Base
    GitSeekerError,
    ErrorContext,
    ErrorSeverity,
    ErrorCategory,
    # API errors
    APIError,
    RateLimitError,
    NetworkError,
    ServiceUnavailableError,
    # Validation errors
    ValidationError,
    InvalidQueryError,
    InvalidParameterError,
    # Configuration errors
    ConfigurationError,
    # Chat errors
    ChatError,
    ChatAbortedError,
    ChatBusyError,
    EngineNotReadyError,
)
from .async_utils import gather_settled, sleep_between
from .config import configure, configure_logging, get_config, reset_config

__all__ = [
    "GitSeekerError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "APIError",
    "RateLimitError",
    "NetworkError",
    "ServiceUnavailableError",
    "ValidationError",
    "InvalidQueryError",
    "InvalidParameterError",
    "ConfigurationError",
    "ChatError",
    "ChatAbortedError",
    "ChatBusyError",
    "EngineNotReadyError",
    "gather_settled",
    "sleep_between",
    "configure",
    "configure_logging",
    "get_config",
    "reset_config",
]
