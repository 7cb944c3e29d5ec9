"""BuildScope exception hierarchy.

All BuildScope-specific exceptions inherit from BuildScopeError,
enabling structured error handling and cleaner catch clauses.
"""


class BuildScopeError(Exception):
    """Base exception for all BuildScope errors."""

    def __init__(self, message: str = "", *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class ProviderError(BuildScopeError):
    """Error communicating with the language model provider."""

    def __init__(self, message: str = "", *, retryable: bool = True) -> None:
        super().__init__(message, retryable=retryable)


class ResponseShapeError(BuildScopeError):
    """Model output could not be parsed into the expected JSON shape."""


class OperationInFlightError(BuildScopeError):
    """The same analysis is already running for this session."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"operation already in flight: {operation}")
        self.operation = operation


class ConfigError(BuildScopeError, ValueError):
    """Invalid or missing configuration."""
