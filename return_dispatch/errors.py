"""Dispatch-layer exceptions. Typed, so callers branch on kind and not on message text."""

from typing import Optional


class DispatchError(Exception):
    """Base for all dispatch-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        # Set by WorkflowDispatcher.run() to the state the operation failed in
        self.state = None
        super().__init__(message)


class ProtocolError(DispatchError):
    """Raised when an API call answers with an unexpected status code."""

    def __init__(self, operation: str, status: int, expected: int) -> None:
        self.operation = operation
        self.status = status
        self.expected = expected
        super().__init__(
            f"Failed to {operation}, expected {expected} but received {status}"
        )


class WorkflowNotFoundError(DispatchError):
    """Raised when no workflow path matches the configured pattern."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        super().__init__(f"Unable to find ID for Workflow: {pattern}")


class RetryTimeoutError(DispatchError, TimeoutError):
    """Raised when polling gives up. The outcome is unknown, not empty."""

    def __init__(self, timeout: float, message: Optional[str] = None) -> None:
        self.timeout = timeout
        super().__init__(message or f"Timed out after {timeout}s while attempting to fetch data")


class TransportError(DispatchError):
    """Raised when a request cannot be sent or its body cannot be decoded."""


class ConfigError(DispatchError):
    """Raised when configuration is missing or invalid."""
