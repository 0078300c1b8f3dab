"""
Dispatch GitHub Actions workflows and find the run each dispatch created.
"""

from .client import ApiResponse, GitHubActionsClient
from .config import ActionConfig
from .correlator import RunCorrelator, build_poll_query, unique_step_names
from .dispatcher import DispatchResult, DispatchState, WorkflowDispatcher
from .errors import (
    ConfigError,
    DispatchError,
    ProtocolError,
    RetryTimeoutError,
    TransportError,
    WorkflowNotFoundError,
)
from .retry import retry_or_die

__all__ = [
    "ApiResponse",
    "GitHubActionsClient",
    "ActionConfig",
    "RunCorrelator",
    "build_poll_query",
    "unique_step_names",
    "DispatchResult",
    "DispatchState",
    "WorkflowDispatcher",
    "ConfigError",
    "DispatchError",
    "ProtocolError",
    "RetryTimeoutError",
    "TransportError",
    "WorkflowNotFoundError",
    "retry_or_die",
]
