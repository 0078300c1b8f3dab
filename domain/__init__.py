"""
Domain entities for dispatching GitHub Actions workflows and locating their runs.
"""

from .github_actions import (
    GHStep,
    GHJob,
    GHRun,
    GHWorkflow,
    WorkflowRef,
    PollQuery,
    DispatchRequest,
)
from .refs import is_tag_ref, branch_name_from_ref

__all__ = [
    # GitHub Actions entities
    "GHStep",
    "GHJob",
    "GHRun",
    "GHWorkflow",
    # Request-scoped values
    "WorkflowRef",
    "PollQuery",
    "DispatchRequest",
    # Ref classification
    "is_tag_ref",
    "branch_name_from_ref",
]
