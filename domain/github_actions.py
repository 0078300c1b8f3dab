"""
GitHub Actions domain entities used while dispatching and locating runs.
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional, Dict, Any, Union


@dataclass
class GHStep:
    """Represents an atomic unit of work within a Job."""

    name: str
    number: Optional[int] = None
    status: Optional[str] = None
    conclusion: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GHStep":
        """Deserialize from dictionary."""
        return cls(
            name=data["name"],
            number=data.get("number"),
            status=data.get("status"),
            conclusion=data.get("conclusion"),
        )


@dataclass
class GHJob:
    """Represents a set of steps executed on the same runner."""

    id: int
    name: Optional[str] = None
    status: Optional[str] = None
    conclusion: Optional[str] = None
    steps: List[GHStep] = field(default_factory=list)

    @property
    def step_names(self) -> List[str]:
        return [step.name for step in self.steps]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GHJob":
        """Deserialize from dictionary."""
        # Queued jobs report "steps": null
        steps = data.get("steps") or []
        return cls(
            id=data["id"],
            name=data.get("name"),
            status=data.get("status"),
            conclusion=data.get("conclusion"),
            steps=[GHStep.from_dict(step) for step in steps if step.get("name") is not None],
        )


@dataclass
class GHWorkflow:
    """Represents the definition of an automated workflow."""

    id: int
    path: str
    name: Optional[str] = None
    state: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GHWorkflow":
        """Deserialize from dictionary."""
        return cls(
            id=data["id"],
            path=data["path"],
            name=data.get("name"),
            state=data.get("state"),
        )


@dataclass
class GHRun:
    """Represents an instantiated execution of a Workflow."""

    id: int
    workflow_id: Optional[int] = None
    head_branch: Optional[str] = None
    event: Optional[str] = None
    status: Optional[str] = None
    conclusion: Optional[str] = None
    created_at: Optional[str] = None
    html_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GHRun":
        """Deserialize from dictionary."""
        return cls(
            id=data["id"],
            workflow_id=data.get("workflow_id"),
            head_branch=data.get("head_branch"),
            event=data.get("event"),
            status=data.get("status"),
            conclusion=data.get("conclusion"),
            created_at=data.get("created_at"),
            html_url=data.get("html_url"),
        )


@dataclass(frozen=True)
class WorkflowRef:
    """Identifies a workflow definition by numeric id or by a path pattern."""

    owner: str
    repo: str
    workflow: Union[int, str]

    @property
    def is_resolved(self) -> bool:
        return isinstance(self.workflow, int)

    def with_workflow(self, workflow: Union[int, str]) -> "WorkflowRef":
        """The same repository, pointing at another id or pattern."""
        return replace(self, workflow=workflow)


@dataclass(frozen=True)
class PollQuery:
    """Filter used when listing the runs of one workflow."""

    workflow_id: int
    per_page: int
    branch: Optional[str] = None


@dataclass(frozen=True)
class DispatchRequest:
    """A single workflow_dispatch call, built once and never reused."""

    workflow_ref: WorkflowRef
    ref: str
    distinct_id: str
    extra_inputs: Dict[str, str] = field(default_factory=dict)

    def inputs(self) -> Dict[str, str]:
        """Workflow inputs with the correlation token written last."""
        merged = dict(self.extra_inputs)
        merged["distinct_id"] = self.distinct_id
        return merged
