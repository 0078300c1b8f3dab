"""Fixtures: in-memory Actions API, fake clock, and a ready config."""

from types import SimpleNamespace

import pytest

from return_dispatch import dispatcher as dispatcher_module
from return_dispatch import retry as retry_module
from return_dispatch.client import ApiResponse
from return_dispatch.config import ActionConfig


class FakeActionsClient:
    """In-memory stand-in for GitHubActionsClient."""

    def __init__(self):
        self.workflows = []
        # Each list_workflow_runs call pops the next batch; the last one repeats
        self.run_batches = [[]]
        self.jobs = {}
        self.run_urls = {}
        self.statuses = {}
        self.calls = []

    def _status(self, operation: str, default: int) -> int:
        return self.statuses.get(operation, default)

    async def dispatch_workflow(self, owner, repo, workflow_id, ref, inputs):
        self.calls.append(("dispatch_workflow", workflow_id, ref, dict(inputs)))
        return ApiResponse(status=self._status("dispatch_workflow", 204))

    async def list_workflows(self, owner, repo, per_page=100):
        self.calls.append(("list_workflows",))
        return ApiResponse(
            status=self._status("list_workflows", 200),
            data={"workflows": list(self.workflows)},
        )

    async def list_workflow_runs(self, owner, repo, workflow_id, per_page, branch=None):
        self.calls.append(("list_workflow_runs", workflow_id, per_page, branch))
        batch = self.run_batches.pop(0) if len(self.run_batches) > 1 else self.run_batches[0]
        return ApiResponse(
            status=self._status("list_workflow_runs", 200),
            data={"workflow_runs": [{"id": run_id} for run_id in batch]},
        )

    async def list_jobs_for_run(self, owner, repo, run_id, filter="latest"):
        self.calls.append(("list_jobs_for_run", run_id, filter))
        jobs = [
            {"id": run_id * 10 + i, "steps": [{"name": name} for name in steps]}
            for i, steps in enumerate(self.jobs.get(run_id, []))
        ]
        return ApiResponse(status=self._status("list_jobs_for_run", 200), data={"jobs": jobs})

    async def get_workflow_run(self, owner, repo, run_id):
        self.calls.append(("get_workflow_run", run_id))
        return ApiResponse(
            status=self._status("get_workflow_run", 200),
            data={"id": run_id, "html_url": self.run_urls.get(run_id)},
        )

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)


class FakeClock:
    """Monotonic clock that only moves when something sleeps."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_client():
    return FakeActionsClient()


@pytest.fixture
def clock(monkeypatch):
    clock = FakeClock()
    fake_time = SimpleNamespace(monotonic=clock.monotonic)
    fake_asyncio = SimpleNamespace(sleep=clock.sleep)
    for module in (retry_module, dispatcher_module):
        monkeypatch.setattr(module, "time", fake_time)
        monkeypatch.setattr(module, "asyncio", fake_asyncio)
    return clock


@pytest.fixture
def config():
    return ActionConfig(
        owner="octo",
        repo="app",
        ref="refs/heads/main",
        workflow="deploy",
        token="secret",
        workflow_inputs={"environment": "staging"},
        workflow_timeout_seconds=30,
    )
