"""
Dispatch a workflow and find the run it created.

The dispatch endpoint returns no run id, so the run is recovered by polling
the run listing and looking for the distinct_id input echoed in a step name.
"""

import asyncio
import json
import logging
import re
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from domain import DispatchRequest, GHRun, GHWorkflow, WorkflowRef
from .config import ActionConfig
from .correlator import RunCorrelator
from .errors import ConfigError, DispatchError, ProtocolError, RetryTimeoutError, WorkflowNotFoundError
from .retry import retry_or_die

logger = logging.getLogger(__name__)

WORKFLOW_FETCH_TIMEOUT_SECONDS = 60
WORKFLOW_JOB_STEPS_RETRY_SECONDS = 5


class DispatchState(str, Enum):
    IDLE = "idle"
    DISPATCHED = "dispatched"
    POLLING_FOR_RUN = "polling_for_run"
    RUN_FOUND = "run_found"
    POLLING_FOR_STEPS = "polling_for_steps"
    STEPS_FOUND = "steps_found"
    FAILED = "failed"


@dataclass
class DispatchResult:
    distinct_id: str
    run_id: int
    run_url: Optional[str] = None
    step_names: List[str] = field(default_factory=list)


class WorkflowDispatcher:
    """Triggers one workflow and tracks down the run it produced.

    Holds the state of a single operation; use one instance per concurrent run().
    """

    def __init__(self, client, config: ActionConfig):
        """
        Args:
            client: GitHubActionsClient or anything with the same async methods
            config: Target repository, workflow, ref and timeouts
        """
        self.client = client
        self.config = config
        self.correlator = RunCorrelator(client, config.owner, config.repo)
        self.state = DispatchState.IDLE

    def _transition(self, state: DispatchState) -> None:
        logger.debug("dispatch state: %s -> %s", self.state.value, state.value)
        self.state = state

    def _workflow_ref(self, workflow=None) -> WorkflowRef:
        workflow_ref = self.config.workflow_ref
        return workflow_ref if workflow is None else workflow_ref.with_workflow(workflow)

    async def resolve_workflow_id(self, workflow=None) -> int:
        """
        Resolve the configured workflow to a numeric id.

        The first workflow whose path matches the pattern as a regular
        expression wins, in whatever order GitHub lists them.
        """
        workflow_ref = self._workflow_ref(workflow)
        if workflow_ref.is_resolved:
            return workflow_ref.workflow

        try:
            pattern = re.compile(workflow_ref.workflow)
        except re.error as e:
            raise ConfigError(f"Invalid workflow pattern {workflow_ref.workflow!r}: {e}") from e

        try:
            response = await self.client.list_workflows(workflow_ref.owner, workflow_ref.repo)
            if response.status != 200:
                raise ProtocolError("get workflows", response.status, 200)

            workflows = [GHWorkflow.from_dict(w) for w in response.data.get("workflows", [])]
            for candidate in workflows:
                if pattern.search(candidate.path):
                    return candidate.id

            raise WorkflowNotFoundError(workflow_ref.workflow)
        except Exception as e:
            logger.error("resolve_workflow_id: An unexpected error has occurred: %s", e)
            raise

    async def dispatch(self, distinct_id: str, workflow=None) -> None:
        request = DispatchRequest(
            workflow_ref=self._workflow_ref(workflow),
            ref=self.config.ref,
            distinct_id=distinct_id,
            extra_inputs=self.config.workflow_inputs,
        )
        workflow_ref = request.workflow_ref

        try:
            response = await self.client.dispatch_workflow(
                workflow_ref.owner, workflow_ref.repo, workflow_ref.workflow, request.ref, request.inputs()
            )
            if response.status != 204:
                raise ProtocolError("dispatch action", response.status, 204)
        except Exception as e:
            logger.error("dispatch: An unexpected error has occurred: %s", e)
            raise

        logger.info(
            "Successfully dispatched workflow: repository=%s/%s branch=%s workflow=%s inputs=%s distinct_id=%s",
            workflow_ref.owner, workflow_ref.repo, request.ref, workflow_ref.workflow,
            json.dumps(request.extra_inputs) if request.extra_inputs else None, distinct_id,
        )

    async def await_run_id(self, workflow_id: int, ref: Optional[str] = None, timeout: float = WORKFLOW_FETCH_TIMEOUT_SECONDS) -> int:
        """Poll until the workflow has at least one run and return the newest id."""
        ref = self.config.ref if ref is None else ref
        run_ids = await retry_or_die(
            lambda: self.correlator.find_run_ids(workflow_id, ref), timeout
        )
        return run_ids[0]

    async def await_step_names(self, run_id: int, timeout: float = WORKFLOW_FETCH_TIMEOUT_SECONDS) -> List[str]:
        return list(await retry_or_die(lambda: self.correlator.find_step_names(run_id), timeout))

    async def get_run_url(self, run_id: int) -> Optional[str]:
        try:
            response = await self.client.get_workflow_run(self.config.owner, self.config.repo, run_id)
            if response.status != 200:
                raise ProtocolError("get Workflow Run", response.status, 200)
        except Exception as e:
            logger.error("get_run_url: An unexpected error has occurred: %s", e)
            raise
        return GHRun.from_dict(response.data).html_url

    async def find_dispatched_run(
        self, workflow_id: int, distinct_id: str, timeout: Optional[float] = None
    ) -> Tuple[int, List[str]]:
        """
        Find the run whose steps mention ``distinct_id``.

        Candidate runs are the most recent ones for the workflow and branch;
        the first, in listing order, with a step name containing the id wins.

        Returns:
            (run_id, step_names) of the matching run

        Raises:
            RetryTimeoutError: If no run matched within ``timeout`` seconds
        """
        timeout = self.config.workflow_timeout_seconds if timeout is None else timeout
        start = time.monotonic()
        attempt = 0

        while True:
            remaining = timeout - (time.monotonic() - start)
            if remaining <= 0:
                break
            attempt += 1

            self._transition(DispatchState.POLLING_FOR_RUN)
            try:
                run_ids = await retry_or_die(
                    lambda: self.correlator.find_run_ids(workflow_id, self.config.ref),
                    min(WORKFLOW_FETCH_TIMEOUT_SECONDS, remaining),
                )
            except RetryTimeoutError as e:
                raise RetryTimeoutError(timeout, "Timeout exceeded while attempting to get Run ID") from e
            self._transition(DispatchState.RUN_FOUND)

            self._transition(DispatchState.POLLING_FOR_STEPS)
            for run_id in run_ids:
                steps = await self.correlator.find_step_names(run_id)
                if any(distinct_id in step for step in steps):
                    logger.debug("Found run %s for distinct_id %s on attempt %d", run_id, distinct_id, attempt)
                    return run_id, steps

            logger.debug("Exhausted searching IDs in known runs, attempt %d", attempt)
            await asyncio.sleep(WORKFLOW_JOB_STEPS_RETRY_SECONDS)

        raise RetryTimeoutError(timeout, "Timeout exceeded while attempting to get Run ID")

    async def run(self, distinct_id: Optional[str] = None) -> DispatchResult:
        """
        Dispatch the configured workflow and wait for its run.

        Not idempotent: calling this again dispatches again.
        """
        distinct_id = distinct_id or str(uuid.uuid4())
        self.state = DispatchState.IDLE
        try:
            workflow_id = await self.resolve_workflow_id()
            await self.dispatch(distinct_id, workflow_id)
            self._transition(DispatchState.DISPATCHED)

            run_id, steps = await self.find_dispatched_run(workflow_id, distinct_id)
            run_url = await self.get_run_url(run_id)
            self._transition(DispatchState.STEPS_FOUND)
        except DispatchError as e:
            e.state = self.state
            self._transition(DispatchState.FAILED)
            raise

        return DispatchResult(distinct_id=distinct_id, run_id=run_id, run_url=run_url, step_names=steps)
