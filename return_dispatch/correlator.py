"""
Single-shot queries that turn API listings into run ids and step names.

Nothing here retries; polling policy lives in the dispatcher.
"""

import logging
from typing import List

from domain import GHJob, GHRun, PollQuery, branch_name_from_ref, is_tag_ref
from .errors import ProtocolError

logger = logging.getLogger(__name__)

RUNS_PER_PAGE = 10
BRANCH_RUNS_PER_PAGE = 5


def build_poll_query(workflow_id: int, ref: str) -> PollQuery:
    """
    Build the run listing filter for a workflow and git ref.

    The runs endpoint only accepts a short branch name, not a ref, so the
    branch is filtered only when one can be extracted from a branch ref.
    """
    branch = None
    if not is_tag_ref(ref):
        branch = branch_name_from_ref(ref)
        logger.debug("build_poll_query: Filtered branch name: %s", branch)

    if branch:
        return PollQuery(workflow_id=workflow_id, per_page=BRANCH_RUNS_PER_PAGE, branch=branch)
    return PollQuery(workflow_id=workflow_id, per_page=RUNS_PER_PAGE)


def unique_step_names(jobs: List[GHJob]) -> List[str]:
    """Flatten step names across jobs, keeping the first occurrence of each."""
    return list(dict.fromkeys(name for job in jobs for name in job.step_names))


class RunCorrelator:
    """Reads run ids and job steps for one repository."""

    def __init__(self, client, owner: str, repo: str):
        self.client = client
        self.owner = owner
        self.repo = repo

    async def find_run_ids(self, workflow_id: int, ref: str) -> List[int]:
        query = build_poll_query(workflow_id, ref)
        try:
            response = await self.client.list_workflow_runs(
                self.owner,
                self.repo,
                query.workflow_id,
                per_page=query.per_page,
                branch=query.branch,
            )
            if response.status != 200:
                raise ProtocolError("get Workflow runs", response.status, 200)
        except Exception as e:
            logger.error("find_run_ids: An unexpected error has occurred: %s", e)
            raise

        runs = [GHRun.from_dict(run) for run in response.data.get("workflow_runs", [])]
        run_ids = [run.id for run in runs]

        logger.debug(
            "Fetched Workflow Runs: repository=%s/%s branch=%s workflow_id=%s runs=%s",
            self.owner, self.repo, query.branch, workflow_id, run_ids,
        )
        return run_ids

    async def find_step_names(self, run_id: int) -> List[str]:
        try:
            response = await self.client.list_jobs_for_run(
                self.owner, self.repo, run_id, filter="latest"
            )
            if response.status != 200:
                raise ProtocolError("get Workflow Run Jobs", response.status, 200)
        except Exception as e:
            logger.error("find_step_names: An unexpected error has occurred: %s", e)
            raise

        jobs = [GHJob.from_dict(job) for job in response.data.get("jobs", [])]
        steps = unique_step_names(jobs)

        logger.debug(
            "Fetched Workflow Run Job Steps: repository=%s/%s run_id=%s jobs=%s steps=%s",
            self.owner, self.repo, run_id, [job.id for job in jobs], steps,
        )
        return steps
