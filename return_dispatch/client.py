"""
GitHub Actions REST client.

Only the endpoints needed to dispatch a workflow and find the run it created.
Status codes are returned to the caller untouched; callers decide what counts
as success.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import requests

from .errors import TransportError

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"


@dataclass
class ApiResponse:
    """Status code plus decoded JSON body (empty for 204 responses)."""

    status: int
    data: Dict[str, Any] = field(default_factory=dict)


class GitHubActionsClient:
    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = GITHUB_API_URL,
        session: Optional[requests.Session] = None,
        request_timeout: float = 30.0,
    ):
        """
        Initialize the client with a GitHub token (optional but recommended)

        Args:
            token: Personal Access Token or GITHUB_TOKEN
            base_url: API root, override for GitHub Enterprise
            session: requests session to reuse, a new one is created otherwise
            request_timeout: Seconds before a single HTTP request is abandoned
        """
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self.session = session or requests.Session()
        self.headers = {
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': '2022-11-28'
        }

        if token:
            self.headers['Authorization'] = f'Bearer {token}'

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> ApiResponse:
        url = f"{self.base_url}{path}"

        try:
            response = self.session.request(
                method,
                url,
                headers=self.headers,
                params=params,
                json=json_body,
                timeout=self.request_timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        if response.status_code == 204 or not response.content:
            return ApiResponse(status=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON response from {method} {url}: {e}") from e

        return ApiResponse(status=response.status_code, data=data if isinstance(data, dict) else {})

    async def _call(self, *args, **kwargs) -> ApiResponse:
        return await asyncio.to_thread(self._request, *args, **kwargs)

    async def dispatch_workflow(
        self,
        owner: str,
        repo: str,
        workflow_id: Union[int, str],
        ref: str,
        inputs: Dict[str, str],
    ) -> ApiResponse:
        """Create a workflow_dispatch event. GitHub answers 204 on success."""
        return await self._call(
            "POST",
            f"/repos/{owner}/{repo}/actions/workflows/{workflow_id}/dispatches",
            json_body={"ref": ref, "inputs": inputs},
        )

    async def list_workflows(self, owner: str, repo: str, per_page: int = 100) -> ApiResponse:
        return await self._call(
            "GET",
            f"/repos/{owner}/{repo}/actions/workflows",
            params={'per_page': per_page},
        )

    async def list_workflow_runs(
        self,
        owner: str,
        repo: str,
        workflow_id: int,
        per_page: int,
        branch: Optional[str] = None,
    ) -> ApiResponse:
        """
        List the most recent runs of one workflow

        Args:
            owner: Repository owner
            repo: Repository name
            workflow_id: ID of the workflow
            per_page: Number of runs to return, newest first
            branch: Short branch name to filter on (the endpoint rejects full refs)

        Returns:
            ApiResponse whose data holds 'workflow_runs'
        """
        params: Dict[str, Any] = {'per_page': per_page}
        if branch:
            params['branch'] = branch

        return await self._call(
            "GET",
            f"/repos/{owner}/{repo}/actions/workflows/{workflow_id}/runs",
            params=params,
        )

    async def list_jobs_for_run(
        self, owner: str, repo: str, run_id: int, filter: str = "latest"
    ) -> ApiResponse:
        return await self._call(
            "GET",
            f"/repos/{owner}/{repo}/actions/runs/{run_id}/jobs",
            params={'filter': filter},
        )

    async def get_workflow_run(self, owner: str, repo: str, run_id: int) -> ApiResponse:
        return await self._call("GET", f"/repos/{owner}/{repo}/actions/runs/{run_id}")

    def close(self) -> None:
        self.session.close()
