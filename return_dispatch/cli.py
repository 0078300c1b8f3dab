#!/usr/bin/env python3
"""
Dispatch a GitHub Actions workflow and print the ID and URL of the run it created.

The dispatched workflow must echo its ``distinct_id`` input in a step name,
for example:

    jobs:
      build:
        steps:
          - name: echo distinct ID ${{ github.event.inputs.distinct_id }}
            run: echo ${{ github.event.inputs.distinct_id }}

Usage (example):

python -m return_dispatch.cli --owner octo --repo app --workflow deploy.yml --ref refs/heads/main --token TOKEN

"""

import argparse
import asyncio
import os
import sys
from typing import Optional, Sequence

from .client import GitHubActionsClient
from .config import ActionConfig
from .dispatcher import DispatchResult, WorkflowDispatcher
from .errors import ConfigError, DispatchError
from .logging_config import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Dispatch a GitHub Actions workflow and return the run it created'
    )
    parser.add_argument('--config', help='YAML file with owner, repo, ref, workflow, ...')
    parser.add_argument('--from-env', action='store_true',
                        help='Read INPUT_* variables like a GitHub Action does; '
                             'cannot be combined with --config or the other config flags')
    parser.add_argument('--owner', help='Repository owner')
    parser.add_argument('--repo', help='Repository name')
    parser.add_argument('--workflow', help='Workflow ID or a pattern matching its file path')
    parser.add_argument('--ref', help='Git ref to run against, e.g. refs/heads/main')
    parser.add_argument('--token', help='GitHub token (default: token from --config, then $GITHUB_TOKEN)')
    parser.add_argument('--inputs', dest='workflow_inputs',
                        help='Extra workflow inputs as a JSON object of strings')
    parser.add_argument('--timeout', dest='workflow_timeout_seconds', type=int,
                        help='Seconds to wait for the run to appear (default: 300)')
    parser.add_argument('--distinct-id', help='Correlation ID to send (default: random UUID)')
    parser.add_argument('--log-level', default='INFO', help='Logging level (default: INFO)')
    return parser


def load_config(args: argparse.Namespace) -> ActionConfig:
    overrides = {
        'owner': args.owner,
        'repo': args.repo,
        'workflow': args.workflow,
        'ref': args.ref,
        'token': args.token,
        'workflow_inputs': args.workflow_inputs,
        'workflow_timeout_seconds': args.workflow_timeout_seconds,
    }
    if args.from_env:
        given = [key for key, value in overrides.items() if value is not None]
        if args.config:
            given.insert(0, 'config')
        if given:
            raise ConfigError(f"--from-env cannot be combined with: {', '.join(given)}")
        return ActionConfig.from_env()
    if args.config:
        return ActionConfig.from_yaml(args.config, overrides)
    if not overrides['token']:
        overrides['token'] = os.getenv('GITHUB_TOKEN')
    return ActionConfig.from_dict(overrides)


def write_outputs(result: DispatchResult, output_path: Optional[str] = None) -> None:
    """Print run_id and run_url, and append them to $GITHUB_OUTPUT when set."""
    print(f"run_id={result.run_id}")
    print(f"run_url={result.run_url}")

    output_path = output_path or os.getenv('GITHUB_OUTPUT')
    if output_path:
        with open(output_path, 'a', encoding='utf-8') as f:
            f.write(f"run_id={result.run_id}\n")
            f.write(f"run_url={result.run_url}\n")


async def dispatch_and_wait(config: ActionConfig, distinct_id: Optional[str] = None) -> DispatchResult:
    client = GitHubActionsClient(token=config.token)
    try:
        return await WorkflowDispatcher(client, config).run(distinct_id)
    finally:
        client.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = load_config(args)
        result = asyncio.run(dispatch_and_wait(config, args.distinct_id))
    except DispatchError as e:
        state = f" (while {e.state.value})" if e.state else ""
        print(f"Error{state}: {e.message}", file=sys.stderr)
        return 1

    write_outputs(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
