"""
Configuration for a dispatch: where, what, and how long to wait.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from domain import WorkflowRef
from .errors import ConfigError

DEFAULT_WORKFLOW_TIMEOUT_SECONDS = 300

REQUIRED_KEYS = ("owner", "repo", "ref", "workflow", "token")


def parse_workflow(value: Union[int, str]) -> Union[int, str]:
    """Numeric workflows are ids, anything else is a path pattern."""
    if isinstance(value, int):
        return value
    value = str(value).strip()
    if value.isdigit():
        return int(value)
    return value


def parse_workflow_inputs(value: Union[None, str, Mapping[str, Any]]) -> Dict[str, str]:
    """
    Parse extra workflow inputs

    Args:
        value: JSON object string, mapping, or None

    Returns:
        Dict of input name to string value

    Raises:
        ConfigError: If the value is not an object or a value is not a string
    """
    if value is None or value == "":
        return {}

    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ConfigError(f"workflow_inputs is not valid JSON: {e}") from e

    if not isinstance(value, Mapping):
        raise ConfigError("workflow_inputs must be a JSON object")

    inputs = {}
    for key, item in value.items():
        if not isinstance(item, str):
            raise ConfigError(
                f"workflow_inputs values must be strings, '{key}' is {type(item).__name__}"
            )
        inputs[str(key)] = item
    return inputs


def parse_timeout(value: Union[None, int, str]) -> int:
    if value is None or value == "":
        return DEFAULT_WORKFLOW_TIMEOUT_SECONDS
    try:
        timeout = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"workflow_timeout_seconds must be an integer, got {value!r}") from e
    if timeout <= 0:
        raise ConfigError(f"workflow_timeout_seconds must be positive, got {timeout}")
    return timeout


@dataclass
class ActionConfig:
    owner: str
    repo: str
    ref: str
    workflow: Union[int, str]
    token: str = field(repr=False)
    workflow_inputs: Dict[str, str] = field(default_factory=dict)
    workflow_timeout_seconds: int = DEFAULT_WORKFLOW_TIMEOUT_SECONDS

    @property
    def workflow_ref(self) -> WorkflowRef:
        return WorkflowRef(owner=self.owner, repo=self.repo, workflow=self.workflow)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ActionConfig":
        """Build a config from a plain mapping, validating every field."""
        missing = [key for key in REQUIRED_KEYS if data.get(key) in (None, "")]
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

        return cls(
            owner=str(data["owner"]),
            repo=str(data["repo"]),
            ref=str(data["ref"]),
            workflow=parse_workflow(data["workflow"]),
            token=str(data["token"]),
            workflow_inputs=parse_workflow_inputs(data.get("workflow_inputs")),
            workflow_timeout_seconds=parse_timeout(data.get("workflow_timeout_seconds")),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ActionConfig":
        """Read GitHub Actions style INPUT_* variables."""
        environ = os.environ if environ is None else environ
        data = {
            key: environ.get(f"INPUT_{key.upper()}")
            for key in REQUIRED_KEYS + ("workflow_inputs", "workflow_timeout_seconds")
        }
        if not data["token"]:
            data["token"] = environ.get("GITHUB_TOKEN")
        return cls.from_dict(data)

    @classmethod
    def from_yaml(cls, path: str, overrides: Optional[Mapping[str, Any]] = None) -> "ActionConfig":
        """
        Load a YAML config file, optionally overriding some of its keys

        Args:
            path: Path to a YAML file holding a mapping
            overrides: Values that win over the file, None values are ignored
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Unable to read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing YAML config {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        if overrides:
            data.update({k: v for k, v in overrides.items() if v is not None})
        if not data.get("token"):
            data["token"] = os.getenv("GITHUB_TOKEN")
        return cls.from_dict(data)
