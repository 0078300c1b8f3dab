import pytest

from return_dispatch.config import (
    DEFAULT_WORKFLOW_TIMEOUT_SECONDS,
    ActionConfig,
    parse_workflow,
    parse_workflow_inputs,
)
from return_dispatch.errors import ConfigError

BASE = {
    "owner": "octo",
    "repo": "app",
    "ref": "refs/heads/main",
    "workflow": "deploy.yml",
    "token": "secret",
}


def test_numeric_workflow_becomes_id():
    assert parse_workflow("1234") == 1234
    assert parse_workflow(" 1234 ") == 1234
    assert parse_workflow("deploy.yml") == "deploy.yml"


def test_workflow_inputs_from_json():
    assert parse_workflow_inputs('{"environment": "prod"}') == {"environment": "prod"}
    assert parse_workflow_inputs(None) == {}
    assert parse_workflow_inputs("") == {}


@pytest.mark.parametrize("value", ['{"retries": 3}', "[1, 2]", "not json"])
def test_workflow_inputs_rejected(value):
    with pytest.raises(ConfigError):
        parse_workflow_inputs(value)


def test_from_dict_defaults():
    config = ActionConfig.from_dict(BASE)
    assert config.workflow_timeout_seconds == DEFAULT_WORKFLOW_TIMEOUT_SECONDS
    assert config.workflow_inputs == {}
    assert config.workflow_ref.is_resolved is False


def test_from_dict_missing_keys():
    with pytest.raises(ConfigError) as excinfo:
        ActionConfig.from_dict({"owner": "octo"})
    assert "repo" in excinfo.value.message
    assert "token" in excinfo.value.message


@pytest.mark.parametrize("timeout", ["0", "-5", "soon"])
def test_from_dict_bad_timeout(timeout):
    with pytest.raises(ConfigError):
        ActionConfig.from_dict({**BASE, "workflow_timeout_seconds": timeout})


def test_token_is_not_in_repr():
    assert "secret" not in repr(ActionConfig.from_dict(BASE))


def test_from_env_reads_action_inputs():
    environ = {
        "INPUT_OWNER": "octo",
        "INPUT_REPO": "app",
        "INPUT_REF": "refs/tags/v1.0",
        "INPUT_WORKFLOW": "42",
        "INPUT_WORKFLOW_INPUTS": '{"a": "b"}',
        "INPUT_WORKFLOW_TIMEOUT_SECONDS": "60",
        "GITHUB_TOKEN": "from-env",
    }
    config = ActionConfig.from_env(environ)
    assert config.workflow == 42
    assert config.workflow_ref.is_resolved
    assert config.token == "from-env"
    assert config.workflow_inputs == {"a": "b"}
    assert config.workflow_timeout_seconds == 60


def test_from_yaml_with_overrides(tmp_path):
    path = tmp_path / "dispatch.yml"
    path.write_text(
        "owner: octo\n"
        "repo: app\n"
        "ref: refs/heads/main\n"
        "workflow: deploy.yml\n"
        "token: secret\n"
        "workflow_inputs:\n"
        "  environment: staging\n"
    )
    config = ActionConfig.from_yaml(str(path), {"ref": "refs/heads/release", "repo": None})
    assert config.ref == "refs/heads/release"
    assert config.repo == "app"
    assert config.workflow_inputs == {"environment": "staging"}


def test_from_yaml_invalid(tmp_path):
    path = tmp_path / "dispatch.yml"
    path.write_text("owner: [unclosed\n")
    with pytest.raises(ConfigError):
        ActionConfig.from_yaml(str(path))


def test_from_yaml_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        ActionConfig.from_yaml(str(tmp_path / "nope.yml"))
