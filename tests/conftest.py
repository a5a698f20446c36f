"""Shared fixtures for the stack and configuration tests."""

import pytest
import yaml

from helper.config import Config
from stacks.common.context import AccountContext

ACCOUNT_ID = "123456789012"
REGION = "us-east-1"


def write_config(directory, environment="test", **overrides):
    """Write a configuration file and return a loaded Config."""
    data = {
        "ProjectName": "sd-on-eks",
        "Environment": environment,
        "AccountId": ACCOUNT_ID,
        "RegionName": REGION,
        "ModelIds": ["a", "b", "c"],
        "QueueOverrides": {"c": {"VisibilityTimeoutSeconds": 30}},
        "FunctionEnvironment": {"LOG_LEVEL": "INFO"},
        "ApiStageName": "prod",
        "LogRetentionDays": 30,
    }
    data.update(overrides)
    with open(directory / f"{environment}.yaml", "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f)
    return Config(environment, config_dir=str(directory))


@pytest.fixture
def account_context():
    return AccountContext(account_id=ACCOUNT_ID, region=REGION)


@pytest.fixture
def config_factory(tmp_path):
    def factory(**overrides):
        return write_config(tmp_path, **overrides)
    return factory


@pytest.fixture
def artifact_dir(tmp_path):
    directory = tmp_path / "request_validator"
    directory.mkdir()
    (directory / "index.py").write_text("def handler(event, context):\n    return {'statusCode': 200}\n")
    return directory
