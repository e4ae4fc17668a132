from pathlib import Path

import pytest
from pydantic import ValidationError

from playground_manager.config import PlaygroundConfig, resolve_config
from playground_manager.errors import ConfigurationError


def test_defaults_match_playground_layout():
    cfg = resolve_config()

    assert cfg.cluster_name == "awte"
    assert cfg.argo_namespace == "argo"
    assert cfg.workflow_namespace == "argo"
    assert cfg.values_file == Path("deploy/local-values.yaml")
    assert cfg.chart_version is None
    assert cfg.kube_context == "kind-awte"
    assert cfg.server_deployment == "argo-workflows-server"
    assert cfg.controller_deployment == "argo-workflows-workflow-controller"
    assert cfg.token_secret_name == "demo-token"
    assert cfg.token_poll_attempts == 20
    assert (cfg.server_rollout_timeout, cfg.controller_rollout_timeout) == (120, 180)


def test_env_vars_override_defaults_and_flags_override_env(monkeypatch):
    monkeypatch.setenv("PLAYGROUND_CLUSTER_NAME", "from-env")
    monkeypatch.setenv("PLAYGROUND_WORKFLOW_NAMESPACE", "jobs")

    assert resolve_config().cluster_name == "from-env"

    cfg = resolve_config(cluster_name="demo1", chart_version="0.45.0", values_file=Path("v.yaml"))

    assert cfg.cluster_name == "demo1"
    assert cfg.workflow_namespace == "jobs"
    assert cfg.chart_version == "0.45.0"
    assert cfg.values_file == Path("v.yaml")


def test_config_is_frozen():
    cfg = resolve_config()

    with pytest.raises(ValidationError):
        cfg.cluster_name = "other"


def test_invalid_cluster_name_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="cluster_name"):
        resolve_config(cluster_name="Not_Valid")


def test_invalid_env_value_is_a_configuration_error(monkeypatch):
    monkeypatch.setenv("PLAYGROUND_TOKEN_POLL_ATTEMPTS", "zero")

    with pytest.raises(ConfigurationError) as exc_info:
        resolve_config()

    message = str(exc_info.value)
    assert message.startswith("Invalid value for token_poll_attempts: 'zero' (")
    assert "\n" not in message


def test_direct_construction_uses_given_values(values_file):
    cfg = PlaygroundConfig(cluster_name="demo1", values_file=values_file)

    assert cfg.kube_context == "kind-demo1"
    assert cfg.values_file == values_file
