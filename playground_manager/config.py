# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Playground configuration and its resolution from env vars and CLI flags."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from playground_manager import info
from playground_manager.constants import (
    CONTROLLER_DEPLOYMENT_SUFFIX,
    DEFAULT_ARGO_NAMESPACE,
    DEFAULT_CLUSTER_NAME,
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_CONTROLLER_ROLLOUT_TIMEOUT,
    DEFAULT_DEMO_SERVICE_ACCOUNT,
    DEFAULT_READINESS_POLL_INTERVAL_SECONDS,
    DEFAULT_SERVER_ROLLOUT_TIMEOUT,
    DEFAULT_TOKEN_POLL_ATTEMPTS,
    DEFAULT_TOKEN_POLL_INTERVAL_SECONDS,
    DEFAULT_VALUES_FILE,
    DEFAULT_WORKFLOW_NAMESPACE,
    HELM_CHART_ARGO_WORKFLOWS,
    HELM_RELEASE_ARGO_WORKFLOWS,
    HELM_REPO_ARGO,
    HELM_REPO_ARGO_URL,
    SERVER_DEPLOYMENT_SUFFIX,
)
from playground_manager.errors import ConfigurationError

_DNS_LABEL = r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$"


class PlaygroundConfig(BaseSettings):
    """Playground configuration, auto-loaded from PLAYGROUND_* env vars.

    Instances are frozen: the pipeline resolves one at startup and passes it
    to every stage unchanged.

    Attributes:
        cluster_name: Name of the kind cluster.
        argo_namespace: Namespace the Argo control plane is installed into.
        workflow_namespace: Namespace workflows are submitted to.
        values_file: Helm values overlay for the Argo Workflows chart.
        chart_version: Chart version pin, or None for the latest.
        release_name: Helm release name.
        repo_name: Helm repository name.
        repo_url: Helm repository URL.
        chart: Chart reference passed to helm.
        service_account: ServiceAccount the access token is issued for.
        server_rollout_timeout: Seconds to wait for the Argo Server rollout.
        controller_rollout_timeout: Seconds to wait for the controller rollout.
        readiness_poll_interval: Seconds between deployment readiness checks.
        token_poll_attempts: Reads of the token Secret before giving up.
        token_poll_interval: Seconds between token Secret reads.
        command_timeout: Seconds allowed for a single CLI call.
        log_level: Level for the ``playground_manager`` logger.
    """

    model_config = SettingsConfigDict(env_prefix="PLAYGROUND_", extra="ignore", frozen=True)

    cluster_name: str = Field(default=DEFAULT_CLUSTER_NAME, pattern=_DNS_LABEL)
    argo_namespace: str = Field(default=DEFAULT_ARGO_NAMESPACE, pattern=_DNS_LABEL)
    workflow_namespace: str = Field(default=DEFAULT_WORKFLOW_NAMESPACE, pattern=_DNS_LABEL)
    values_file: Path = Path(DEFAULT_VALUES_FILE)
    chart_version: str | None = None
    release_name: str = HELM_RELEASE_ARGO_WORKFLOWS
    repo_name: str = HELM_REPO_ARGO
    repo_url: str = HELM_REPO_ARGO_URL
    chart: str = HELM_CHART_ARGO_WORKFLOWS
    service_account: str = Field(default=DEFAULT_DEMO_SERVICE_ACCOUNT, pattern=_DNS_LABEL)
    server_rollout_timeout: int = Field(default=DEFAULT_SERVER_ROLLOUT_TIMEOUT, ge=1)
    controller_rollout_timeout: int = Field(default=DEFAULT_CONTROLLER_ROLLOUT_TIMEOUT, ge=1)
    readiness_poll_interval: float = Field(default=DEFAULT_READINESS_POLL_INTERVAL_SECONDS, gt=0)
    token_poll_attempts: int = Field(default=DEFAULT_TOKEN_POLL_ATTEMPTS, ge=1)
    token_poll_interval: float = Field(default=DEFAULT_TOKEN_POLL_INTERVAL_SECONDS, ge=0)
    command_timeout: int = Field(default=DEFAULT_COMMAND_TIMEOUT, ge=1)
    log_level: str = Field(default="WARNING", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    @property
    def kube_context(self) -> str:
        """kubeconfig context kind creates for this cluster."""
        return f"kind-{self.cluster_name}"

    @property
    def server_deployment(self) -> str:
        return f"{self.release_name}-{SERVER_DEPLOYMENT_SUFFIX}"

    @property
    def controller_deployment(self) -> str:
        return f"{self.release_name}-{CONTROLLER_DEPLOYMENT_SUFFIX}"

    @property
    def token_secret_name(self) -> str:
        return f"{self.service_account}-token"


def resolve_config(
    *,
    cluster_name: str | None = None,
    chart_version: str | None = None,
    values_file: Path | None = None,
) -> PlaygroundConfig:
    """Build the run configuration: defaults, then env vars, then CLI flags.

    Args:
        cluster_name: ``--cluster-name`` override, or None.
        chart_version: ``--version`` override, or None.
        values_file: ``--values`` override, or None.

    Returns:
        The frozen configuration for this run.

    Raises:
        ConfigurationError: If an env var or flag holds an invalid value.
    """
    overrides: dict = {}
    if cluster_name is not None:
        overrides["cluster_name"] = cluster_name
    if chart_version is not None:
        overrides["chart_version"] = chart_version
    if values_file is not None:
        overrides["values_file"] = values_file
    # Init kwargs take precedence over PLAYGROUND_* env vars.
    try:
        return PlaygroundConfig(**overrides)
    except ValidationError as err:
        raise ConfigurationError(_describe_validation_error(err)) from err


def _describe_validation_error(err: ValidationError) -> str:
    """Collapse a pydantic ValidationError into a single line."""
    problems = []
    for error in err.errors():
        field = ".".join(str(part) for part in error["loc"]) or "configuration"
        problems.append(f"{field}: {error.get('input')!r} ({error['msg']})")
    return "Invalid value for " + "; ".join(problems)


def display_config(cfg: PlaygroundConfig) -> None:
    """Print a one-line summary of the resolved configuration."""
    version = cfg.chart_version or "latest"
    info(
        f"Cluster '{cfg.cluster_name}', namespaces '{cfg.argo_namespace}'/'{cfg.workflow_namespace}', "
        f"chart {cfg.chart}@{version}, values '{cfg.values_file}'."
    )
