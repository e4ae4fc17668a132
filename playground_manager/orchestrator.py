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

"""Sequential playground pipeline composed from the stage modules."""

from __future__ import annotations

from collections.abc import Callable

from playground_manager import console, info, warn
from playground_manager.cluster import ensure_cluster
from playground_manager.config import PlaygroundConfig, display_config
from playground_manager.constants import ARGO_SERVER_PORT, REQUIRED_COMMANDS
from playground_manager.credentials import CredentialRetriever, print_token
from playground_manager.errors import CredentialRetrievalFailure
from playground_manager.identity import ensure_identity
from playground_manager.kube import Toolchain
from playground_manager.models import CredentialResult, Outcome
from playground_manager.release import (
    ensure_namespace,
    ensure_repository,
    install_or_upgrade,
    wait_ready,
)
from playground_manager.utils import require_commands

# ============================================================================
# Internal helpers
# ============================================================================


def _wait_for_control_plane(tools: Toolchain, cfg: PlaygroundConfig, sleep: Callable[[float], None] | None) -> None:
    """Wait for the server and controller rollouts; timeouts only warn."""
    info("Waiting for Argo Workflows components to be Ready...")
    for deployment, timeout in (
        (cfg.server_deployment, cfg.server_rollout_timeout),
        (cfg.controller_deployment, cfg.controller_rollout_timeout),
    ):
        outcome = wait_ready(
            tools.kubectl, cfg.argo_namespace, deployment, timeout, cfg.readiness_poll_interval, sleep=sleep
        )
        if outcome is Outcome.TIMEOUT:
            warn(f"deploy/{deployment} not ready after {timeout}s; continuing.")
        else:
            info(f"deploy/{deployment} is ready.")


def _retrieve_token(
    tools: Toolchain, cfg: PlaygroundConfig, sleep: Callable[[float], None] | None
) -> CredentialResult | None:
    """Run the credential state machine; failure only warns."""
    try:
        result = CredentialRetriever.for_config(tools.kubectl, cfg, sleep=sleep).run()
    except CredentialRetrievalFailure as err:
        warn(str(err))
        warn("Re-run this tool to retry; every step is safe to repeat.")
        return None
    print_token(result, cfg.service_account, cfg.argo_namespace)
    return result


def print_usage_summary(cfg: PlaygroundConfig) -> None:
    """Print the closing block of follow-up inspection commands."""
    info(
        f"Argo Workflows has been installed in the '{cfg.argo_namespace}' namespace "
        f"on kind cluster '{cfg.cluster_name}'."
    )
    lines = [
        "",
        "Useful commands:",
        f"  - kubectl -n {cfg.argo_namespace} get pods",
        f"  - kubectl -n {cfg.workflow_namespace} get wf",
        f"  - kubectl -n {cfg.argo_namespace} logs deploy/{cfg.controller_deployment}",
        f"  - kubectl -n {cfg.argo_namespace} port-forward svc/{cfg.server_deployment} "
        f"{ARGO_SERVER_PORT}:{ARGO_SERVER_PORT}  # then open http://localhost:{ARGO_SERVER_PORT}",
    ]
    for line in lines:
        console.print(line, markup=False)


# ============================================================================
# Public API
# ============================================================================


def run_pipeline(
    cfg: PlaygroundConfig,
    tools: Toolchain,
    sleep: Callable[[float], None] | None = None,
) -> CredentialResult | None:
    """Converge the playground: cluster, chart, namespaces, release, RBAC, token.

    Every stage checks before it creates, so re-running against a partially
    or fully provisioned cluster is safe. Nothing is rolled back on failure.

    Args:
        cfg: Frozen run configuration.
        tools: kind, helm, and kubectl clients.
        sleep: Sleep function for readiness and token polling.

    Returns:
        The retrieved credential, or None if retrieval failed.

    Raises:
        ProvisioningError: If a cluster, namespace, release, or RBAC call is rejected.
    """
    display_config(cfg)

    ensure_cluster(tools.kind, cfg.cluster_name)
    ensure_repository(tools.helm, cfg.repo_name, cfg.repo_url)
    for namespace in (cfg.argo_namespace, cfg.workflow_namespace):
        ensure_namespace(tools.kubectl, namespace)
    install_or_upgrade(tools.helm, cfg)

    _wait_for_control_plane(tools, cfg, sleep)

    ensure_identity(tools.kubectl, cfg)
    result = _retrieve_token(tools, cfg, sleep)

    print_usage_summary(cfg)
    return result


def run(cfg: PlaygroundConfig) -> CredentialResult | None:
    """Check prerequisites, then run the pipeline against the real CLIs.

    Raises:
        MissingDependencyError: If kind, kubectl, or helm is not on PATH.
        ProvisioningError: If a provisioning call is rejected.
    """
    require_commands(REQUIRED_COMMANDS)
    return run_pipeline(cfg, Toolchain.for_config(cfg))
