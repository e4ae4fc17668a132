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

"""Helm repository, namespaces, Argo Workflows release, and rollout waits."""

from __future__ import annotations

import math
from collections.abc import Callable

from playground_manager import info, logger
from playground_manager.config import PlaygroundConfig
from playground_manager.constants import (
    HELM_KEY_CHART_NAMESPACE,
    HELM_KEY_SERVER_EXTRA_ARGS,
    SERVER_EXTRA_ARGS,
)
from playground_manager.errors import ProvisioningError
from playground_manager.kube import Helm, Kubectl
from playground_manager.models import Outcome
from playground_manager.utils import poll_until


# ============================================================================
# Helm repository
# ============================================================================

def ensure_repository(helm: Helm, name: str, url: str) -> Outcome:
    """Register the Helm repository if missing, then refresh all indexes.

    The refresh is unconditional so version resolution sees current data.
    """
    outcome = Outcome.EXISTS
    if name in helm.list_repos():
        info(f"Helm repository '{name}' already present.")
    else:
        info(f"Adding Helm repository '{name}' ({url})...")
        helm.add_repo(name, url)
        outcome = Outcome.CREATED
    info("Updating Helm repositories...")
    helm.update_repos()
    return outcome


# ============================================================================
# Namespaces
# ============================================================================

def ensure_namespace(kubectl: Kubectl, name: str) -> Outcome:
    """Create a namespace unless it already exists."""
    if kubectl.exists("namespace", name):
        info(f"Namespace '{name}' already exists.")
        return Outcome.EXISTS
    info(f"Creating namespace '{name}'...")
    return kubectl.create_namespace(name)


# ============================================================================
# Argo Workflows release
# ============================================================================

def collect_helm_overrides(namespace: str) -> list[str]:
    """Build the fixed ``--set`` values for a local, auth-less Argo Server.

    Args:
        namespace: Namespace the chart's namespace-scoped values point at.

    Returns:
        List of ``key=value`` strings for ``helm --set`` arguments.
    """
    return [
        f"{HELM_KEY_SERVER_EXTRA_ARGS}={{{','.join(SERVER_EXTRA_ARGS)}}}",
        f"{HELM_KEY_CHART_NAMESPACE}={namespace}",
    ]


def install_or_upgrade(helm: Helm, cfg: PlaygroundConfig) -> None:
    """Install or upgrade the Argo Workflows release.

    ``helm upgrade --install`` is itself idempotent: the first call installs,
    later calls upgrade to the same desired state.

    Args:
        helm: Helm client.
        cfg: Run configuration (release, chart, namespace, values, version).

    Raises:
        ProvisioningError: If the values file is missing or helm fails.
    """
    if not cfg.values_file.is_file():
        raise ProvisioningError(f"Values file '{cfg.values_file}' not found")

    version = cfg.chart_version or "latest"
    info(f"Installing/Upgrading Argo Workflows ({cfg.chart}@{version}) via Helm...")
    helm.upgrade_install(
        cfg.release_name,
        cfg.chart,
        cfg.argo_namespace,
        cfg.values_file,
        collect_helm_overrides(cfg.argo_namespace),
        version=cfg.chart_version or None,
    )


# ============================================================================
# Rollout waits
# ============================================================================

def wait_ready(
    kubectl: Kubectl,
    namespace: str,
    deployment: str,
    timeout: int,
    interval: float,
    sleep: Callable[[float], None] | None = None,
) -> Outcome:
    """Poll a deployment until its rollout completes or the timeout elapses.

    Both the number of checks and the wall-clock time are bounded by
    ``timeout``, since a single check may itself block on the API server.

    Args:
        kubectl: kubectl client.
        namespace: Deployment namespace.
        deployment: Deployment name.
        timeout: Seconds to wait in total.
        interval: Seconds between checks.
        sleep: Sleep function for the poll loop.

    Returns:
        ``Outcome.READY`` or ``Outcome.TIMEOUT``.
    """
    attempts = max(1, math.ceil(timeout / interval))
    logger.debug("waiting for deploy/%s: %d checks every %ss", deployment, attempts, interval)
    ready = poll_until(
        lambda: kubectl.deployment_ready(namespace, deployment),
        attempts=attempts,
        interval=interval,
        timeout=timeout,
        sleep=sleep,
    )
    return Outcome.READY if ready else Outcome.TIMEOUT
