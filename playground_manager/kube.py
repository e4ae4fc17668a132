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

"""Thin clients over the kind, helm, and kubectl CLIs.

kind and helm run through ``sh``; kubectl goes through ``run_command`` so that
manifests can be piped to stdin and stderr inspected without raising.

Each client turns a failed call into either a normal branch (``NotFound`` on
a lookup, ``AlreadyExists`` on a create) or a ``ProvisioningError``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import sh
import yaml

from playground_manager import logger
from playground_manager.config import PlaygroundConfig
from playground_manager.errors import ProvisioningError
from playground_manager.models import Outcome, RoleBindingSpec
from playground_manager.utils import CommandResult, Runner, run_command


def _first_line(text: str) -> str:
    return text.strip().splitlines()[0] if text.strip() else ""


def _sh_run(tool: str, args: list[str], timeout: int, what: str) -> str:
    """Run ``tool`` (e.g. ``sh.helm``) and return its stdout.

    Raises:
        ProvisioningError: If the command exits non-zero or times out.
    """
    argv = [tool, *args]
    command = getattr(sh, tool)
    logger.debug("+ %s", " ".join(argv))
    try:
        return str(command(*args, _timeout=timeout, _tty_out=False))
    except sh.ErrorReturnCode as err:
        stderr = err.stderr.decode("utf-8", errors="replace")
        raise ProvisioningError(f"Failed to {what}: {_first_line(stderr)}", argv, stderr) from err
    except sh.TimeoutException as err:
        raise ProvisioningError(f"Failed to {what}: timed out after {timeout}s", argv) from err


# ============================================================================
# kind
# ============================================================================

class Kind:
    """kind cluster operations."""

    def __init__(self, timeout: int = 300) -> None:
        self.timeout = timeout

    def list_clusters(self) -> list[str]:
        """Return the names of all kind clusters."""
        stdout = _sh_run("kind", ["get", "clusters"], 30, "list kind clusters")
        # "No kind clusters found." goes to stderr, so stdout is empty then.
        return [line.strip() for line in stdout.splitlines() if line.strip()]

    def create_cluster(self, name: str) -> None:
        _sh_run("kind", ["create", "cluster", "--name", name], self.timeout, f"create kind cluster '{name}'")


# ============================================================================
# helm
# ============================================================================

class Helm:
    """Helm repository and release operations.

    Args:
        kube_context: kubeconfig context for release operations, or None for
            the current context.
        timeout: Seconds allowed for network-bound helm calls.
    """

    def __init__(self, kube_context: str | None = None, timeout: int = 300) -> None:
        self.kube_context = kube_context
        self.timeout = timeout

    def list_repos(self) -> list[str]:
        """Return the names of registered Helm repositories."""
        try:
            stdout = _sh_run("helm", ["repo", "list", "-o", "json"], 30, "list Helm repositories")
        except ProvisioningError as err:
            if "no repositories" in err.stderr.lower():
                return []
            raise
        if not stdout.strip():
            return []
        return [repo["name"] for repo in json.loads(stdout)]

    def add_repo(self, name: str, url: str) -> None:
        _sh_run("helm", ["repo", "add", name, url], self.timeout, f"add Helm repository '{name}'")

    def update_repos(self) -> None:
        _sh_run("helm", ["repo", "update"], self.timeout, "update Helm repositories")

    def upgrade_install(
        self,
        release: str,
        chart: str,
        namespace: str,
        values_file: Path,
        set_values: list[str],
        version: str | None = None,
    ) -> None:
        """Run ``helm upgrade --install`` for a release.

        Args:
            release: Helm release name.
            chart: Chart reference (``repo/chart``).
            namespace: Target namespace.
            values_file: Values overlay file.
            set_values: ``key=value`` strings for ``--set``.
            version: Chart version pin, or None for the latest.

        Raises:
            ProvisioningError: If helm rejects the install or upgrade.
        """
        args = ["upgrade", "--install", release, chart]
        if self.kube_context:
            args += ["--kube-context", self.kube_context]
        args += ["--namespace", namespace, "--values", str(values_file)]
        args += [item for val in set_values for item in ("--set", val)]
        if version:
            args += ["--version", version]
        _sh_run("helm", args, self.timeout, f"install or upgrade release '{release}'")


# ============================================================================
# kubectl
# ============================================================================

class Kubectl:
    """kubectl operations used by the pipeline.

    Args:
        context: kubeconfig context passed as ``--context``, or None.
        runner: Command runner, ``run_command`` by default.
        timeout: Seconds allowed per kubectl call.
    """

    def __init__(self, context: str | None = None, runner: Runner = run_command, timeout: int = 30) -> None:
        self.context = context
        self.runner = runner
        self.timeout = timeout

    def _run(self, args: list[str], namespace: str | None = None, input: str | None = None) -> CommandResult:
        argv = ["kubectl"]
        if self.context:
            argv += ["--context", self.context]
        if namespace:
            argv += ["-n", namespace]
        return self.runner([*argv, *args], timeout=self.timeout, input=input)

    def _create(self, args: list[str], namespace: str | None = None, input: str | None = None) -> Outcome:
        ok, _, stderr = self._run(args, namespace, input)
        if ok:
            return Outcome.CREATED
        if "AlreadyExists" in stderr:
            return Outcome.EXISTS
        raise ProvisioningError(f"kubectl {' '.join(args[:3])} failed: {_first_line(stderr)}", args, stderr)

    def exists(self, kind: str, name: str, namespace: str | None = None) -> bool:
        """Return whether a resource exists.

        Raises:
            ProvisioningError: If the lookup fails for a reason other than NotFound.
        """
        ok, _, stderr = self._run(["get", kind, name, "-o", "name"], namespace)
        if ok:
            return True
        if "NotFound" in stderr:
            return False
        raise ProvisioningError(f"Failed to look up {kind} '{name}': {_first_line(stderr)}", ["get", kind, name], stderr)

    def create_namespace(self, name: str) -> Outcome:
        return self._create(["create", "namespace", name])

    def create_service_account(self, namespace: str, name: str) -> Outcome:
        return self._create(["create", "serviceaccount", name], namespace)

    def create_role_binding(self, spec: RoleBindingSpec) -> Outcome:
        return self._create(
            ["create", "rolebinding", spec.name, spec.role.flag, spec.role.name, "--serviceaccount", spec.subject],
            spec.namespace,
        )

    def create_from_manifest(self, manifest: dict) -> Outcome:
        """Create a resource from a manifest via ``kubectl create -f -``.

        ``create`` rather than ``apply`` so an existing object is never
        overwritten.
        """
        namespace = manifest.get("metadata", {}).get("namespace")
        return self._create(["create", "-f", "-"], namespace, input=yaml.safe_dump(manifest, sort_keys=False))

    def get_json(self, kind: str, name: str, namespace: str | None = None) -> dict | None:
        """Return a resource as a dict, or None if it cannot be read."""
        ok, stdout, stderr = self._run(["get", kind, name, "-o", "json"], namespace)
        if not ok:
            logger.debug("get %s/%s failed: %s", kind, name, _first_line(stderr))
            return None
        return json.loads(stdout)

    def get_secret(self, namespace: str, name: str) -> dict | None:
        return self.get_json("secret", name, namespace)

    def deployment_ready(self, namespace: str, name: str) -> bool:
        """Return whether a deployment's rollout has completed."""
        deployment = self.get_json("deployment", name, namespace)
        if deployment is None:
            return False
        return deployment_rollout_complete(deployment)

    def issue_token_direct(self, namespace: str, service_account: str) -> str | None:
        """Issue a token via ``kubectl create token``; None if unsupported or rejected."""
        ok, stdout, stderr = self._run(["create", "token", service_account], namespace)
        if not ok:
            logger.debug("create token failed: %s", _first_line(stderr))
            return None
        return stdout.strip() or None


def deployment_rollout_complete(deployment: dict) -> bool:
    """Mirror ``kubectl rollout status``: observed, updated, and available.

    Args:
        deployment: Deployment resource as returned by ``kubectl get -o json``.

    Returns:
        True when every desired replica is updated and available.
    """
    metadata = deployment.get("metadata", {})
    spec = deployment.get("spec", {})
    status = deployment.get("status", {})
    desired = spec.get("replicas", 1)
    if status.get("observedGeneration", 0) < metadata.get("generation", 0):
        return False
    return (
        status.get("updatedReplicas", 0) >= desired
        and status.get("availableReplicas", 0) >= desired
    )


# ============================================================================
# Toolchain
# ============================================================================

@dataclass(frozen=True)
class Toolchain:
    """The three CLI clients one pipeline run talks to.

    Attributes:
        kind: kind client.
        helm: Helm client, pinned to the cluster's context.
        kubectl: kubectl client, pinned to the cluster's context.
    """

    kind: Kind
    helm: Helm
    kubectl: Kubectl

    @classmethod
    def for_config(cls, cfg: PlaygroundConfig) -> Toolchain:
        return cls(
            kind=Kind(timeout=cfg.command_timeout),
            helm=Helm(kube_context=cfg.kube_context, timeout=cfg.command_timeout),
            kubectl=Kubectl(context=cfg.kube_context, timeout=cfg.command_timeout),
        )
