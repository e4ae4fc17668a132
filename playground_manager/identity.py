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

"""ServiceAccounts, Argo roles, and RoleBindings for the demo identity."""

from __future__ import annotations

from playground_manager import info
from playground_manager.config import PlaygroundConfig
from playground_manager.constants import (
    ARGO_API_GROUP,
    ARGO_UI_RESOURCES,
    ARGO_UI_VERBS,
    BINDING_API,
    BINDING_DEFAULT_UI,
    BINDING_SUBMIT,
    BINDING_UI,
    CORE_UI_RESOURCES,
    DEFAULT_SERVICE_ACCOUNT,
    READ_VERBS,
    ROLE_ARGO_SERVER,
    ROLE_ARGO_UI,
)
from playground_manager.kube import Kubectl
from playground_manager.models import Outcome, RoleBindingSpec, RoleRef


# ============================================================================
# ServiceAccounts
# ============================================================================

def ensure_service_account(kubectl: Kubectl, namespace: str, name: str) -> Outcome:
    info(f"Ensuring '{name}' ServiceAccount exists in namespace '{namespace}'...")
    if kubectl.exists("serviceaccount", name, namespace):
        info(f"ServiceAccount '{name}' already exists in '{namespace}'.")
        return Outcome.EXISTS
    return kubectl.create_service_account(namespace, name)


def ensure_service_accounts(kubectl: Kubectl, cfg: PlaygroundConfig) -> dict[str, Outcome]:
    """Ensure the demo and default ServiceAccounts in the Argo namespace."""
    return {
        name: ensure_service_account(kubectl, cfg.argo_namespace, name)
        for name in (cfg.service_account, DEFAULT_SERVICE_ACCOUNT)
    }


# ============================================================================
# Roles
# ============================================================================

def resolve_server_role(kubectl: Kubectl, namespace: str) -> RoleRef:
    """Prefer the chart's namespaced ``argo-server`` Role, else the ClusterRole.

    Args:
        kubectl: kubectl client.
        namespace: Argo control-plane namespace.

    Returns:
        Reference to the role granting Argo Server API access.
    """
    if kubectl.exists("role", ROLE_ARGO_SERVER, namespace):
        return RoleRef("Role", ROLE_ARGO_SERVER)
    return RoleRef("ClusterRole", ROLE_ARGO_SERVER)


def ui_role_manifest(namespace: str) -> dict:
    """Build the ``argo-ui`` Role for viewing workflows and logs.

    Args:
        namespace: Workflow namespace the Role is created in.

    Returns:
        Role manifest as a dictionary ready for YAML serialization.
    """
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "Role",
        "metadata": {"name": ROLE_ARGO_UI, "namespace": namespace},
        "rules": [
            {"apiGroups": [ARGO_API_GROUP], "resources": list(ARGO_UI_RESOURCES), "verbs": list(ARGO_UI_VERBS)},
            {"apiGroups": [""], "resources": list(CORE_UI_RESOURCES), "verbs": list(READ_VERBS)},
        ],
    }


def ensure_ui_role(kubectl: Kubectl, namespace: str) -> Outcome:
    """Create the ``argo-ui`` Role in the workflow namespace if absent."""
    if kubectl.exists("role", ROLE_ARGO_UI, namespace):
        info(f"Role '{ROLE_ARGO_UI}' already exists in '{namespace}'.")
        return Outcome.EXISTS
    info(f"Creating Role '{ROLE_ARGO_UI}' in '{namespace}'...")
    return kubectl.create_from_manifest(ui_role_manifest(namespace))


# ============================================================================
# RoleBindings
# ============================================================================

def desired_bindings(cfg: PlaygroundConfig, server_role: RoleRef) -> list[RoleBindingSpec]:
    """List the four RoleBindings the playground needs.

    A RoleBinding can only reference a Role in its own namespace, so the
    submit binding falls back to the ClusterRole when the server role is
    namespaced and the workflow namespace differs.

    Args:
        cfg: Run configuration.
        server_role: Result of ``resolve_server_role``.

    Returns:
        Binding specs in creation order.
    """
    argo_ns, wf_ns, sa = cfg.argo_namespace, cfg.workflow_namespace, cfg.service_account
    submit_role = server_role
    if server_role.kind == "Role" and wf_ns != argo_ns:
        submit_role = RoleRef("ClusterRole", server_role.name)
    ui_role = RoleRef("Role", ROLE_ARGO_UI)
    return [
        RoleBindingSpec(BINDING_API, argo_ns, server_role, argo_ns, sa),
        RoleBindingSpec(BINDING_SUBMIT, wf_ns, submit_role, argo_ns, sa),
        RoleBindingSpec(BINDING_UI, wf_ns, ui_role, argo_ns, sa),
        RoleBindingSpec(BINDING_DEFAULT_UI, wf_ns, ui_role, argo_ns, DEFAULT_SERVICE_ACCOUNT),
    ]


def ensure_binding(kubectl: Kubectl, spec: RoleBindingSpec) -> Outcome:
    """Create a RoleBinding unless one with this name exists.

    An existing binding is trusted as-is; its role and subjects are not checked.
    """
    if kubectl.exists("rolebinding", spec.name, spec.namespace):
        info(f"RoleBinding '{spec.name}' already exists in '{spec.namespace}'.")
        return Outcome.EXISTS
    info(f"Creating RoleBinding '{spec.name}' ({spec.role.kind}/{spec.role.name} -> {spec.subject}) in '{spec.namespace}'...")
    return kubectl.create_role_binding(spec)


def ensure_bindings(kubectl: Kubectl, cfg: PlaygroundConfig, server_role: RoleRef) -> dict[str, Outcome]:
    """Ensure all playground RoleBindings; keys are ``namespace/name``."""
    return {
        f"{spec.namespace}/{spec.name}": ensure_binding(kubectl, spec)
        for spec in desired_bindings(cfg, server_role)
    }


def ensure_identity(kubectl: Kubectl, cfg: PlaygroundConfig) -> RoleRef:
    """Provision ServiceAccounts, roles, and bindings for the demo identity.

    Returns:
        The server role the API and submit bindings reference.
    """
    ensure_service_accounts(kubectl, cfg)
    server_role = resolve_server_role(kubectl, cfg.argo_namespace)
    ensure_ui_role(kubectl, cfg.workflow_namespace)
    ensure_bindings(kubectl, cfg, server_role)
    return server_role
