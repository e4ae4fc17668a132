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

"""Fixed resource names, chart coordinates, and defaults."""

from __future__ import annotations

# -- Required CLI tools, checked in this order --
REQUIRED_COMMANDS = ("kind", "kubectl", "helm")

# -- Helm repo and chart --
HELM_REPO_ARGO = "argo"
HELM_REPO_ARGO_URL = "https://argoproj.github.io/argo-helm"
HELM_CHART_ARGO_WORKFLOWS = "argo/argo-workflows"
HELM_RELEASE_ARGO_WORKFLOWS = "argo-workflows"

# -- Helm override keys --
HELM_KEY_SERVER_EXTRA_ARGS = "server.extraArgs"
HELM_KEY_CHART_NAMESPACE = "argo-workflows.namespace"
SERVER_EXTRA_ARGS = ("--insecure", "--auth-mode=server")

# -- Deployment name suffixes (prefixed with the release name) --
SERVER_DEPLOYMENT_SUFFIX = "server"
CONTROLLER_DEPLOYMENT_SUFFIX = "workflow-controller"

# -- RBAC --
ROLE_ARGO_SERVER = "argo-server"
ROLE_ARGO_UI = "argo-ui"
BINDING_API = "demo"
BINDING_SUBMIT = "demo-submit"
BINDING_UI = "demo-ui"
BINDING_DEFAULT_UI = "default"
DEFAULT_SERVICE_ACCOUNT = "default"

ARGO_API_GROUP = "argoproj.io"
ARGO_UI_RESOURCES = [
    "eventsources",
    "sensors",
    "workflows",
    "workfloweventbindings",
    "workflowtemplates",
    "clusterworkflowtemplates",
    "cronworkflows",
    "workflowtaskresults",
]
ARGO_UI_VERBS = ["create", "delete", "update", "patch", "get", "list", "watch"]
CORE_UI_RESOURCES = ["events", "pods", "pods/log"]
READ_VERBS = ["get", "list", "watch"]

# -- Legacy service-account token Secret --
SA_TOKEN_SECRET_TYPE = "kubernetes.io/service-account-token"
SA_NAME_ANNOTATION = "kubernetes.io/service-account.name"

# -- Argo Server UI --
ARGO_SERVER_PORT = 2746

# -- Defaults --
DEFAULT_CLUSTER_NAME = "awte"
DEFAULT_ARGO_NAMESPACE = "argo"
DEFAULT_WORKFLOW_NAMESPACE = "argo"
DEFAULT_VALUES_FILE = "deploy/local-values.yaml"
DEFAULT_DEMO_SERVICE_ACCOUNT = "demo"
DEFAULT_SERVER_ROLLOUT_TIMEOUT = 120
DEFAULT_CONTROLLER_ROLLOUT_TIMEOUT = 180
DEFAULT_READINESS_POLL_INTERVAL_SECONDS = 5
DEFAULT_TOKEN_POLL_ATTEMPTS = 20
DEFAULT_TOKEN_POLL_INTERVAL_SECONDS = 1
DEFAULT_COMMAND_TIMEOUT = 300
