import base64
import os
from types import SimpleNamespace

import pytest

from playground_manager import kube, utils
from playground_manager.config import PlaygroundConfig
from playground_manager.errors import ProvisioningError
from playground_manager.kube import Toolchain
from playground_manager.models import Outcome


class FakeKind:
    def __init__(self, clusters=()):
        self.clusters = list(clusters)
        self.mutations = []

    def list_clusters(self):
        return list(self.clusters)

    def create_cluster(self, name):
        self.mutations.append(("create-cluster", name))
        self.clusters.append(name)


class FakeHelm:
    def __init__(self, repos=()):
        self.repos = list(repos)
        self.releases = {}
        self.mutations = []
        self.refreshes = 0
        self.installs = []

    def list_repos(self):
        return list(self.repos)

    def add_repo(self, name, url):
        self.mutations.append(("add-repo", name))
        self.repos.append(name)

    def update_repos(self):
        self.refreshes += 1

    def upgrade_install(self, release, chart, namespace, values_file, set_values, version=None):
        self.installs.append(
            {
                "release": release,
                "chart": chart,
                "namespace": namespace,
                "values_file": values_file,
                "set_values": list(set_values),
                "version": version,
            }
        )
        self.releases[(namespace, release)] = (chart, version)


class FakeKubectl:
    """In-memory stand-in for ``kube.Kubectl``.

    Args:
        direct_tokens: Whether ``create token`` is supported.
        token: Raw token the cluster issues.
        populate_after: Secret reads before the token controller fills the Secret,
            or None to never populate it.
        ready: Deployment names that report a completed rollout.
    """

    def __init__(self, direct_tokens=True, token="raw-token-value", populate_after=0, ready=None):
        self.resources = set()
        self.secrets = {}
        self.direct_tokens = direct_tokens
        self.token = token
        self.populate_after = populate_after
        self.ready = ready
        self.mutations = []
        self.secret_reads = 0
        self.readiness_checks = []
        self.direct_attempts = 0
        self.bindings = {}
        self.manifests = {}

    def add(self, kind, name, namespace=None):
        self.resources.add((kind, namespace, name))

    def has(self, kind, name, namespace=None):
        return (kind, namespace, name) in self.resources

    def _create(self, kind, name, namespace=None):
        key = (kind, namespace, name)
        if key in self.resources:
            return Outcome.EXISTS
        self.mutations.append(("create", kind, namespace, name))
        self.resources.add(key)
        return Outcome.CREATED

    def exists(self, kind, name, namespace=None):
        return self.has(kind, name, namespace)

    def create_namespace(self, name):
        return self._create("namespace", name)

    def create_service_account(self, namespace, name):
        return self._create("serviceaccount", name, namespace)

    def create_role_binding(self, spec):
        outcome = self._create("rolebinding", spec.name, spec.namespace)
        self.bindings[(spec.namespace, spec.name)] = spec
        return outcome

    def create_from_manifest(self, manifest):
        kind = manifest["kind"].lower()
        metadata = manifest["metadata"]
        outcome = self._create(kind, metadata["name"], metadata.get("namespace"))
        if kind == "secret":
            self.secrets[(metadata["namespace"], metadata["name"])] = manifest
        else:
            self.manifests[(kind, metadata["name"])] = manifest
        return outcome

    def get_secret(self, namespace, name):
        if ("secret", namespace, name) not in self.resources:
            return None
        self.secret_reads += 1
        secret = {"metadata": {"name": name, "namespace": namespace}, "data": {}}
        if self.populate_after is not None and self.secret_reads > self.populate_after:
            secret["data"]["token"] = base64.b64encode(self.token.encode()).decode()
        return secret

    def deployment_ready(self, namespace, name):
        self.readiness_checks.append(name)
        return self.ready is None or name in self.ready

    def issue_token_direct(self, namespace, service_account):
        self.direct_attempts += 1
        if not self.direct_tokens:
            return None
        if ("serviceaccount", namespace, service_account) not in self.resources:
            raise ProvisioningError(f"serviceaccount {service_account} not found")
        return self.token


class RecordingRunner:
    """Command runner that records argv and replays canned results."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, args, timeout=30, input=None):
        self.calls.append({"args": list(args), "timeout": timeout, "input": input})
        if self.responses:
            return self.responses.pop(0)
        return True, "", ""


class FakeShError(Exception):
    """Stand-in for ``sh.ErrorReturnCode``; stdout/stderr are bytes as in sh."""

    def __init__(self, stderr="", stdout=""):
        super().__init__(stderr)
        self.stdout = stdout.encode()
        self.stderr = stderr.encode()


class FakeShTimeout(Exception):
    pass


class FakeSh:
    """Replacement for the ``sh`` module inside ``kube``.

    Each response is either a stdout string or an exception instance to raise.
    """

    ErrorReturnCode = FakeShError
    TimeoutException = FakeShTimeout

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def __getattr__(self, tool):
        def command(*args, **kwargs):
            self.calls.append({"args": [tool, *args], "kwargs": kwargs})
            response = self.responses.pop(0) if self.responses else ""
            if isinstance(response, Exception):
                raise response
            return response

        return command


def patch_which(monkeypatch, missing=()):
    """Make ``utils.sh.which`` report every tool except ``missing``; returns the lookups."""
    seen = []

    def which(cmd):
        seen.append(cmd)
        return None if cmd in missing else f"/usr/bin/{cmd}"

    monkeypatch.setattr(utils, "sh", SimpleNamespace(which=which, ErrorReturnCode=FakeShError))
    return seen


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("PLAYGROUND_"):
            monkeypatch.delenv(key)


@pytest.fixture
def values_file(tmp_path):
    path = tmp_path / "local-values.yaml"
    path.write_text("server:\n  enabled: true\n", encoding="utf-8")
    return path


@pytest.fixture
def cfg(values_file):
    return PlaygroundConfig(
        cluster_name="demo1",
        values_file=values_file,
        server_rollout_timeout=3,
        controller_rollout_timeout=3,
        readiness_poll_interval=1,
        token_poll_interval=0,
    )


@pytest.fixture
def tools():
    return Toolchain(kind=FakeKind(), helm=FakeHelm(), kubectl=FakeKubectl())


@pytest.fixture
def no_sleep():
    sleeps = []
    return sleeps.append


@pytest.fixture
def fake_sh(monkeypatch):
    fake = FakeSh()
    monkeypatch.setattr(kube, "sh", fake)
    return fake
