import pytest

from conftest import FakeHelm, FakeKind, FakeKubectl
from playground_manager.cluster import ensure_cluster
from playground_manager.errors import ProvisioningError
from playground_manager.models import Outcome
from playground_manager.release import (
    collect_helm_overrides,
    ensure_namespace,
    ensure_repository,
    install_or_upgrade,
    wait_ready,
)


# ============================================================================
# Cluster
# ============================================================================

def test_ensure_cluster_creates_when_absent(capsys):
    kind = FakeKind()

    assert ensure_cluster(kind, "demo1") is Outcome.CREATED
    assert kind.mutations == [("create-cluster", "demo1")]
    assert "[INFO] Creating kind cluster 'demo1'..." in capsys.readouterr().out


def test_ensure_cluster_reuses_existing(capsys):
    kind = FakeKind(clusters=["demo1"])

    assert ensure_cluster(kind, "demo1") is Outcome.EXISTS
    assert kind.mutations == []
    assert "kind cluster 'demo1' already exists; reusing." in capsys.readouterr().out


def test_ensure_cluster_requires_exact_name_match():
    kind = FakeKind(clusters=["demo10", "my-demo1"])

    assert ensure_cluster(kind, "demo1") is Outcome.CREATED


# ============================================================================
# Helm repository
# ============================================================================

def test_ensure_repository_adds_then_always_refreshes():
    helm = FakeHelm()

    assert ensure_repository(helm, "argo", "https://argoproj.github.io/argo-helm") is Outcome.CREATED
    assert ensure_repository(helm, "argo", "https://argoproj.github.io/argo-helm") is Outcome.EXISTS
    assert helm.mutations == [("add-repo", "argo")]
    assert helm.refreshes == 2


# ============================================================================
# Namespaces
# ============================================================================

def test_ensure_namespace_is_idempotent(capsys):
    kubectl = FakeKubectl()

    assert ensure_namespace(kubectl, "argo") is Outcome.CREATED
    assert ensure_namespace(kubectl, "argo") is Outcome.EXISTS
    assert kubectl.mutations == [("create", "namespace", None, "argo")]
    assert "Namespace 'argo' already exists." in capsys.readouterr().out


# ============================================================================
# Release
# ============================================================================

def test_collect_helm_overrides():
    assert collect_helm_overrides("argo") == [
        "server.extraArgs={--insecure,--auth-mode=server}",
        "argo-workflows.namespace=argo",
    ]


def test_install_or_upgrade_omits_version_when_unset(cfg):
    helm = FakeHelm()

    install_or_upgrade(helm, cfg)

    (install,) = helm.installs
    assert install["release"] == "argo-workflows"
    assert install["chart"] == "argo/argo-workflows"
    assert install["namespace"] == "argo"
    assert install["values_file"] == cfg.values_file
    assert install["version"] is None
    assert "argo-workflows.namespace=argo" in install["set_values"]


def test_install_or_upgrade_pins_version_and_stays_single_release(cfg):
    helm = FakeHelm()
    pinned = cfg.model_copy(update={"chart_version": "0.45.0"})

    install_or_upgrade(helm, pinned)
    install_or_upgrade(helm, pinned)

    assert [i["version"] for i in helm.installs] == ["0.45.0", "0.45.0"]
    assert helm.releases == {("argo", "argo-workflows"): ("argo/argo-workflows", "0.45.0")}


def test_install_or_upgrade_rejects_missing_values_file(cfg, tmp_path):
    helm = FakeHelm()
    missing = cfg.model_copy(update={"values_file": tmp_path / "nope.yaml"})

    with pytest.raises(ProvisioningError, match="nope.yaml"):
        install_or_upgrade(helm, missing)
    assert helm.installs == []


# ============================================================================
# Readiness
# ============================================================================

def test_wait_ready_returns_ready():
    kubectl = FakeKubectl(ready={"argo-workflows-server"})

    assert wait_ready(kubectl, "argo", "argo-workflows-server", 120, 5, sleep=lambda _: None) is Outcome.READY
    assert kubectl.readiness_checks == ["argo-workflows-server"]


def test_wait_ready_times_out_after_bounded_checks():
    kubectl = FakeKubectl(ready=set())
    sleeps = []

    outcome = wait_ready(kubectl, "argo", "argo-workflows-workflow-controller", 180, 5, sleep=sleeps.append)

    assert outcome is Outcome.TIMEOUT
    assert len(kubectl.readiness_checks) == 36
    assert sum(sleeps) == 175
