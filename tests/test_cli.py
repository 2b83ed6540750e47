"""Tests for the infrakit command line."""

import logging
import subprocess
from unittest.mock import patch

import pytest
import yaml

from infrakit import codec
from infrakit.cli import main
from infrakit.codec import decode_all


@pytest.fixture
def project(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in ("INFRAKIT_CLUSTER", "INFRAKIT_MANIFEST", "INFRAKIT_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(project)
    (project / "infra.yaml").write_text(yaml.safe_dump({
        "cluster": "demo",
        "hypervisors": [{"name": "hv-a", "backend": "docker"}],
    }))
    return project


def completed(stdout="", returncode=0):
    return subprocess.CompletedProcess([], returncode, stdout=stdout, stderr="")


class TestNodeCommands:
    """Tests for `infrakit node`."""

    def test_add_writes_manifest(self, project):
        assert main(["node", "add", "cp-1"]) == 0
        assert main(["node", "add", "cp-2", "--cluster", "other"]) == 0

        specs = decode_all((project / "nodes.yaml").read_text())
        assert [(s.name, s.hypervisor, s.cluster) for s in specs] == [
            ("cp-1", "hv-a", "demo"),
            ("cp-2", "hv-a", "other"),
        ]

    def test_add_duplicate(self, project, capsys):
        assert main(["node", "add", "cp-1"]) == 0
        assert main(["node", "add", "cp-1"]) == 1
        assert "already exists" in capsys.readouterr().out

    def test_add_without_hypervisors(self, project, capsys):
        (project / "infra.yaml").write_text("cluster: demo\n")
        assert main(["node", "add", "cp-1"]) == 1
        assert "no hypervisors available" in capsys.readouterr().out
        assert not (project / "nodes.yaml").exists()

    def test_list(self, project, capsys):
        main(["node", "add", "cp-1"])
        capsys.readouterr()

        assert main(["node", "list"]) == 0
        out = capsys.readouterr().out
        assert "cp-1" in out
        assert "hv-a" in out

    def test_custom_manifest(self, project):
        assert main(["--manifest", "cp/nodes.yaml", "node", "add", "cp-1"]) == 0
        assert (project / "cp" / "nodes.yaml").exists()

    def test_empty_name(self, project, capsys):
        assert main(["node", "add", ""]) == 1
        assert "must not be empty" in capsys.readouterr().out
        assert not (project / "nodes.yaml").exists()

    def test_numeric_cluster_round_trips(self, project, capsys):
        (project / "infra.yaml").write_text(
            "cluster: 2024\n"
            "hypervisors:\n"
            "  - name: hv-a\n"
        )
        assert main(["node", "add", "cp-1"]) == 0
        assert main(["node", "list"]) == 0

        assert "2024" in capsys.readouterr().out
        specs = decode_all((project / "nodes.yaml").read_text())
        assert [(s.name, s.cluster) for s in specs] == [("cp-1", "2024")]

    def test_encoding_failure_keeps_manifest(self, project, monkeypatch, capsys):
        assert main(["node", "add", "cp-1"]) == 0
        before = (project / "nodes.yaml").read_text()
        real_encode = codec.encode

        def encode(node_spec):
            if node_spec.name == "cp-2":
                raise yaml.representer.RepresenterError("cannot represent an object")
            return real_encode(node_spec)
        monkeypatch.setattr(codec, "encode", encode)

        assert main(["node", "add", "cp-2"]) == 1
        assert 'could not encode node "cp-2"' in capsys.readouterr().out
        assert (project / "nodes.yaml").read_text() == before


class TestHypervisorCommands:
    """Tests for `infrakit hypervisor`."""

    def test_add_and_list(self, project, capsys):
        assert main(["hypervisor", "add", "hv-b", "--endpoint", "ssh://root@10.0.0.2"]) == 0
        assert main(["hypervisor", "add", "hv-b"]) == 1

        data = yaml.safe_load((project / "infra.yaml").read_text())
        assert data["hypervisors"][-1] == {
            "name": "hv-b", "backend": "docker", "endpoint": "ssh://root@10.0.0.2"
        }

        capsys.readouterr()
        assert main(["hypervisor", "list"]) == 0
        out = capsys.readouterr().out
        assert "hv-a" in out and "hv-b" in out

    def test_add_with_unreadable_project_file(self, project, capsys):
        (project / "infra.yaml").write_text("hypervisors: [unclosed\n")

        assert main(["hypervisor", "add", "hv-b"]) == 1

        assert "Cannot read project_config configuration" in capsys.readouterr().out
        assert (project / "infra.yaml").read_text() == "hypervisors: [unclosed\n"


class TestSpecsCommand:
    """Tests for `infrakit specs`."""

    def test_prints_stream(self, project, capsys):
        main(["node", "add", "cp-1"])
        main(["node", "add", "cp-2"])
        capsys.readouterr()

        assert main(["specs"]) == 0
        out = capsys.readouterr().out
        assert out == (project / "nodes.yaml").read_text()
        assert out.count("---\n") == 2

    def test_invalid_manifest(self, project, capsys):
        (project / "nodes.yaml").write_text("apiVersion: v1\nkind: Pod\n")
        assert main(["specs"]) == 1
        assert "unsupported apiVersion" in capsys.readouterr().out


class TestReconcileCommand:
    """Tests for `infrakit reconcile`."""

    def test_reconciles_all_components(self, project):
        main(["node", "add", "cp-1"])
        with patch("infrakit.hypervisors.docker.run") as run:
            # every component is already running
            run.return_value = completed("running\n")
            assert main(["reconcile"]) == 0

        inspected = [call.args[0][-1] for call in run.call_args_list]
        assert inspected == [
            "infrakit-kube-apiserver",
            "infrakit-kube-controller-manager",
            "infrakit-kube-scheduler",
        ]

    def test_dry_run(self, project):
        main(["node", "add", "cp-1"])
        with patch("infrakit.hypervisors.docker.run") as run:
            assert main(["reconcile", "--dry-run"]) == 0
        run.assert_not_called()

    def test_unknown_hypervisor(self, project, capsys):
        (project / "nodes.yaml").write_text(
            "---\n"
            "apiVersion: cluster.infrakit.dev/v1alpha1\n"
            "kind: Node\n"
            "metadata:\n"
            "  name: cp-1\n"
            "spec:\n"
            "  hypervisor: hv-gone\n"
            "  cluster: demo\n"
            "  role: control-plane\n"
        )
        with patch("infrakit.hypervisors.docker.run") as run:
            assert main(["reconcile"]) == 1
        run.assert_not_called()
        assert "missing a hypervisor" in capsys.readouterr().out

    def test_component_failure(self, project, capsys):
        main(["node", "add", "cp-1"])
        failure = subprocess.CalledProcessError(1, ["docker", "run"], stderr="pull denied")
        with patch("infrakit.hypervisors.docker.run") as run:
            run.side_effect = [completed(returncode=1), failure]
            assert main(["reconcile"]) == 1
        # scheduler and controller manager are never inspected
        assert run.call_count == 2
        assert "pull denied" in capsys.readouterr().out

    def test_unknown_node(self, project, capsys):
        main(["node", "add", "cp-1"])
        assert main(["reconcile", "cp-9"]) == 1
        assert "Unknown nodes: cp-9" in capsys.readouterr().out


class TestConfigCommands:
    """Tests for `infrakit config`."""

    def test_set_and_get(self, project, capsys):
        assert main(["config", "set", "cluster", "prod"]) == 0

        data = yaml.safe_load((project / "infra.yaml").read_text())
        assert data == {"cluster": "prod", "hypervisors": [{"name": "hv-a", "backend": "docker"}]}

        capsys.readouterr()
        assert main(["config", "get", "cluster"]) == 0
        assert capsys.readouterr().out == "prod\n"

    def test_set_global(self, project, tmp_path):
        assert main(["config", "set", "manifest", "cp.yaml", "--global"]) == 0

        saved = yaml.safe_load((tmp_path / "home" / ".config" / "infrakit" / "config.yaml").read_text())
        assert saved == {"manifest": "cp.yaml"}
        assert main(["node", "add", "cp-1"]) == 0
        assert (project / "cp.yaml").exists()

    def test_set_invalid_log_level(self, project, capsys):
        assert main(["config", "set", "log_level", "LOUD"]) == 1
        assert "Unknown log_level" in capsys.readouterr().out
        assert "log_level" not in yaml.safe_load((project / "infra.yaml").read_text())

    def test_set_unsupported_key(self, project):
        with pytest.raises(SystemExit):
            main(["config", "set", "hypervisors", "hv-b"])

    def test_get_undefined(self, project, capsys):
        assert main(["config", "get", "nothing.here"]) == 1
        assert "is not defined" in capsys.readouterr().out


class TestLogLevel:
    """The configured log level reaches logging.basicConfig without a traceback."""

    def unconfigure_logging(self, monkeypatch):
        # Called from the test body: pytest adds its handlers when the test
        # starts, and any root handler makes basicConfig a no-op
        monkeypatch.setattr(logging.root, "handlers", [])
        monkeypatch.setattr(logging.root, "level", logging.root.level)

    def test_unknown_level(self, project, monkeypatch, capsys):
        self.unconfigure_logging(monkeypatch)
        monkeypatch.setenv("INFRAKIT_LOG_LEVEL", "LOUD")

        assert main(["node", "list"]) == 1
        assert "Unknown log_level: 'LOUD'" in capsys.readouterr().out

    def test_lowercase_level(self, project, monkeypatch):
        self.unconfigure_logging(monkeypatch)
        monkeypatch.setenv("INFRAKIT_LOG_LEVEL", "debug")

        assert main(["node", "list"]) == 0
        assert logging.root.level == logging.DEBUG

    def test_level_from_project_file(self, project, monkeypatch):
        self.unconfigure_logging(monkeypatch)
        (project / "infra.yaml").write_text("log_level: warning\n")

        assert main(["hypervisor", "list"]) == 0
        assert logging.root.level == logging.WARNING
