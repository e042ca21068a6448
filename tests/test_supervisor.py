"""Tests for the systemd supervisor, the service set loader and the adapter."""

from unittest.mock import patch

import pytest

from embedded_ansible.domain.errors import EmbeddedAnsibleError, ServiceControlFailure
from embedded_ansible.services.supervisor import (
    ServiceSupervisorAdapter,
    SystemdSupervisor,
    load_service_set,
)

from conftest import FakeSupervisor, make_result


# ============================================================================
# TestSystemdSupervisor
# ============================================================================

class TestSystemdSupervisor:

    @pytest.mark.parametrize("action", ["start", "stop", "enable", "disable"])
    def test_actions_call_systemctl(self, action):
        calls = []
        sup = SystemdSupervisor(runner=lambda cmd: calls.append(cmd) or make_result(0))
        getattr(sup, action)("nginx")
        assert calls == [["systemctl", action, "nginx"]]

    def test_failure_raises(self):
        sup = SystemdSupervisor(runner=lambda cmd: make_result(5, "", "Unit nginx.service not found."))
        with pytest.raises(ServiceControlFailure) as exc_info:
            sup.start("nginx")

        err = exc_info.value
        assert err.service == "nginx"
        assert err.action == "start"
        assert err.exit_code == 5
        assert "not found" in err.output

    def test_missing_systemctl_raises(self):
        def runner(cmd):
            raise FileNotFoundError("systemctl")

        with pytest.raises(ServiceControlFailure):
            SystemdSupervisor(runner=runner).stop("nginx")

    def test_is_running(self):
        sup = SystemdSupervisor(runner=lambda cmd: make_result(0 if cmd[-1] == "nginx" else 3))
        assert sup.is_running("nginx") is True
        assert sup.is_running("supervisord") is False

    def test_default_runner_uses_subprocess(self):
        with patch(
            "embedded_ansible.services.supervisor.subprocess.run",
            return_value=make_result(0),
        ) as mock_run:
            SystemdSupervisor().enable("nginx")
        assert mock_run.call_args[0][0] == ["systemctl", "enable", "nginx"]


# ============================================================================
# TestLoadServiceSet
# ============================================================================

class TestLoadServiceSet:

    def test_splits_on_whitespace(self, tmp_path):
        env_file = tmp_path / "ansible-tower"
        calls = []

        def runner(cmd):
            calls.append(cmd)
            return make_result(0, "rabbitmq-server  postgresql\tnginx supervisord\n")

        assert load_service_set(env_file, "TOWER_SERVICES", runner) == [
            "rabbitmq-server", "postgresql", "nginx", "supervisord",
        ]
        assert calls[0][:2] == ["bash", "-c"]
        assert str(env_file) in calls[0][2]
        assert calls[0][2].endswith("echo $TOWER_SERVICES")

    def test_empty_variable(self, tmp_path):
        assert load_service_set(tmp_path / "x", "TOWER_SERVICES", lambda cmd: make_result(0, "\n")) == []

    def test_source_failure_raises(self, tmp_path):
        with pytest.raises(ServiceControlFailure) as exc_info:
            load_service_set(tmp_path / "x", "TOWER_SERVICES", lambda cmd: make_result(1, "", "No such file"))

        err = exc_info.value
        assert isinstance(err, EmbeddedAnsibleError)
        assert err.service == "TOWER_SERVICES"
        assert err.exit_code == 1
        assert "No such file" in err.output


# ============================================================================
# TestServiceSupervisorAdapter
# ============================================================================

class TestServiceSupervisorAdapter:

    def test_service_set_reread_each_call(self):
        sets = [["a"], ["a", "b"]]
        adapter = ServiceSupervisorAdapter(FakeSupervisor(), lambda: sets.pop(0))
        assert adapter.services() == ["a"]
        assert adapter.services() == ["a", "b"]

    def test_all_running_is_and(self):
        sup = FakeSupervisor({"a": True, "b": False})
        adapter = ServiceSupervisorAdapter(sup, lambda: ["a", "b"])
        assert adapter.all_running() is False

        sup.running["b"] = True
        assert adapter.all_running() is True

    def test_failure_propagates_unchanged(self):
        class Broken(FakeSupervisor):
            def enable(self, name):
                raise ServiceControlFailure(name, "enable", 1, "boom")

        sup = Broken()
        adapter = ServiceSupervisorAdapter(sup, lambda: ["a", "b"])

        with pytest.raises(ServiceControlFailure):
            adapter.start_and_enable_all()

        # stops at the first failure, no retry
        assert sup.calls == [("start", "a")]
