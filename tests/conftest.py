"""Shared fixtures for the embedded Ansible lifecycle tests.

Every filesystem touchpoint lives under tmp_path; the supervisor, rpm
inventory, installer and liveness probe are replaced with recording fakes.
"""

import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Ensure project root is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from embedded_ansible.config import Settings
from embedded_ansible.controller import LifecycleController
from embedded_ansible.domain.models import DatabaseConnection, PackageInfo
from embedded_ansible.services.credentials import CredentialStore
from embedded_ansible.services.inventory import InventoryComposer
from embedded_ansible.services.packages import PackageInventory
from embedded_ansible.services.setup_runner import SetupInvoker
from embedded_ansible.services.supervisor import ServiceSupervisor, ServiceSupervisorAdapter
from embedded_ansible.store.record_store import MemoryCredentialRecordStore


def make_result(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    """Create a subprocess.CompletedProcess."""
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeSupervisor(ServiceSupervisor):
    def __init__(self, running: Optional[Dict[str, bool]] = None):
        self.calls: List[tuple] = []
        self.running = dict(running or {})

    def start(self, name: str) -> None:
        self.calls.append(("start", name))
        self.running[name] = True

    def stop(self, name: str) -> None:
        self.calls.append(("stop", name))
        self.running[name] = False

    def enable(self, name: str) -> None:
        self.calls.append(("enable", name))

    def disable(self, name: str) -> None:
        self.calls.append(("disable", name))

    def is_running(self, name: str) -> bool:
        self.calls.append(("is_running", name))
        return self.running.get(name, False)


class FakePackages(PackageInventory):
    def __init__(self, versions: Optional[Dict[str, str]] = None):
        super().__init__()
        self.versions = dict(versions or {})

    def list_installed(self) -> Dict[str, PackageInfo]:
        return {name: PackageInfo(name=name, version=v) for name, v in self.versions.items()}


class FakeProbe:
    url = "http://localhost:54321/api/v1/ping/"

    def __init__(self, results: Optional[List[bool]] = None, default: bool = True):
        self.results = list(results or [])
        self.default = default
        self.checks = 0

    def check(self) -> bool:
        self.checks += 1
        if self.results:
            return self.results.pop(0)
        return self.default


class FakeInstaller:
    """Stands in for subprocess.run of ansible-tower-setup."""

    def __init__(self, returncode: int = 0, stdout: str = "PLAY RECAP ok", stderr: str = ""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.commands: List[List[str]] = []
        self.inventories: List[str] = []

    def __call__(self, cmd: List[str]) -> subprocess.CompletedProcess:
        self.commands.append(cmd)
        inventory = next(a for a in cmd if a.startswith("--inventory="))
        self.inventories.append(Path(inventory.split("=", 1)[1]).read_text())
        return make_result(self.returncode, self.stdout, self.stderr)


# ---------------------------------------------------------------------------
# Settings / component fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path):
    root = tmp_path / "vmdb"
    root.mkdir()
    tower_etc = tmp_path / "etc" / "tower"
    tower_etc.mkdir(parents=True)
    (tower_etc / "settings.py").write_text("SECRET_KEY_FILE = '/etc/tower/SECRET_KEY'\n")
    return Settings(
        appliance_root=root,
        data_dir=root,
        secret_key_file=tower_etc / "SECRET_KEY",
        settings_file=tower_etc / "settings.py",
        version_file=tmp_path / "awx" / ".tower_version",
        log_dir=tmp_path / "logs",
        liveness_delay=7.0,
    )


@pytest.fixture
def records():
    return MemoryCredentialRecordStore()


@pytest.fixture
def credentials(settings, records):
    return CredentialStore(records, settings.secret_key_file)


@pytest.fixture
def installer():
    return FakeInstaller()


@pytest.fixture
def supervisor():
    return FakeSupervisor()


@pytest.fixture
def packages():
    return FakePackages(
        {"ansible-tower-server": "3.2.1", "ansible-tower-setup": "3.2.1", "bash": "4.4"}
    )


@pytest.fixture
def probe():
    return FakeProbe()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def controller(settings, credentials, installer, supervisor, packages, probe, sleeps):
    composer = InventoryComposer(credentials, DatabaseConnection())
    invoker = SetupInvoker(
        composer,
        setup_script=settings.setup_script,
        setup_complete_file=settings.setup_complete_path,
        params=settings.setup_parameters(),
        runner=installer,
    )
    services = ServiceSupervisorAdapter(supervisor, lambda: ["ansible-tower", "nginx", "supervisord"])
    return LifecycleController(
        settings,
        credentials=credentials,
        invoker=invoker,
        services=services,
        packages=packages,
        probe=probe,
        sleep=sleeps.append,
    )


def write_version(settings: Settings, version: str) -> None:
    settings.version_file.parent.mkdir(parents=True, exist_ok=True)
    settings.version_file.write_text(f"{version}\n")


def write_installer_script(path: Path, body: str) -> Path:
    """Write an executable shell script that stands in for ansible-tower-setup."""
    path.write_bytes(b"#!/bin/sh\n" + body.encode("latin-1") + b"\n")
    path.chmod(0o755)
    return path
