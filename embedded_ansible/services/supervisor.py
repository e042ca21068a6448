from __future__ import annotations

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List

from ..domain.errors import ServiceControlFailure

logger = logging.getLogger(__name__)

Runner = Callable[[list[str]], subprocess.CompletedProcess]


def _run(cmd: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(
        cmd,
        text=True,
        encoding="utf-8",
        errors="replace",
        capture_output=True,
        check=False,
    )


class ServiceSupervisor(ABC):
    """One OS-managed unit at a time; calls return once the action is applied."""

    @abstractmethod
    def start(self, name: str) -> None:
        ...

    @abstractmethod
    def stop(self, name: str) -> None:
        ...

    @abstractmethod
    def enable(self, name: str) -> None:
        ...

    @abstractmethod
    def disable(self, name: str) -> None:
        ...

    @abstractmethod
    def is_running(self, name: str) -> bool:
        ...


class SystemdSupervisor(ServiceSupervisor):
    def __init__(self, runner: Runner = _run):
        self._runner = runner

    def _systemctl(self, action: str, name: str) -> None:
        try:
            cp = self._runner(["systemctl", action, name])
        except OSError as exc:
            raise ServiceControlFailure(name, action, None, str(exc)) from exc

        if cp.returncode != 0:
            raise ServiceControlFailure(
                name, action, cp.returncode, cp.stderr or cp.stdout or ""
            )

    def start(self, name: str) -> None:
        self._systemctl("start", name)

    def stop(self, name: str) -> None:
        self._systemctl("stop", name)

    def enable(self, name: str) -> None:
        self._systemctl("enable", name)

    def disable(self, name: str) -> None:
        self._systemctl("disable", name)

    def is_running(self, name: str) -> bool:
        cp = self._runner(["systemctl", "is-active", "--quiet", name])
        return cp.returncode == 0


def load_service_set(env_file: Path, variable: str, runner: Runner = _run) -> List[str]:
    """
    Source the Tower sysconfig file and return the unit names it lists.
    """
    script = f"source {shlex.quote(str(env_file))}; echo ${variable}"
    cp = runner(["bash", "-c", script])
    if cp.returncode != 0:
        raise ServiceControlFailure(variable, f"read from {env_file}", cp.returncode, cp.stderr or "")
    return cp.stdout.split()


class ServiceSupervisorAdapter:
    """
    Applies supervisor actions to every unit of the Tower service set.

    The set is re-read through `services` on every call.
    """

    def __init__(self, supervisor: ServiceSupervisor, services: Callable[[], List[str]]):
        self.supervisor = supervisor
        self._services = services

    def services(self) -> List[str]:
        return list(self._services())

    def start_and_enable_all(self) -> None:
        for name in self.services():
            logger.info("Starting and enabling %s", name)
            self.supervisor.start(name)
            self.supervisor.enable(name)

    def stop_all(self) -> None:
        for name in self.services():
            logger.info("Stopping %s", name)
            self.supervisor.stop(name)

    def stop_and_disable_all(self) -> None:
        for name in self.services():
            logger.info("Stopping and disabling %s", name)
            self.supervisor.stop(name)
            self.supervisor.disable(name)

    def all_running(self) -> bool:
        return all(self.supervisor.is_running(name) for name in self.services())
