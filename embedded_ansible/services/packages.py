from __future__ import annotations

import logging
import subprocess
from typing import Callable, Dict, Optional

from ..domain.errors import PackageQueryError
from ..domain.models import PackageInfo

logger = logging.getLogger(__name__)

QUERY_FORMAT = "%{NAME}\\t%{VERSION}\\t%{RELEASE}\\n"


def _run(cmd: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(
        cmd,
        text=True,
        encoding="utf-8",
        errors="replace",
        capture_output=True,
        check=False,
    )


class PackageInventory:
    """Installed RPMs, queried fresh on every call."""

    def __init__(self, runner: Callable[[list[str]], subprocess.CompletedProcess] = _run):
        self._runner = runner

    def list_installed(self) -> Dict[str, PackageInfo]:
        try:
            cp = self._runner(["rpm", "-qa", "--queryformat", QUERY_FORMAT])
        except OSError as exc:
            raise PackageQueryError(f"rpm query failed: {exc}") from exc

        if cp.returncode != 0:
            raise PackageQueryError(f"rpm query failed: {(cp.stderr or '').strip()}")

        packages: Dict[str, PackageInfo] = {}
        for line in cp.stdout.splitlines():
            fields = line.split("\t")
            if len(fields) < 2 or not fields[0]:
                continue
            release = fields[2] if len(fields) > 2 and fields[2] else None
            packages[fields[0]] = PackageInfo(name=fields[0], version=fields[1], release=release)

        logger.debug("Found %d installed package(s)", len(packages))
        return packages

    def version(self, name: str) -> Optional[str]:
        info = self.list_installed().get(name)
        return info.version if info else None
