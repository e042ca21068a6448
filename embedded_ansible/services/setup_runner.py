from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..domain.errors import SetupFailure
from ..domain.models import SetupParameters, SetupResult
from .inventory import InventoryComposer

logger = logging.getLogger(__name__)


def _run(cmd: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(
        cmd,
        text=True,
        encoding="utf-8",
        errors="replace",
        capture_output=True,
        check=False,
    )


def build_setup_command(
    setup_script: str,
    params: SetupParameters,
    inventory_path: Path,
    excluded_phases: Sequence[str],
) -> List[str]:
    return [
        setup_script,
        "--",
        f"--extra-vars={params.model_dump_json()}",
        f"--inventory={inventory_path}",
        f"--skip-tags={','.join(excluded_phases)}",
    ]


class SetupInvoker:
    """
    Runs ansible-tower-setup against a freshly composed inventory.

    The only place that spawns the installer. Also owns the
    "setup completed" marker that the installer run leaves behind.
    """

    def __init__(
        self,
        composer: InventoryComposer,
        *,
        setup_script: str,
        setup_complete_file: Path,
        params: Optional[SetupParameters] = None,
        runner: Callable[[list[str]], subprocess.CompletedProcess] = _run,
    ):
        self.composer = composer
        self.setup_script = setup_script
        self.setup_complete_file = Path(setup_complete_file)
        self.params = params or SetupParameters()
        self._runner = runner

    # ----------------------------
    # Marker
    # ----------------------------

    def setup_completed(self) -> bool:
        return self.setup_complete_file.exists()

    def write_setup_completed(self) -> None:
        self.setup_complete_file.parent.mkdir(parents=True, exist_ok=True)
        self.setup_complete_file.touch()

    def clear_setup_completed(self) -> None:
        self.setup_complete_file.unlink(missing_ok=True)

    # ----------------------------
    # Installer
    # ----------------------------

    def run(self, excluded_phases: Sequence[str]) -> SetupResult:
        """
        Run the installer, skipping `excluded_phases`.

        Raises SetupFailure on a non-zero exit (or if the script cannot be
        started). Writes the marker on success.
        """
        with self.composer.inventory_file() as inventory_path:
            cmd = build_setup_command(self.setup_script, self.params, inventory_path, excluded_phases)
            logger.info(
                "Running %s (skip-tags=%s)",
                self.setup_script,
                ",".join(excluded_phases),
            )

            try:
                cp = self._runner(cmd)
            except OSError as exc:
                result = SetupResult(
                    success=False,
                    exit_code=127,
                    stdout="",
                    stderr=f"could not execute {self.setup_script}: {exc}",
                    command=cmd,
                )
            else:
                result = SetupResult(
                    success=(cp.returncode == 0),
                    exit_code=cp.returncode,
                    stdout=cp.stdout or "",
                    stderr=cp.stderr or "",
                    command=cmd,
                )

        logger.debug("%s stdout:\n%s", self.setup_script, result.stdout)
        if result.stderr:
            logger.debug("%s stderr:\n%s", self.setup_script, result.stderr)

        if not result.success:
            raise SetupFailure(result)

        self.write_setup_completed()
        logger.info("%s completed successfully", self.setup_script)
        return result
