from __future__ import annotations

from typing import Optional

from .models import SetupResult


class EmbeddedAnsibleError(RuntimeError):
    pass


class UnavailableError(EmbeddedAnsibleError):
    """Host is not an appliance or the Tower packages are missing."""


class PackageQueryError(EmbeddedAnsibleError):
    pass


class SetupFailure(EmbeddedAnsibleError):
    """
    ansible-tower-setup exited non-zero.

    `result` keeps the captured stdout/stderr for diagnostics.
    """

    def __init__(self, result: SetupResult):
        self.result = result
        output = (result.stderr or result.stdout or "").strip()
        message = f"ansible-tower-setup failed (exit_code={result.exit_code})"
        if output:
            message = f"{message}: {output}"
        super().__init__(message)


class ServiceControlFailure(EmbeddedAnsibleError):
    def __init__(self, service: str, action: str, exit_code: Optional[int], output: str = ""):
        self.service = service
        self.action = action
        self.exit_code = exit_code
        self.output = output
        super().__init__(
            f"Failed to {action} service '{service}' (exit_code={exit_code}): {output.strip()}"
        )


class LivenessTimeout(EmbeddedAnsibleError):
    def __init__(self, attempts: int, url: str):
        self.attempts = attempts
        self.url = url
        super().__init__(
            f"EmbeddedAnsible service is not responding after setup ({attempts} checks against {url})"
        )
