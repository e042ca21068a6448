from .controller import LifecycleController
from .domain.errors import (
    EmbeddedAnsibleError,
    LivenessTimeout,
    PackageQueryError,
    ServiceControlFailure,
    SetupFailure,
    UnavailableError,
)
from .lifecycle import InstallationState

__all__ = [
    "EmbeddedAnsibleError",
    "InstallationState",
    "LifecycleController",
    "LivenessTimeout",
    "PackageQueryError",
    "ServiceControlFailure",
    "SetupFailure",
    "UnavailableError",
]
