from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional

from .config import Settings, get_settings, http_proxy_uri
from .domain.errors import LivenessTimeout, SetupFailure, UnavailableError
from .domain.models import ApiConnection, CredentialRole
from .health import LivenessProbe
from .lifecycle import InstallationState
from .services.credentials import CredentialStore
from .services.inventory import InventoryComposer
from .services.packages import PackageInventory
from .services.proxy_settings import update_proxy_settings
from .services.setup_runner import SetupInvoker
from .services.supervisor import ServiceSupervisorAdapter, SystemdSupervisor, load_service_set
from .store.record_store import JsonCredentialRecordStore

logger = logging.getLogger(__name__)


class LifecycleController:
    """
    Brings the embedded Tower install to a running state.

    State is never cached: every call re-reads the key file, the marker,
    the stored record and the package versions, since any of them can
    change between runs (rpm upgrades, manual cleanup).
    """

    def __init__(
        self,
        settings: Settings,
        *,
        credentials: CredentialStore,
        invoker: SetupInvoker,
        services: ServiceSupervisorAdapter,
        packages: PackageInventory,
        probe: LivenessProbe,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.credentials = credentials
        self.invoker = invoker
        self.services = services
        self.packages = packages
        self.probe = probe
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "LifecycleController":
        settings = settings or get_settings()

        credentials = CredentialStore(
            JsonCredentialRecordStore(settings.credentials_path),
            settings.secret_key_file,
        )
        composer = InventoryComposer(credentials, settings.database_connection())
        invoker = SetupInvoker(
            composer,
            setup_script=settings.setup_script,
            setup_complete_file=settings.setup_complete_path,
            params=settings.setup_parameters(),
        )
        services = ServiceSupervisorAdapter(
            SystemdSupervisor(),
            lambda: load_service_set(settings.services_env_file, settings.services_variable),
        )
        probe = LivenessProbe(
            "localhost",
            settings.http_port,
            path=settings.liveness_path,
            timeout=settings.liveness_timeout,
        )
        return cls(
            settings,
            credentials=credentials,
            invoker=invoker,
            services=services,
            packages=PackageInventory(),
            probe=probe,
        )

    # ----------------------------
    # Availability
    # ----------------------------

    def available(self) -> bool:
        if not Path(self.settings.appliance_root).exists():
            return False
        installed = set(self.packages.list_installed())
        return set(self.settings.required_packages).issubset(installed)

    def require_available(self) -> None:
        if not self.available():
            raise UnavailableError(
                "Embedded Ansible requires an appliance with "
                + ", ".join(self.settings.required_packages)
                + " installed"
            )

    # ----------------------------
    # State
    # ----------------------------

    def configured(self) -> bool:
        if not self.credentials.secret_key_file.exists():
            return False
        if not self.invoker.setup_completed():
            return False
        return self.credentials.secret_key_matches()

    def local_tower_version(self) -> Optional[str]:
        version_file = Path(self.settings.version_file)
        if not version_file.exists():
            return None
        return version_file.read_text(encoding="utf-8").strip()

    def tower_package_version(self) -> Optional[str]:
        return self.packages.version(self.settings.tower_package_name)

    def upgrade(self) -> bool:
        return self.local_tower_version() != self.tower_package_version()

    def installation_state(self) -> InstallationState:
        if not self.configured():
            return InstallationState.ABSENT
        if self.upgrade():
            return InstallationState.CONFIGURED_STALE
        return InstallationState.CONFIGURED_CURRENT

    # ----------------------------
    # Lifecycle
    # ----------------------------

    def start(self) -> None:
        state = self.installation_state()

        if state is InstallationState.CONFIGURED_CURRENT:
            logger.info("EmbeddedAnsible already configured; starting services")
            update_proxy_settings(self.settings.settings_file, http_proxy_uri(self.settings))
            self.services.start_and_enable_all()
        else:
            if state is InstallationState.CONFIGURED_STALE:
                logger.info(
                    "Upgrading EmbeddedAnsible from %s to %s",
                    self.local_tower_version(),
                    self.tower_package_version(),
                )
            else:
                logger.info("Configuring EmbeddedAnsible")
            self.credentials.configure_secret_key()
            self._run_setup()

        self.wait_until_alive()

    def _run_setup(self) -> None:
        try:
            self.invoker.run(self.settings.excluded_phases)
        except SetupFailure as e:
            logger.error("EmbeddedAnsible setup script failed with: %s", e)
            self.invoker.clear_setup_completed()
            self.credentials.clear_secret_key()
            raise

    def wait_until_alive(self) -> None:
        attempts = self.settings.liveness_attempts
        for attempt in range(1, attempts + 1):
            if self.probe.check():
                logger.info("EmbeddedAnsible is responding at %s", self.probe.url)
                return

            if attempt < attempts:
                logger.info("Waiting for EmbeddedAnsible to respond (%d/%d)", attempt, attempts)
                self._sleep(self.settings.liveness_delay)

        logger.error("EmbeddedAnsible service is not responding after setup")
        raise LivenessTimeout(attempts, self.probe.url)

    def stop(self) -> None:
        self.services.stop_all()

    def disable(self) -> None:
        self.services.stop_and_disable_all()

    def running(self) -> bool:
        return self.services.all_running()

    # ----------------------------
    # API access
    # ----------------------------

    def api_connection(self) -> ApiConnection:
        admin = self.credentials.get_or_create(CredentialRole.ADMIN)
        return ApiConnection(
            host="localhost",
            port=self.settings.http_port,
            username=admin.userid,
            password=admin.password,
        )
