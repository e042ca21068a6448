from .credentials import CredentialStore, generate_password, generate_secret_key
from .inventory import InventoryComposer
from .packages import PackageInventory
from .proxy_settings import update_proxy_settings
from .setup_runner import SetupInvoker
from .supervisor import ServiceSupervisor, ServiceSupervisorAdapter, SystemdSupervisor, load_service_set

__all__ = [
    "CredentialStore",
    "InventoryComposer",
    "PackageInventory",
    "ServiceSupervisor",
    "ServiceSupervisorAdapter",
    "SetupInvoker",
    "SystemdSupervisor",
    "generate_password",
    "generate_secret_key",
    "load_service_set",
    "update_proxy_settings",
]
