"""Embedded Ansible configuration."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.models import DatabaseConnection, SetupParameters


class ProxySettings(BaseModel):
    host: Optional[str] = None
    port: Optional[int] = None
    scheme: str = "http"
    user: Optional[str] = None
    password: Optional[str] = None


class Settings(BaseSettings):
    """Settings loaded from EMBEDDED_ANSIBLE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDED_ANSIBLE_",
        env_nested_delimiter="__",
    )

    # Appliance detection
    appliance_root: Path = Path("/var/www/miq/vmdb")
    required_packages: list[str] = ["ansible-tower-server", "ansible-tower-setup"]
    tower_package_name: str = "ansible-tower-server"

    # Files owned by Tower
    secret_key_file: Path = Path("/etc/tower/SECRET_KEY")
    settings_file: Path = Path("/etc/tower/settings.py")
    version_file: Path = Path("/var/lib/awx/.tower_version")

    # Files owned by us
    data_dir: Path = Path("/var/www/miq/vmdb")
    setup_complete_file: Optional[Path] = None
    credentials_file: Optional[Path] = None

    # Installer
    setup_script: str = "ansible-tower-setup"
    excluded_phases: list[str] = ["packages", "migrations", "firewall"]
    http_port: int = 54321
    https_port: int = 54322

    # Services
    services_env_file: Path = Path("/etc/sysconfig/ansible-tower")
    services_variable: str = "TOWER_SERVICES"

    # Liveness
    liveness_attempts: int = 5
    liveness_delay: float = 60.0
    liveness_path: str = "/api/v1/ping/"
    liveness_timeout: float = 5.0

    # External database (None falls back to localhost:5432)
    database_host: Optional[str] = None
    database_port: Optional[int] = None

    # Proxies: the embedded_ansible scoped one wins over the global one
    scoped_http_proxy: Optional[ProxySettings] = None
    http_proxy: Optional[ProxySettings] = None

    # Logging
    log_dir: Path = Path("logs")

    @property
    def setup_complete_path(self) -> Path:
        return self.setup_complete_file or self.data_dir / "tmp" / "embedded_ansible_setup_complete"

    @property
    def credentials_path(self) -> Path:
        return self.credentials_file or self.data_dir / "data" / "embedded_ansible" / "credentials.json"

    def database_connection(self) -> DatabaseConnection:
        conn = DatabaseConnection()
        if self.database_host:
            conn.host = self.database_host
        if self.database_port:
            conn.port = self.database_port
        return conn

    def setup_parameters(self) -> SetupParameters:
        return SetupParameters(
            http_port=self.http_port,
            https_port=self.https_port,
            tower_package_name=self.tower_package_name,
        )


def _proxy_uri(proxy: Optional[ProxySettings]) -> Optional[str]:
    if proxy is None or not proxy.host:
        return None

    userinfo = ""
    if proxy.user:
        userinfo = quote(proxy.user, safe="")
        if proxy.password:
            userinfo = f"{userinfo}:{quote(proxy.password, safe='')}"
        userinfo = f"{userinfo}@"

    port = f":{proxy.port}" if proxy.port else ""
    return f"{proxy.scheme}://{userinfo}{proxy.host}{port}"


def http_proxy_uri(settings: Settings) -> Optional[str]:
    return _proxy_uri(settings.scoped_http_proxy) or _proxy_uri(settings.http_proxy)


@lru_cache
def get_settings() -> Settings:
    return Settings()
