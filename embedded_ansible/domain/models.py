# embedded_ansible/domain/models.py
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# -----------------------------
# Credentials
# -----------------------------

class CredentialRole(str, Enum):
    ADMIN = "admin"
    MESSAGE_BROKER = "message-broker"
    DATABASE = "database"


# Roles that Tower needs a login for, and the user id each one is created with.
DEFAULT_USERIDS: Dict[CredentialRole, str] = {
    CredentialRole.ADMIN: "admin",
    CredentialRole.MESSAGE_BROKER: "tower",
    CredentialRole.DATABASE: "awx",
}


class Credential(BaseModel):
    """
    A generated login for one role.

    Never mutated once created; a new password means a new record.
    """
    model_config = ConfigDict(frozen=True)

    role: CredentialRole
    userid: str = ""
    password: str


class CredentialRecord(BaseModel):
    """
    The single persisted record per host.

    - secret_key: Tower's SECRET_KEY, mirrored to /etc/tower/SECRET_KEY.
    - credentials: keyed by role value ("admin", "message-broker", "database").
    """

    secret_key: Optional[str] = None
    credentials: Dict[str, Credential] = Field(default_factory=dict)


# -----------------------------
# Installer input / output
# -----------------------------

class DatabaseConnection(BaseModel):
    host: str = "localhost"
    port: int = 5432


class SetupParameters(BaseModel):
    """
    Extra vars handed to ansible-tower-setup.

    Serialized to JSON only when the command line is built.
    """

    minimum_var_space: int = 0
    http_port: int = 54321
    https_port: int = 54322
    tower_package_name: str = "ansible-tower-server"


class SetupResult(BaseModel):
    success: bool
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    command: List[str] = Field(default_factory=list)


# -----------------------------
# Inventory of installed packages
# -----------------------------

class PackageInfo(BaseModel):
    name: str
    version: str
    release: Optional[str] = None


# -----------------------------
# API access
# -----------------------------

class ApiConnection(BaseModel):
    host: str = "localhost"
    port: int
    username: str
    password: str

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"
