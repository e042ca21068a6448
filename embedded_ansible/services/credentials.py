from __future__ import annotations

import base64
import logging
import os
import secrets
import uuid
from pathlib import Path
from typing import Callable, Optional

from ..domain.models import DEFAULT_USERIDS, Credential, CredentialRole
from ..store.record_store import CredentialRecordStore

logger = logging.getLogger(__name__)


def generate_password() -> str:
    """18 random bytes, base64 with '+' and '/' swapped for '-' and '_'."""
    raw = base64.b64encode(secrets.token_bytes(18)).decode("ascii")
    return raw.replace("+", "-").replace("/", "_")


def generate_secret_key() -> str:
    return uuid.uuid4().hex


def _write_private(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(str(path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
        f.write(content)


class CredentialStore:
    """
    Owns the generated secrets: Tower's SECRET_KEY and one login per role.

    Everything is read back from the record store on each call; nothing is
    cached here.
    """

    def __init__(
        self,
        records: CredentialRecordStore,
        secret_key_file: Path,
        *,
        password_factory: Callable[[], str] = generate_password,
        key_factory: Callable[[], str] = generate_secret_key,
    ):
        self.records = records
        self.secret_key_file = Path(secret_key_file)
        self._password_factory = password_factory
        self._key_factory = key_factory

    # ----------------------------
    # Role credentials
    # ----------------------------

    def get(self, role: CredentialRole) -> Optional[Credential]:
        return self.records.load().credentials.get(CredentialRole(role).value)

    def get_or_create(self, role: CredentialRole) -> Credential:
        role = CredentialRole(role)
        record = self.records.load()

        existing = record.credentials.get(role.value)
        if existing is not None:
            return existing

        credential = Credential(
            role=role,
            userid=DEFAULT_USERIDS.get(role, ""),
            password=self._password_factory(),
        )
        record.credentials[role.value] = credential
        self.records.save(record)
        logger.info("Generated %s credential for user '%s'", role.value, credential.userid)
        return credential

    # ----------------------------
    # SECRET_KEY
    # ----------------------------

    def stored_secret_key(self) -> Optional[str]:
        return self.records.load().secret_key or None

    def secret_key_on_file(self) -> Optional[str]:
        if not self.secret_key_file.exists():
            return None
        with self.secret_key_file.open(encoding="utf-8", errors="surrogateescape", newline="") as f:
            return f.read()

    def secret_key_matches(self) -> bool:
        key = self.stored_secret_key()
        return bool(key) and key == self.secret_key_on_file()

    def configure_secret_key(self) -> str:
        """
        Make the SECRET_KEY file and the stored key the same value.

        A stored key wins and is written out. Without one, a new key is
        written to the file and the file content is stored.
        """
        key = self.stored_secret_key()
        if key:
            logger.info("Writing stored secret key to %s", self.secret_key_file)
            _write_private(self.secret_key_file, key)
            return key

        logger.info("Generating new secret key at %s", self.secret_key_file)
        _write_private(self.secret_key_file, self._key_factory())
        key = self.secret_key_on_file()

        record = self.records.load()
        record.secret_key = key
        self.records.save(record)
        return key

    def clear_secret_key(self) -> None:
        record = self.records.load()
        record.secret_key = None
        self.records.save(record)
        logger.warning("Cleared stored secret key")
