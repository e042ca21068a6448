from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from ..domain.models import CredentialRecord

logger = logging.getLogger(__name__)


class CredentialRecordStore(ABC):
    """
    Persistence for the one credential record a host has.

    Implementations return a copy from load(); changes only stick through save().
    """

    @abstractmethod
    def load(self) -> CredentialRecord:
        ...

    @abstractmethod
    def save(self, record: CredentialRecord) -> None:
        ...


class MemoryCredentialRecordStore(CredentialRecordStore):
    def __init__(self, record: CredentialRecord | None = None):
        self._record = record.model_copy(deep=True) if record else CredentialRecord()

    def load(self) -> CredentialRecord:
        return self._record.model_copy(deep=True)

    def save(self, record: CredentialRecord) -> None:
        self._record = record.model_copy(deep=True)


class JsonCredentialRecordStore(CredentialRecordStore):
    """
    Handles reading/writing the credential record JSON file atomically.

    The file holds plaintext passwords, so it is written with mode 0600.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def load(self) -> CredentialRecord:
        with self._lock:
            if not self.path.exists():
                logger.debug("No credential record at %s; starting empty", self.path)
                return CredentialRecord()

            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
                return CredentialRecord.model_validate(raw)
            except Exception as e:
                logger.error("Failed to load credential record %s: %s", self.path, e)
                raise RuntimeError(f"Failed to load credential record {self.path}: {e}") from e

    def save(self, record: CredentialRecord) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(record.model_dump(mode="json"), indent=2)

            fd, tmp_name = tempfile.mkstemp(prefix=".credentials-", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
            logger.debug("Saved credential record to %s", self.path)
