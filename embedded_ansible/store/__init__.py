from .record_store import (
    CredentialRecordStore,
    JsonCredentialRecordStore,
    MemoryCredentialRecordStore,
)

__all__ = ["CredentialRecordStore", "JsonCredentialRecordStore", "MemoryCredentialRecordStore"]
