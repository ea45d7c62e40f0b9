"""API key storage and prompting."""

from .storage import HostStorage, MemoryStorage, SQLiteStorage
from .store import CredentialStore, credential_key, mask_secret

__all__ = [
    "CredentialStore",
    "HostStorage",
    "MemoryStorage",
    "SQLiteStorage",
    "credential_key",
    "mask_secret",
]
