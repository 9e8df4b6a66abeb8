"""
Credential retrieval.

- store.py: HTTP credential store client (errors mapped to the job taxonomy)
- cache.py: TTL cache with retrying refresh
- models.py: CredentialBundle and payload validation
"""

from daily_commit.credentials.cache import CacheEntry, CacheStats, CredentialCache
from daily_commit.credentials.models import CredentialBundle, parse_credential_bundle
from daily_commit.credentials.store import CredentialStore, HttpCredentialStore

__all__ = [
    "CacheEntry",
    "CacheStats",
    "CredentialBundle",
    "CredentialCache",
    "CredentialStore",
    "HttpCredentialStore",
    "parse_credential_bundle",
]
