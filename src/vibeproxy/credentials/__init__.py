"""Credential storage in the desktop secret service."""

from vibeproxy.credentials.store import Secret, SecretCollection, SecretItem, SecretStore

__all__ = [
    "Secret",
    "SecretCollection",
    "SecretItem",
    "SecretStore",
]
