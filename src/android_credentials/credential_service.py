"""
Credential service interface.

The remote credential service is an external collaborator: this package only
needs ``get_credentials_for_platform``. InMemoryCredentialService backs tests
and local tooling.
"""

from __future__ import annotations

from typing import Protocol

from .models import CredentialIdentity, CredentialRecord


class CredentialService(Protocol):
    """Looks up stored signing credentials by identity."""

    async def get_credentials_for_platform(
        self, identity: CredentialIdentity
    ) -> CredentialRecord | None: ...


class InMemoryCredentialService:
    """Credential records kept in a dict keyed by identity."""

    def __init__(self, records: list[CredentialRecord] | None = None):
        self._records: dict[CredentialIdentity, CredentialRecord] = {}
        for record in records or []:
            self.save(record)

    def save(self, record: CredentialRecord) -> None:
        self._records[record.identity] = record

    def delete(self, identity: CredentialIdentity) -> bool:
        return self._records.pop(identity, None) is not None

    async def get_credentials_for_platform(
        self, identity: CredentialIdentity
    ) -> CredentialRecord | None:
        return self._records.get(identity)
