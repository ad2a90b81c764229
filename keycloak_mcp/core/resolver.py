"""Resolution of ambiguous client identifiers.

Callers name a client either by its ``clientId`` handle or by its internal
id. Keycloak's direct lookup only accepts the internal id, so resolution
tries that first and falls back to scanning the realm's client list.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Union

from keycloak_mcp.core.keycloak import (
    AmbiguousClientError,
    ClientNotFoundError,
    KeycloakAPIError,
    RealmService,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientRecord:
    canonical_id: str
    handle: str

    @classmethod
    def from_representation(cls, rep: dict) -> Optional["ClientRecord"]:
        """Project a Keycloak client representation; None when it has no usable id."""
        if not isinstance(rep, dict):
            return None
        canonical_id = rep.get("id")
        if not canonical_id or not isinstance(canonical_id, str):
            return None
        return cls(canonical_id=canonical_id, handle=rep.get("clientId") or canonical_id)


@dataclass(frozen=True)
class Found:
    record: ClientRecord


@dataclass(frozen=True)
class NotFound:
    identifier: str


Resolution = Union[Found, NotFound]


class ClientResolver:
    """Resolve a realm-scoped client identifier to one ``ClientRecord``."""

    def __init__(self, realms: RealmService):
        self.realms = realms

    def lookup(self, realm: str, identifier: str) -> Resolution:
        """Try the direct lookup, then the list scan.

        Raises:
            AmbiguousClientError: If the scan matches more than one client
            KeycloakAPIError: If listing clients fails
        """
        resolution = self._by_canonical_id(realm, identifier)
        if isinstance(resolution, Found):
            return resolution
        return self._by_scan(realm, identifier)

    def resolve(self, realm: str, identifier: str) -> ClientRecord:
        """Like ``lookup`` but raises ``ClientNotFoundError`` instead of returning ``NotFound``."""
        resolution = self.lookup(realm, identifier)
        if isinstance(resolution, NotFound):
            raise ClientNotFoundError(realm, identifier)
        return resolution.record

    def _by_canonical_id(self, realm: str, identifier: str) -> Resolution:
        try:
            rep = self.realms.find_client_by_id(realm, identifier)
        except KeycloakAPIError as e:
            # Non-UUID identifiers can make Keycloak answer 400/500 here
            logger.debug("[resolver] Direct lookup of '%s' in '%s' failed: %s", identifier, realm, e)
            return NotFound(identifier)
        record = ClientRecord.from_representation(rep)
        return Found(record) if record else NotFound(identifier)

    def _by_scan(self, realm: str, identifier: str) -> Resolution:
        matches: list[ClientRecord] = []
        for rep in self.realms.list_clients(realm):
            if not isinstance(rep, dict) or identifier not in (rep.get("clientId"), rep.get("id")):
                continue
            record = ClientRecord.from_representation(rep)
            if record and record not in matches:
                matches.append(record)

        if not matches:
            return NotFound(identifier)
        if len(matches) > 1:
            raise AmbiguousClientError(realm, identifier, [m.canonical_id for m in matches])
        return Found(matches[0])
