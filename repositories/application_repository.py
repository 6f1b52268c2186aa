"""
Sale application repository (persistence).

This module provides *only* persistence operations for the SaleApplication
domain entity on top of a ledger store. It does not enforce business rules
(e.g., the status state machine); it loads, inserts and replaces records and
maintains the role index.

Ledger layout:
- Primary record: key = applicationId, value = encoded application.
- Role index entry: key = <US><role><US><value><US><applicationId>, value = b"".
  <US> is the unit separator (U+001F), which identifiers may not contain, so
  index keys never collide with primary keys and sort before them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from domain.application import KEY_DELIMITER, SaleApplication
from domain.codec import decode_application, encode_application
from domain.errors import DecodeError
from repositories.ledger_store import LedgerStore


class IndexRole(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    INCOMING = "in"  # seller-side organization receives the application
    OUTGOING = "out"  # buyer-side organization initiates the application


@dataclass(frozen=True, slots=True)
class StoredApplication:
    """A decoded application together with the exact bytes it was read from."""

    application: SaleApplication
    raw: bytes


def index_prefix(role: IndexRole, value: str) -> str:
    return f"{KEY_DELIMITER}{role.value}{KEY_DELIMITER}{value}{KEY_DELIMITER}"


def index_key(role: IndexRole, value: str, application_id: str) -> str:
    return f"{index_prefix(role, value)}{application_id}"


def lookup_key(value: Optional[str]) -> str:
    """Form of a personal code or organization id used for indexing and matching."""

    return (value or "").strip()


def index_entries(application: SaleApplication) -> List[Tuple[IndexRole, str]]:
    """Role index entries an application belongs to."""

    buyer, seller = application.buyer, application.seller
    entries: List[Tuple[IndexRole, str]] = []
    if buyer is not None:
        entries.append((IndexRole.BUYER, lookup_key(buyer.personal_code)))
        entries.append((IndexRole.OUTGOING, lookup_key(buyer.organization_id)))
    if seller is not None:
        entries.append((IndexRole.SELLER, lookup_key(seller.personal_code)))
        entries.append((IndexRole.INCOMING, lookup_key(seller.organization_id)))
    # Values containing the delimiter cannot be indexed unambiguously.
    return [
        (role, value) for role, value in entries if value and KEY_DELIMITER not in value
    ]


class ApplicationRepository:
    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    def load(self, application_id: str) -> Optional[StoredApplication]:
        """
        Fetch an application by id.

        Returns:
            StoredApplication or None if not found

        Raises:
            DecodeError: the stored bytes are not a valid application record.
        """

        raw = self._store.get(application_id)
        if raw is None or len(raw) == 0:
            return None
        try:
            application = decode_application(raw)
        except DecodeError as exc:
            raise DecodeError(
                f"Unable to unmarshal application data received from the ledger: {exc.message}"
            ) from exc
        return StoredApplication(application=application, raw=raw)

    def insert(self, application: SaleApplication) -> bytes:
        """
        Write a new application and its index entries.

        Index entries are written first and the record last with an
        "absent" compare-and-set, so a lost race leaves at most orphaned
        index entries, which readers re-check against the record.
        """

        for role, value in index_entries(application):
            self._store.put(index_key(role, value, application.application_id), b"")

        encoded = encode_application(application)
        self._store.put(application.application_id, encoded, expected=None)
        return encoded

    def replace(self, current: StoredApplication, updated: SaleApplication) -> bytes:
        """Overwrite `current` with `updated` if the ledger still holds current.raw."""

        if updated.application_id != current.application.application_id:
            raise ValueError("application_id is immutable")
        encoded = encode_application(updated)
        self._store.put(updated.application_id, encoded, expected=current.raw)
        return encoded

    def indexed_ids(self, role: IndexRole, value: str) -> Iterator[str]:
        """Application ids listed under (role, value), ascending."""

        prefix = index_prefix(role, value)
        for key, _ in self._store.scan(prefix):
            yield key[len(prefix):]

    def iter_all(self) -> Iterator[StoredApplication]:
        """Full scan of primary records, ascending by applicationId."""

        for key, raw in self._store.scan(""):
            if key.startswith(KEY_DELIMITER) or not raw:
                continue
            yield StoredApplication(application=decode_application(raw), raw=raw)


__all__ = [
    "ApplicationRepository",
    "IndexRole",
    "StoredApplication",
    "index_entries",
    "index_key",
    "index_prefix",
    "lookup_key",
]
