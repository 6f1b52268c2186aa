"""
Role-based application queries.

Lists applications by the caller's relationship to them:
- buyer / seller personal code
- incoming (seller-side organization) / outgoing (buyer-side organization)

Results are ApplicationSequence objects: nothing is read until iteration
starts, every iteration re-reads the ledger, and applications always come
back in ascending applicationId order.
"""

from __future__ import annotations

from typing import Callable, Iterable, Iterator, List

from domain.application import SaleApplication
from domain.validation import require_lookup_value
from repositories.application_repository import ApplicationRepository, IndexRole, lookup_key
from repositories.ledger_store import LedgerStore

Predicate = Callable[[SaleApplication], bool]


def _buyer_code(value: str) -> Predicate:
    return lambda app: app.buyer is not None and lookup_key(app.buyer.personal_code) == value


def _seller_code(value: str) -> Predicate:
    return lambda app: app.seller is not None and lookup_key(app.seller.personal_code) == value


def _seller_organization(value: str) -> Predicate:
    return lambda app: app.seller is not None and lookup_key(app.seller.organization_id) == value


def _buyer_organization(value: str) -> Predicate:
    return lambda app: app.buyer is not None and lookup_key(app.buyer.organization_id) == value


class ApplicationSequence(Iterable[SaleApplication]):
    """Lazy, restartable, ordered view over applications."""

    def __init__(self, source: Callable[[], Iterator[SaleApplication]]) -> None:
        self._source = source

    def __iter__(self) -> Iterator[SaleApplication]:
        return self._source()

    def to_list(self) -> List[SaleApplication]:
        return list(self)


class ApplicationQueries:
    def __init__(self, store: LedgerStore) -> None:
        self._repository = ApplicationRepository(store)

    def list_by_buyer_personal_code(self, code: str) -> ApplicationSequence:
        code = require_lookup_value(code, name="buyer personal code")
        return self._indexed(IndexRole.BUYER, code, _buyer_code(code))

    def list_by_seller_personal_code(self, code: str) -> ApplicationSequence:
        code = require_lookup_value(code, name="seller personal code")
        return self._indexed(IndexRole.SELLER, code, _seller_code(code))

    def list_incoming(self, organization_id: str) -> ApplicationSequence:
        organization_id = require_lookup_value(organization_id, name="organization id")
        return self._indexed(
            IndexRole.INCOMING, organization_id, _seller_organization(organization_id)
        )

    def list_outgoing(self, organization_id: str) -> ApplicationSequence:
        organization_id = require_lookup_value(organization_id, name="organization id")
        return self._indexed(
            IndexRole.OUTGOING, organization_id, _buyer_organization(organization_id)
        )

    def list_all(self) -> ApplicationSequence:
        return ApplicationSequence(
            lambda: (stored.application for stored in self._repository.iter_all())
        )

    def _indexed(self, role: IndexRole, value: str, predicate: Predicate) -> ApplicationSequence:
        def generate() -> Iterator[SaleApplication]:
            for application_id in self._repository.indexed_ids(role, value):
                stored = self._repository.load(application_id)
                # Orphaned index entries (record write lost a race) are skipped.
                if stored is not None and predicate(stored.application):
                    yield stored.application

        return ApplicationSequence(generate)


__all__ = ["ApplicationQueries", "ApplicationSequence"]
