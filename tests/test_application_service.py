"""
Tests for `services/application_service.py`.

Covers contract rules:
- create stores the record with status forced to waiting.
- create on an existing id raises Conflict and leaves the first record unchanged.
- Transitions on unknown ids raise NotFound.
- Exactly one decision succeeds on a waiting record; later ones raise InvalidTransition.
- A store-reported write conflict is surfaced as Conflict, not retried.
- Blank ids are rejected before the ledger is touched.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Optional

import pytest

from domain.application import ApplicationStatus, Person, SaleApplication
from domain.codec import encode_application
from domain.errors import Conflict, InvalidTransition, MissingFieldError, NotFound
from repositories.ledger_store import UNCHECKED, Expected, InMemoryLedgerStore
from services.application_service import ApplicationLifecycle


def _application(application_id: str = "A1", **kwargs) -> SaleApplication:
    return SaleApplication(application_id=application_id, price=Decimal("500"), **kwargs)


class _RacingStore(InMemoryLedgerStore):
    """Simulates another writer changing the record between read and write."""

    def __init__(self) -> None:
        super().__init__()
        self.interfere_with: Optional[bytes] = None

    def put(self, key: str, value: bytes, *, expected: Expected = UNCHECKED) -> None:
        if self.interfere_with is not None and expected is not UNCHECKED:
            super().put(key, self.interfere_with)
            self.interfere_with = None
        super().put(key, value, expected=expected)


class _CountingStore(InMemoryLedgerStore):
    def __init__(self) -> None:
        super().__init__()
        self.reads = 0

    def get(self, key: str) -> Optional[bytes]:
        self.reads += 1
        return super().get(key)


def test_create_then_read_returns_input_with_waiting_status(store: InMemoryLedgerStore) -> None:
    lifecycle = ApplicationLifecycle(store)
    candidate = _application(
        seller=Person(first_name="Riita", personal_code="123"),
        status=ApplicationStatus.ACCEPTED,
    )

    created = lifecycle.create(candidate)

    assert created.status is ApplicationStatus.WAITING
    assert lifecycle.read("A1") == replace(candidate, status=ApplicationStatus.WAITING)


def test_create_twice_conflicts_and_keeps_first_record(store: InMemoryLedgerStore) -> None:
    lifecycle = ApplicationLifecycle(store)
    lifecycle.create(_application())
    first_bytes = store.get("A1")

    with pytest.raises(Conflict):
        lifecycle.create(replace(_application(), price=Decimal("999")))

    assert store.get("A1") == first_bytes
    assert lifecycle.read("A1").price == Decimal("500.00")


@pytest.mark.parametrize("operation", ["accept", "reject", "cancel"])
def test_transition_on_unknown_id_is_not_found(store: InMemoryLedgerStore, operation: str) -> None:
    lifecycle = ApplicationLifecycle(store)

    with pytest.raises(NotFound):
        getattr(lifecycle, operation)("missing")

    assert len(store) == 0


@pytest.mark.parametrize(
    "operation, expected",
    [
        ("accept", ApplicationStatus.ACCEPTED),
        ("reject", ApplicationStatus.REJECTED),
        ("cancel", ApplicationStatus.CANCELLED),
    ],
)
def test_exactly_one_decision_succeeds(
    store: InMemoryLedgerStore, operation: str, expected: ApplicationStatus
) -> None:
    lifecycle = ApplicationLifecycle(store)
    lifecycle.create(_application())

    updated = getattr(lifecycle, operation)("A1")
    assert updated.status is expected
    stored_bytes = store.get("A1")

    for follow_up in ("accept", "reject", "cancel"):
        with pytest.raises(InvalidTransition):
            getattr(lifecycle, follow_up)("A1")

    assert store.get("A1") == stored_bytes
    assert lifecycle.read("A1").status is expected


def test_transition_trims_identifier(store: InMemoryLedgerStore) -> None:
    lifecycle = ApplicationLifecycle(store)
    lifecycle.create(_application())

    assert lifecycle.accept("  A1 ").status is ApplicationStatus.ACCEPTED


def test_blank_identifier_is_rejected_before_store_access() -> None:
    store = _CountingStore()
    lifecycle = ApplicationLifecycle(store)

    with pytest.raises(MissingFieldError):
        lifecycle.accept("   ")

    assert store.reads == 0


def test_concurrent_write_surfaces_conflict() -> None:
    store = _RacingStore()
    lifecycle = ApplicationLifecycle(store)
    lifecycle.create(_application())

    concurrent = encode_application(
        _application().with_status(ApplicationStatus.CANCELLED)
    )
    store.interfere_with = concurrent

    with pytest.raises(Conflict):
        lifecycle.accept("A1")

    assert store.get("A1") == concurrent


def test_concurrent_create_surfaces_conflict() -> None:
    store = _RacingStore()
    lifecycle = ApplicationLifecycle(store)
    store.interfere_with = encode_application(_application())

    with pytest.raises(Conflict):
        lifecycle.create(_application(buyer=Person(personal_code="B1")))


def test_read_raw_returns_stored_bytes(store: InMemoryLedgerStore) -> None:
    lifecycle = ApplicationLifecycle(store)
    lifecycle.create(_application())

    assert lifecycle.read_raw("A1") == (
        b'{"applicationId":"A1","price":"500.00","status":"waiting"}'
    )

    with pytest.raises(NotFound):
        lifecycle.read_raw("A2")
