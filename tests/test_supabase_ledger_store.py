"""
Tests for `repositories/supabase_ledger_store.py`.

Runs the adapter against a small fake of the Supabase query builder, so no
database or credentials are needed.

Covers contract rules:
- Absent keys read as None.
- Insert-if-absent maps a unique violation to Conflict.
- Compare-and-set updates that match no row raise Conflict.
- Response errors, API errors and transport errors become StoreError.
- Scans are prefix-bounded, ordered and paged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
import pytest
from postgrest.exceptions import APIError

import repositories.supabase_ledger_store as supabase_ledger_store
from domain.errors import Conflict, StoreError
from repositories.application_repository import IndexRole, index_prefix
from repositories.supabase_ledger_store import SupabaseLedgerStore
from services.application_query_service import ApplicationQueries
from services.dispatcher import Dispatcher


@dataclass
class _Response:
    data: List[Dict[str, Any]]
    error: Optional[str] = None


@dataclass
class _Query:
    rows: Dict[str, str]
    fail_with: Optional[str] = None
    action: str = "select"
    payload: Dict[str, Any] = field(default_factory=dict)
    filters: List[Any] = field(default_factory=list)
    limit_count: Optional[int] = None
    window: Optional[tuple] = None

    def select(self, columns: str) -> "_Query":
        self.action = "select"
        return self

    def insert(self, payload: Dict[str, Any]) -> "_Query":
        self.action, self.payload = "insert", payload
        return self

    def upsert(self, payload: Dict[str, Any]) -> "_Query":
        self.action, self.payload = "upsert", payload
        return self

    def update(self, payload: Dict[str, Any]) -> "_Query":
        self.action, self.payload = "update", payload
        return self

    def eq(self, column: str, value: str) -> "_Query":
        self.filters.append(lambda row: row[column] == value)
        return self

    def gte(self, column: str, value: str) -> "_Query":
        self.filters.append(lambda row: row[column] >= value)
        return self

    def lt(self, column: str, value: str) -> "_Query":
        self.filters.append(lambda row: row[column] < value)
        return self

    def limit(self, count: int) -> "_Query":
        self.limit_count = count
        return self

    def order(self, column: str) -> "_Query":
        return self

    def range(self, start: int, end: int) -> "_Query":
        self.window = (start, end)
        return self

    def _matching(self) -> List[Dict[str, str]]:
        rows = [{"key": k, "value": v} for k, v in sorted(self.rows.items())]
        return [row for row in rows if all(f(row) for f in self.filters)]

    def execute(self) -> _Response:
        if self.fail_with:
            return _Response(data=[], error=self.fail_with)
        if self.action == "insert":
            if self.payload["key"] in self.rows:
                raise APIError({"code": "23505", "message": "duplicate key value"})
            self.rows[self.payload["key"]] = self.payload["value"]
            return _Response(data=[self.payload])
        if self.action == "upsert":
            self.rows[self.payload["key"]] = self.payload["value"]
            return _Response(data=[self.payload])
        matched = self._matching()
        if self.action == "update":
            for row in matched:
                self.rows[row["key"]] = self.payload["value"]
            return _Response(data=[{**row, **self.payload} for row in matched])
        if self.window is not None:
            matched = matched[self.window[0]:self.window[1] + 1]
        if self.limit_count is not None:
            matched = matched[: self.limit_count]
        return _Response(data=matched)


class _FakeSupabase:
    def __init__(self) -> None:
        self.rows: Dict[str, str] = {}
        self.tables: List[str] = []
        self.fail_with: Optional[str] = None

    def table(self, name: str) -> _Query:
        self.tables.append(name)
        return _Query(rows=self.rows, fail_with=self.fail_with)


@pytest.fixture
def fake() -> _FakeSupabase:
    return _FakeSupabase()


@pytest.fixture
def ledger(fake: _FakeSupabase) -> SupabaseLedgerStore:
    return SupabaseLedgerStore(client=fake, table="ledger_state")


def test_get_and_put(ledger: SupabaseLedgerStore, fake: _FakeSupabase) -> None:
    assert ledger.get("A1") is None

    ledger.put("A1", b'{"applicationId":"A1"}')

    assert ledger.get("A1") == b'{"applicationId":"A1"}'
    assert set(fake.tables) == {"ledger_state"}


def test_insert_if_absent_conflicts(ledger: SupabaseLedgerStore) -> None:
    ledger.put("A1", b"1", expected=None)

    with pytest.raises(Conflict):
        ledger.put("A1", b"2", expected=None)

    assert ledger.get("A1") == b"1"


def test_compare_and_set(ledger: SupabaseLedgerStore) -> None:
    ledger.put("A1", b"1", expected=None)
    ledger.put("A1", b"2", expected=b"1")

    with pytest.raises(Conflict):
        ledger.put("A1", b"3", expected=b"1")

    assert ledger.get("A1") == b"2"


def test_response_errors_become_store_errors(ledger: SupabaseLedgerStore, fake: _FakeSupabase) -> None:
    fake.fail_with = "connection refused"

    with pytest.raises(StoreError):
        ledger.get("A1")
    with pytest.raises(StoreError):
        ledger.put("A1", b"1")
    with pytest.raises(StoreError):
        list(ledger.scan(""))


def test_scan_pages_through_prefix(
    ledger: SupabaseLedgerStore, fake: _FakeSupabase, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(supabase_ledger_store, "_SCAN_PAGE_SIZE", 2)
    for key in ("a1", "a2", "a3", "a4", "a5", "b1"):
        fake.rows[key] = key.upper()

    assert [key for key, _ in ledger.scan("a")] == ["a1", "a2", "a3", "a4", "a5"]
    assert list(ledger.scan("b")) == [("b1", b"B1")]


def test_dispatcher_runs_on_supabase_adapter(ledger: SupabaseLedgerStore, fake: _FakeSupabase) -> None:
    dispatcher = Dispatcher(ledger)

    assert dispatcher.invoke(
        "makeApplication",
        ['{"applicationId": "A1", "buyer": {"personalCode": "B1"}}'],
    ).ok
    assert dispatcher.invoke("rejectApplication", ["A1", "rejected"]).ok

    assert index_prefix(IndexRole.BUYER, "B1") + "A1" in fake.rows
    [application] = ApplicationQueries(ledger).list_by_buyer_personal_code("B1")
    assert application.status.value == "rejected"


class _UnreachableSupabase:
    def table(self, name: str) -> _Query:
        raise httpx.ConnectError("connection refused")


def test_transport_errors_become_store_errors() -> None:
    """Verify network failures from the client surface as StoreError."""

    ledger = SupabaseLedgerStore(client=_UnreachableSupabase(), table="ledger_state")

    with pytest.raises(StoreError):
        ledger.get("A1")
    with pytest.raises(StoreError):
        ledger.put("A1", b"1", expected=None)
    with pytest.raises(StoreError):
        list(ledger.scan("A"))


def test_dispatcher_reports_unreachable_ledger_as_error() -> None:
    dispatcher = Dispatcher(SupabaseLedgerStore(client=_UnreachableSupabase(), table="ledger_state"))

    result = dispatcher.invoke("readApplication", ['{"applicationId": "A1"}'])

    assert not result.ok
    assert result.error_code == "STORE"
    assert "connection refused" in result.message
