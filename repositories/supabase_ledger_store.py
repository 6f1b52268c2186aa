"""
Supabase-backed ledger store.

Expected table (keep aligned with your database schema):

    create table ledger_state (
        key   text collate "C" primary key,
        value text not null
    );

The "C" collation makes `order("key")` match Python string ordering, which the
role queries rely on for ascending applicationId order.

Compare-and-set writes:
- expected=None: plain insert; a unique violation means another writer created
  the key first and is reported as Conflict.
- expected=<bytes>: update filtered on both key and current value; zero updated
  rows means the value changed underneath us and is reported as Conflict.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional, Tuple

from postgrest.exceptions import APIError

from domain.errors import Conflict, StoreError
from repositories.ledger_store import UNCHECKED, Expected, prefix_upper_bound

logger = logging.getLogger(__name__)

_UNIQUE_VIOLATION = "23505"

# Rows fetched per request while scanning.
_SCAN_PAGE_SIZE: int = 500


def _check_response(response: Any, action: str) -> list:
    error = getattr(response, "error", None)
    if error:
        raise StoreError(f"Failed to {action}: {error}")
    return getattr(response, "data", None) or []


class SupabaseLedgerStore:
    """Ledger store persisted in a Supabase (PostgREST) table."""

    def __init__(self, client: Any = None, table: Optional[str] = None) -> None:
        if client is None or table is None:
            from repositories.client import LEDGER_TABLE, get_supabase_client

            client = client if client is not None else get_supabase_client()
            table = table if table is not None else LEDGER_TABLE
        self._client = client
        self._table = table

    def get(self, key: str) -> Optional[bytes]:
        try:
            response = (
                self._client.table(self._table)
                .select("key,value")
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except APIError as exc:
            raise StoreError(f"Failed to read ledger key {key!r}: {exc}") from exc
        except Exception as exc:
            raise StoreError(f"Ledger unavailable reading key {key!r}: {exc}") from exc

        rows = _check_response(response, f"read ledger key {key!r}")
        if not rows:
            return None
        return str(rows[0]["value"]).encode("utf-8")

    def put(self, key: str, value: bytes, *, expected: Expected = UNCHECKED) -> None:
        text = value.decode("utf-8")
        try:
            table = self._client.table(self._table)
            if expected is UNCHECKED:
                response = table.upsert({"key": key, "value": text}).execute()
            elif expected is None:
                response = table.insert({"key": key, "value": text}).execute()
            else:
                response = (
                    table.update({"value": text})
                    .eq("key", key)
                    .eq("value", expected.decode("utf-8"))
                    .execute()
                )
        except APIError as exc:
            if getattr(exc, "code", None) == _UNIQUE_VIOLATION:
                logger.warning("Ledger insert conflict", extra={"ledger_key": key})
                raise Conflict(f"Key {key!r} was created concurrently") from exc
            raise StoreError(f"Failed to write ledger key {key!r}: {exc}") from exc
        except Exception as exc:
            raise StoreError(f"Ledger unavailable writing key {key!r}: {exc}") from exc

        rows = _check_response(response, f"write ledger key {key!r}")
        if isinstance(expected, bytes) and not rows:
            logger.warning("Ledger write conflict", extra={"ledger_key": key})
            raise Conflict(f"Concurrent modification detected for key {key!r}")

    def scan(self, prefix: str = "") -> Iterator[Tuple[str, bytes]]:
        upper = prefix_upper_bound(prefix)
        start = 0
        while True:
            try:
                query = self._client.table(self._table).select("key,value").gte("key", prefix)
                if upper is not None:
                    query = query.lt("key", upper)
                response = (
                    query.order("key")
                    .range(start, start + _SCAN_PAGE_SIZE - 1)
                    .execute()
                )
            except APIError as exc:
                raise StoreError(f"Failed to scan ledger prefix {prefix!r}: {exc}") from exc
            except Exception as exc:
                raise StoreError(f"Ledger unavailable scanning prefix {prefix!r}: {exc}") from exc

            rows = _check_response(response, f"scan ledger prefix {prefix!r}")
            for row in rows:
                yield str(row["key"]), str(row["value"]).encode("utf-8")

            if len(rows) < _SCAN_PAGE_SIZE:
                return
            start += _SCAN_PAGE_SIZE


__all__ = ["SupabaseLedgerStore"]
