"""
Shared API dependencies.

The ledger store is built once per process from LEDGER_BACKEND and shared by
every request; the dispatcher itself holds no state beyond that store.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from repositories.client import LEDGER_BACKEND
from repositories.ledger_store import InMemoryLedgerStore, LedgerStore
from services.dispatcher import Dispatcher

logger = logging.getLogger(__name__)


def build_ledger_store(backend: str) -> LedgerStore:
    """Create the ledger store for a backend name ("memory" or "supabase")."""

    if backend == "memory":
        return InMemoryLedgerStore()
    if backend == "supabase":
        from repositories.supabase_ledger_store import SupabaseLedgerStore

        return SupabaseLedgerStore()
    raise RuntimeError(
        f"Unsupported LEDGER_BACKEND: {backend!r}. Use 'memory' or 'supabase'."
    )


@lru_cache(maxsize=1)
def get_ledger_store() -> LedgerStore:
    logger.info("Using ledger backend", extra={"ledger_backend": LEDGER_BACKEND})
    return build_ledger_store(LEDGER_BACKEND)


def get_dispatcher() -> Dispatcher:
    return Dispatcher(get_ledger_store())
