"""
Ledger store interface and in-memory adapter.

The ledger is a plain key-value map of string keys to bytes. Adapters provide:
- get(key): current bytes or None when the key is absent
- put(key, value, expected=...): write, optionally as a compare-and-set
- scan(prefix): ascending (key, value) pairs whose key starts with prefix

Compare-and-set semantics for put:
- expected=UNCHECKED (default): unconditional write
- expected=None: the key must be absent
- expected=<bytes>: the current value must equal these bytes

A failed compare-and-set raises Conflict. Any other backend failure raises
StoreError. Adapters never cache values between calls.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterator, Optional, Protocol, Tuple, Union

from domain.errors import Conflict


class _Unchecked:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNCHECKED"


UNCHECKED = _Unchecked()

Expected = Union[bytes, None, _Unchecked]

logger = logging.getLogger(__name__)


def prefix_upper_bound(prefix: str) -> Optional[str]:
    """Smallest string greater than every string starting with prefix (None if unbounded)."""

    chars = list(prefix)
    while chars:
        last = ord(chars[-1])
        if last < 0x10FFFF:
            chars[-1] = chr(last + 1)
            return "".join(chars)
        chars.pop()
    return None


class LedgerStore(Protocol):
    def get(self, key: str) -> Optional[bytes]:
        ...

    def put(self, key: str, value: bytes, *, expected: Expected = UNCHECKED) -> None:
        ...

    def scan(self, prefix: str = "") -> Iterator[Tuple[str, bytes]]:
        ...


class InMemoryLedgerStore:
    """
    Process-local ledger store.

    A lock serializes compare-and-set writes so concurrent invocations against
    the same key detect each other instead of overwriting blindly.
    """

    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self._data: Dict[str, bytes] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: bytes, *, expected: Expected = UNCHECKED) -> None:
        with self._lock:
            if expected is not UNCHECKED:
                current = self._data.get(key)
                if current != expected:
                    logger.warning(
                        "Ledger write conflict",
                        extra={"ledger_key": key, "key_exists": current is not None},
                    )
                    raise Conflict(f"Concurrent modification detected for key {key!r}")
            self._data[key] = bytes(value)

    def scan(self, prefix: str = "") -> Iterator[Tuple[str, bytes]]:
        with self._lock:
            snapshot = sorted(
                (key, value) for key, value in self._data.items() if key.startswith(prefix)
            )
        yield from snapshot

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


__all__ = [
    "Expected",
    "InMemoryLedgerStore",
    "LedgerStore",
    "UNCHECKED",
    "prefix_upper_bound",
]
