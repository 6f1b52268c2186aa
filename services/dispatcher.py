"""
Named-operation dispatcher.

Maps an inbound function name plus positional string arguments onto the
lifecycle and query services, and is the only place where errors are
flattened into human-readable messages.

Response convention:
- success: status 200, payload bytes (possibly empty), no message
- failure: status 500, empty payload, error message text and error code
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

from domain.codec import application_to_dict
from domain.errors import ApplicationError
from domain.validation import require_argument_count, validate_input
from repositories.ledger_store import LedgerStore
from services.application_query_service import ApplicationQueries, ApplicationSequence
from services.application_service import ApplicationLifecycle
from services.demo_data import seed_demo_data

logger = logging.getLogger(__name__)

OK = 200
ERROR = 500


@dataclass(frozen=True, slots=True)
class InvokeResult:
    """
    Result of a dispatched operation.

    status: 200 on success, 500 on failure
    payload: operation output (empty for writes and on failure)
    message: error text (None on success)
    error_code: stable code of the error kind (None on success)
    """

    status: int
    payload: bytes = b""
    message: Optional[str] = None
    error_code: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == OK


def _success(payload: bytes = b"") -> InvokeResult:
    return InvokeResult(status=OK, payload=payload)


def _error(message: str, code: Optional[str] = None) -> InvokeResult:
    return InvokeResult(status=ERROR, message=message, error_code=code)


def _encode_sequence(applications: ApplicationSequence) -> bytes:
    items = [application_to_dict(app) for app in applications]
    return json.dumps(items, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


class Dispatcher:
    def __init__(self, store: LedgerStore) -> None:
        self._store = store
        self._lifecycle = ApplicationLifecycle(store)
        self._queries = ApplicationQueries(store)
        self._operations: Dict[str, Callable[[Sequence[str]], bytes]] = {
            "init": self._init,
            "makeTestData": self._make_test_data,
            "makeApplication": self._make_application,
            "acceptApplication": self._accept_application,
            "rejectApplication": self._reject_application,
            "cancelApplication": self._cancel_application,
            "readApplication": self._read_application,
            "getBuyerApplications": self._get_buyer_applications,
            "getSellerApplications": self._get_seller_applications,
            "getInApplications": self._get_in_applications,
            "getOutApplications": self._get_out_applications,
        }

    @property
    def operations(self) -> Sequence[str]:
        return tuple(self._operations)

    def invoke(self, function: str, args: Sequence[str]) -> InvokeResult:
        handler = self._operations.get(function)
        if handler is None:
            logger.warning("Unknown function requested", extra={"function": function})
            return _error(f"Received unknown function query: {function}", "UNKNOWN_FUNCTION")

        logger.debug("Invoking %s", function, extra={"function": function, "arg_count": len(args)})
        try:
            payload = handler(list(args))
        except ApplicationError as exc:
            logger.warning(
                "%s failed: %s",
                function,
                exc.message,
                extra={"function": function, "error_code": exc.code},
            )
            return _error(exc.message, exc.code)
        return _success(payload)

    def _init(self, args: Sequence[str]) -> bytes:
        return b""

    def _make_test_data(self, args: Sequence[str]) -> bytes:
        seed_demo_data(self._store)
        return b""

    def _make_application(self, args: Sequence[str]) -> bytes:
        self._lifecycle.create(validate_input(args))
        return b""

    def _accept_application(self, args: Sequence[str]) -> bytes:
        require_argument_count(args, 2, hint="applicationId and new status")
        self._lifecycle.accept(args[0])
        return b""

    def _reject_application(self, args: Sequence[str]) -> bytes:
        require_argument_count(args, 2, hint="applicationId and new status")
        self._lifecycle.reject(args[0])
        return b""

    def _cancel_application(self, args: Sequence[str]) -> bytes:
        require_argument_count(args, 2, hint="applicationId and new status")
        self._lifecycle.cancel(args[0])
        return b""

    def _read_application(self, args: Sequence[str]) -> bytes:
        wrapper = validate_input(args)
        return self._lifecycle.read_raw(wrapper.application_id)

    def _get_buyer_applications(self, args: Sequence[str]) -> bytes:
        require_argument_count(args, 1, hint="buyer personal code")
        return _encode_sequence(self._queries.list_by_buyer_personal_code(args[0]))

    def _get_seller_applications(self, args: Sequence[str]) -> bytes:
        require_argument_count(args, 1, hint="seller personal code")
        return _encode_sequence(self._queries.list_by_seller_personal_code(args[0]))

    def _get_in_applications(self, args: Sequence[str]) -> bytes:
        require_argument_count(args, 1, hint="organization id")
        return _encode_sequence(self._queries.list_incoming(args[0]))

    def _get_out_applications(self, args: Sequence[str]) -> bytes:
        require_argument_count(args, 1, hint="organization id")
        return _encode_sequence(self._queries.list_outgoing(args[0]))


__all__ = ["Dispatcher", "InvokeResult"]
