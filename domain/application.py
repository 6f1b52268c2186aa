"""
Domain: Vehicle sale application.

Contract excerpts implemented here:
- A SaleApplication is uniquely identified by application_id, which is also its ledger key.
- application_id is immutable once the record exists.
- status is one of waiting, accepted, rejected, cancelled, finished and starts as waiting.
- Only waiting applications may change status; accepted, rejected and cancelled are terminal.
- finished is reserved for an external settlement process and is never reached here.
- Records are never deleted; terminal statuses are kept for audit.

This module contains only pure entities and rules: no I/O, no ledger access.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional

# Delimiter used by ledger index keys; never allowed inside identifiers.
KEY_DELIMITER = "\x1f"

PRICE_QUANTUM = Decimal("0.01")


class ApplicationStatus(str, Enum):
    WAITING = "waiting"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    FINISHED = "finished"


ALLOWED_TRANSITIONS: Mapping[ApplicationStatus, frozenset[ApplicationStatus]] = {
    ApplicationStatus.WAITING: frozenset(
        {
            ApplicationStatus.ACCEPTED,
            ApplicationStatus.REJECTED,
            ApplicationStatus.CANCELLED,
        }
    ),
}

TERMINAL_STATUSES = frozenset(
    {
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.CANCELLED,
        ApplicationStatus.FINISHED,
    }
)


def can_transition(*, from_status: ApplicationStatus, to_status: ApplicationStatus) -> bool:
    if from_status in TERMINAL_STATUSES:
        return False
    return to_status in ALLOWED_TRANSITIONS.get(from_status, frozenset())


def parse_price(value: Any) -> Decimal:
    """
    Parse a price into a Decimal with two fractional digits.

    Accepts JSON strings and numbers. Rejects non-numeric, non-finite, negative
    and over-precise values (more than two fractional digits) with ValueError.
    Booleans are rejected even though Python treats them as ints.
    """

    if isinstance(value, bool) or not isinstance(value, (str, int, float, Decimal)):
        raise ValueError(f"price must be a decimal string, got {type(value).__name__}")

    try:
        price = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"price is not a decimal number: {value!r}") from exc

    if not price.is_finite():
        raise ValueError(f"price must be finite: {value!r}")
    if price < 0:
        raise ValueError(f"price must not be negative: {value!r}")
    try:
        quantized = price.quantize(PRICE_QUANTUM)
    except InvalidOperation as exc:
        raise ValueError(f"price is out of range: {value!r}") from exc
    if price != quantized:
        raise ValueError(f"price has more than two fractional digits: {value!r}")

    return quantized


@dataclass(frozen=True, slots=True)
class Person:
    """Seller or buyer party, embedded by value in an application."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    personal_code: Optional[str] = None
    organization_id: Optional[str] = None  # leasing company or dealer acting for the person

    def is_empty(self) -> bool:
        return (
            self.first_name is None
            and self.last_name is None
            and self.personal_code is None
            and self.organization_id is None
        )


@dataclass(frozen=True, slots=True)
class Vehicle:
    vin: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    registration_plate: Optional[str] = None

    def is_empty(self) -> bool:
        return (
            self.vin is None
            and self.make is None
            and self.model is None
            and self.registration_plate is None
        )


@dataclass(frozen=True, slots=True)
class SaleApplication:
    """
    Aggregate record describing one proposed vehicle sale.

    Immutability:
    - The entity is frozen. Status changes produce a new instance through
      `with_status`, which enforces the transition table.

    Notes:
    - seller, buyer and vehicle are optional so that partially filled
      applications can be recorded; no business rule requires them yet.
    """

    application_id: str
    seller: Optional[Person] = None
    buyer: Optional[Person] = None
    vehicle: Optional[Vehicle] = None
    price: Optional[Decimal] = None
    status: ApplicationStatus = ApplicationStatus.WAITING

    def __post_init__(self) -> None:
        if not self.application_id or not self.application_id.strip():
            raise ValueError("application_id must not be blank")
        if KEY_DELIMITER in self.application_id:
            raise ValueError("application_id must not contain U+001F")
        for part in ("seller", "buyer", "vehicle"):
            value = getattr(self, part)
            if value is not None and value.is_empty():
                object.__setattr__(self, part, None)
        if self.price is not None:
            object.__setattr__(self, "price", parse_price(self.price))

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def with_status(self, status: ApplicationStatus) -> "SaleApplication":
        """
        Return a copy of this application moved to `status`.

        Raises ValueError when the transition table does not allow the move.
        """

        if not can_transition(from_status=self.status, to_status=status):
            raise ValueError(
                f"Application {self.application_id} cannot transition from "
                f"'{self.status.value}' to '{status.value}'"
            )
        return replace(self, status=status)


__all__ = [
    "ALLOWED_TRANSITIONS",
    "ApplicationStatus",
    "KEY_DELIMITER",
    "Person",
    "SaleApplication",
    "TERMINAL_STATUSES",
    "Vehicle",
    "can_transition",
    "parse_price",
]
