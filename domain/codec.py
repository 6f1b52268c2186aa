"""
Domain: ledger encoding of sale applications.

The ledger value for an application is a UTF-8 JSON object using the
original ledger field names (camelCase, vehicle make stored as "mark").

Encoding rules:
- Keys are written in a fixed order so repeated writes produce identical bytes.
- None fields and empty embedded objects are omitted.
- price is written as a string with two fractional digits.

Decoding ignores unknown keys. Any structural problem raises DecodeError.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

from .application import ApplicationStatus, Person, SaleApplication, Vehicle, parse_price
from .errors import DecodeError

_PERSON_FIELDS = (
    ("firstName", "first_name"),
    ("lastName", "last_name"),
    ("personalCode", "personal_code"),
    ("organizationId", "organization_id"),
)

_VEHICLE_FIELDS = (
    ("vin", "vin"),
    ("mark", "make"),
    ("model", "model"),
    ("registrationPlate", "registration_plate"),
)

# Accepted on decode only.
_VEHICLE_ALIASES = {"make": "mark"}


def _optional_str(data: Mapping[str, Any], key: str, *, where: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError(f"{where}.{key} must be a string, got {type(value).__name__}")
    return value


def _require_object(value: Any, *, where: str) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(f"{where} must be a JSON object, got {type(value).__name__}")
    return value


def _person_to_dict(person: Optional[Person]) -> Optional[Dict[str, str]]:
    if person is None or person.is_empty():
        return None
    return {
        wire: getattr(person, attr)
        for wire, attr in _PERSON_FIELDS
        if getattr(person, attr) is not None
    }


def _vehicle_to_dict(vehicle: Optional[Vehicle]) -> Optional[Dict[str, str]]:
    if vehicle is None or vehicle.is_empty():
        return None
    return {
        wire: getattr(vehicle, attr)
        for wire, attr in _VEHICLE_FIELDS
        if getattr(vehicle, attr) is not None
    }


def _dict_to_person(value: Any, *, where: str) -> Optional[Person]:
    if value is None:
        return None
    data = _require_object(value, where=where)
    person = Person(**{attr: _optional_str(data, wire, where=where) for wire, attr in _PERSON_FIELDS})
    return None if person.is_empty() else person


def _dict_to_vehicle(value: Any) -> Optional[Vehicle]:
    if value is None:
        return None
    data = dict(_require_object(value, where="vehicle"))
    for alias, wire in _VEHICLE_ALIASES.items():
        if wire not in data and alias in data:
            data[wire] = data[alias]
    vehicle = Vehicle(
        **{attr: _optional_str(data, wire, where="vehicle") for wire, attr in _VEHICLE_FIELDS}
    )
    return None if vehicle.is_empty() else vehicle


def application_to_dict(application: SaleApplication) -> Dict[str, Any]:
    """Convert a SaleApplication into its ordered wire dictionary."""

    payload: Dict[str, Any] = {"applicationId": application.application_id}

    seller = _person_to_dict(application.seller)
    if seller is not None:
        payload["seller"] = seller

    buyer = _person_to_dict(application.buyer)
    if buyer is not None:
        payload["buyer"] = buyer

    vehicle = _vehicle_to_dict(application.vehicle)
    if vehicle is not None:
        payload["vehicle"] = vehicle

    if application.price is not None:
        payload["price"] = str(application.price)

    payload["status"] = application.status.value
    return payload


def dict_to_candidate(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Convert a decoded wire object into SaleApplication keyword arguments.

    applicationId is passed through untouched (possibly missing or blank) so
    that callers can decide how to report it.
    """

    application_id = data.get("applicationId")
    if application_id is not None and not isinstance(application_id, str):
        raise DecodeError(
            f"applicationId must be a string, got {type(application_id).__name__}"
        )

    price = data.get("price")
    if price is not None and price != "":
        try:
            price = parse_price(price)
        except ValueError as exc:
            raise DecodeError(str(exc)) from exc
    else:
        price = None

    raw_status = data.get("status")
    if raw_status is None or raw_status == "":
        status = ApplicationStatus.WAITING
    else:
        try:
            status = ApplicationStatus(raw_status)
        except ValueError as exc:
            raise DecodeError(f"Unknown application status: {raw_status!r}") from exc

    return {
        "application_id": application_id,
        "seller": _dict_to_person(data.get("seller"), where="seller"),
        "buyer": _dict_to_person(data.get("buyer"), where="buyer"),
        "vehicle": _dict_to_vehicle(data.get("vehicle")),
        "price": price,
        "status": status,
    }


def load_json_object(data: bytes | str, *, what: str = "input") -> Mapping[str, Any]:
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Unable to decode {what} as UTF-8: {exc}") from exc
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Unable to unmarshal {what} JSON data: {exc}") from exc
    return _require_object(parsed, where=what)


def encode_application(application: SaleApplication) -> bytes:
    """Serialize a SaleApplication to ledger bytes."""

    return json.dumps(
        application_to_dict(application),
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def decode_application(data: bytes | str) -> SaleApplication:
    """
    Deserialize ledger bytes into a SaleApplication.

    Raises:
        DecodeError: malformed JSON, wrong field types, invalid price or
            status, or a missing/blank applicationId.
    """

    candidate = dict_to_candidate(load_json_object(data, what="application"))
    try:
        return SaleApplication(**candidate)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Invalid application record: {exc}") from exc


__all__ = [
    "application_to_dict",
    "decode_application",
    "dict_to_candidate",
    "encode_application",
    "load_json_object",
]
