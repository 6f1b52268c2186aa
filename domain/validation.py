"""
Domain: input validation for ledger operations.

Operations receive positional string arguments. This module turns them into
domain values or raises the matching error from `domain.errors`. Validation
never touches the ledger, so a validation failure can never leave a partial
write behind.
"""

from __future__ import annotations

from typing import Sequence

from .application import KEY_DELIMITER, SaleApplication
from .codec import dict_to_candidate, load_json_object
from .errors import ArgumentCountError, DecodeError, MissingFieldError


def require_argument_count(args: Sequence[str], expected: int, *, hint: str = "") -> None:
    if len(args) != expected:
        message = f"Incorrect number of arguments. Expecting {expected}, got {len(args)}"
        if hint:
            message = f"{message}: {hint}"
        raise ArgumentCountError(message)


def require_application_id(value: object) -> str:
    """Return the trimmed application id or raise MissingFieldError/DecodeError."""

    if value is None:
        raise MissingFieldError("Application ID is mandatory")
    if not isinstance(value, str):
        raise DecodeError(f"applicationId must be a string, got {type(value).__name__}")

    application_id = value.strip()
    if not application_id:
        raise MissingFieldError("ApplicationId not passed")
    if KEY_DELIMITER in application_id:
        raise DecodeError("applicationId must not contain U+001F")
    return application_id


def require_lookup_value(value: object, *, name: str) -> str:
    """Trimmed, non-blank value for role queries (personal code, organization id)."""

    if not isinstance(value, str) or not value.strip():
        raise MissingFieldError(f"{name} must not be blank")
    value = value.strip()
    if KEY_DELIMITER in value:
        raise DecodeError(f"{name} must not contain U+001F")
    return value


def validate_input(args: Sequence[str]) -> SaleApplication:
    """
    Parse the single JSON argument of an operation into a SaleApplication.

    Raises:
        ArgumentCountError: args does not contain exactly one element.
        DecodeError: the argument is not a JSON object matching the record schema.
        MissingFieldError: applicationId is absent or blank after trimming.
    """

    require_argument_count(
        args, 1, hint="a json string with mandatory applicationId"
    )

    candidate = dict_to_candidate(load_json_object(args[0], what="input"))
    candidate["application_id"] = require_application_id(candidate["application_id"])
    return SaleApplication(**candidate)


__all__ = [
    "require_application_id",
    "require_argument_count",
    "require_lookup_value",
    "validate_input",
]
