"""
Application lifecycle service.

Handles:
- Creating applications (reject on existing id, status forced to waiting)
- Status transitions waiting -> accepted / rejected / cancelled
- Reading applications by id

Every transition follows the same steps:
1. Validate the identifier (no ledger access on failure)
2. Load the current record
3. Check the transition table
4. Compare-and-set the updated record against the bytes read in step 2

The service keeps no state of its own between calls; the ledger store is the
only source of truth. Store conflicts are surfaced as Conflict, never retried.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from domain.application import ApplicationStatus, SaleApplication
from domain.errors import Conflict, InvalidTransition, NotFound
from domain.validation import require_application_id
from repositories.application_repository import ApplicationRepository, StoredApplication
from repositories.ledger_store import LedgerStore

logger = logging.getLogger(__name__)


class ApplicationLifecycle:
    def __init__(self, store: LedgerStore) -> None:
        self._repository = ApplicationRepository(store)

    def create(self, candidate: SaleApplication) -> SaleApplication:
        """
        Store a new application with status waiting.

        Any status supplied by the caller is ignored.

        Raises:
            Conflict: an application with the same id already exists, or one
                was created concurrently.
        """

        application_id = require_application_id(candidate.application_id)
        if self._repository.load(application_id) is not None:
            logger.warning(
                "Application already exists",
                extra={"application_id": application_id},
            )
            raise Conflict(f"Application {application_id} already exists")

        application = replace(
            candidate, application_id=application_id, status=ApplicationStatus.WAITING
        )
        self._repository.insert(application)

        logger.info("Application created", extra={"application_id": application_id})
        return application

    def read(self, application_id: str) -> SaleApplication:
        return self._load(application_id).application

    def read_raw(self, application_id: str) -> bytes:
        """Stored ledger bytes for the application, verbatim."""

        return self._load(application_id).raw

    def accept(self, application_id: str) -> SaleApplication:
        return self._transition(application_id, ApplicationStatus.ACCEPTED)

    def reject(self, application_id: str) -> SaleApplication:
        return self._transition(application_id, ApplicationStatus.REJECTED)

    def cancel(self, application_id: str) -> SaleApplication:
        return self._transition(application_id, ApplicationStatus.CANCELLED)

    def _load(self, application_id: str) -> StoredApplication:
        application_id = require_application_id(application_id)
        stored = self._repository.load(application_id)
        if stored is None:
            raise NotFound(f"Application {application_id} not found")
        return stored

    def _transition(self, application_id: str, target: ApplicationStatus) -> SaleApplication:
        stored = self._load(application_id)
        current = stored.application

        try:
            updated = current.with_status(target)
        except ValueError as exc:
            logger.warning(
                "Rejected status transition",
                extra={
                    "application_id": current.application_id,
                    "from_status": current.status.value,
                    "to_status": target.value,
                },
            )
            raise InvalidTransition(str(exc)) from exc

        self._repository.replace(stored, updated)

        logger.info(
            "Application status changed",
            extra={
                "application_id": current.application_id,
                "from_status": current.status.value,
                "to_status": target.value,
            },
        )
        return updated


__all__ = ["ApplicationLifecycle"]
