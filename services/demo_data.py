"""
Demo data for a fresh ledger.

Seeds the demo application used in examples and manual testing:
- Application ID: 100000
- Seller: Ulvi Sädem, buyer: Pilvi Sädem
- Vehicle: Audi A8, plate 123ABS, price 100000.00
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import List

from domain.application import Person, SaleApplication, Vehicle
from repositories.application_repository import ApplicationRepository
from repositories.ledger_store import LedgerStore
from services.application_service import ApplicationLifecycle

logger = logging.getLogger(__name__)

DEMO_APPLICATION_ID = "100000"


def demo_applications() -> List[SaleApplication]:
    return [
        SaleApplication(
            application_id=DEMO_APPLICATION_ID,
            seller=Person(first_name="Ulvi", last_name="Sädem", personal_code="49104231234"),
            buyer=Person(first_name="Pilvi", last_name="Sädem", personal_code="47712121234"),
            vehicle=Vehicle(
                vin="12345678", make="audi", model="a8", registration_plate="123ABS"
            ),
            price=Decimal("100000.00"),
        ),
    ]


def seed_demo_data(store: LedgerStore) -> int:
    """
    Create the demo applications that are not in the ledger yet.

    Existing records are left untouched, so seeding twice is harmless.

    Returns:
        Number of applications created
    """

    repository = ApplicationRepository(store)
    lifecycle = ApplicationLifecycle(store)
    created = 0
    for application in demo_applications():
        if repository.load(application.application_id) is not None:
            logger.info(
                "Demo application already present",
                extra={"application_id": application.application_id},
            )
            continue
        lifecycle.create(application)
        created += 1
    return created


__all__ = ["DEMO_APPLICATION_ID", "demo_applications", "seed_demo_data"]
