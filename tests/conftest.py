"""
Pytest configuration for the ledger tests.

This file adds the project root to the Python path so that tests can import
from the domain, repositories, services and api packages, and provides a few
shared fixtures.
"""

import json
import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from repositories.ledger_store import InMemoryLedgerStore  # noqa: E402


@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def full_application_json() -> str:
    return json.dumps(
        {
            "applicationId": "LEP0000001",
            "seller": {
                "firstName": "Riita",
                "lastName": "Ratas",
                "personalCode": "123456789",
                "organizationId": "ORG-SELL",
            },
            "buyer": {
                "firstName": "Mari",
                "lastName": "Maasikas",
                "personalCode": "123456779",
                "organizationId": "ORG-BUY",
            },
            "vehicle": {
                "vin": "78347837483784",
                "mark": "Audi",
                "model": "A8",
                "registrationPlate": "123ABC",
            },
            "price": "30000.00",
            "status": "",
        }
    )
