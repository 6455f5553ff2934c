"""Shared fixtures for Budget Tracker tests."""

from unittest.mock import MagicMock

import pytest

from budget_tracker.audit import AuditLogger
from budget_tracker.ledger import Ledger, TransactionIdGenerator
from tests.helpers import FixedClock, RejectingStorage


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def storage():
    return RejectingStorage()


@pytest.fixture
def audit_logger():
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def ledger(storage, clock, audit_logger):
    return Ledger.load(
        storage,
        audit_logger=audit_logger,
        id_generator=TransactionIdGenerator(clock),
    )


@pytest.fixture
def salary_and_rent(ledger):
    ledger.add("salary", 5000)
    ledger.add("rent", -1500)
    return ledger
