"""Shared pytest fixtures for pocketledger tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from pocketledger.database.factories import create_sqlite_database
from pocketledger.domain.analytics import AnalyticsService
from pocketledger.domain.entities import (
    AmountType,
    MonthlyRule,
    RecurrenceTemplate,
    TransactionType,
)
from pocketledger.domain.recurring import RecurringService
from pocketledger.domain.savings import SavingsAccountService
from pocketledger.domain.template import TemplateService
from pocketledger.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def template_service(temp_db):
    """Create a TemplateService with a temporary database."""
    return TemplateService(temp_db)


@pytest.fixture
def recurring_service(temp_db):
    """Create a RecurringService with a temporary database."""
    return RecurringService(temp_db)


@pytest.fixture
def savings_service(temp_db):
    """Create a SavingsAccountService with a temporary database."""
    return SavingsAccountService(temp_db)


@pytest.fixture
def analytics_service(temp_db):
    """Create an AnalyticsService with a temporary database."""
    return AnalyticsService(temp_db)


@pytest.fixture
def make_template():
    """Build unsaved templates with sensible defaults."""

    def _make(**overrides):
        fields = {
            "id": "tpl-1",
            "type": TransactionType.EXPENSE,
            "company": "Landlord",
            "amount_type": AmountType.FIXED,
            "amount": Decimal("1200"),
            "start_date": date(2024, 1, 31),
            "recurrence": MonthlyRule(),
        }
        fields.update(overrides)
        return RecurrenceTemplate(**fields)

    return _make


@pytest.fixture
def rent_template(template_service):
    """A saved monthly rent template starting on a month end."""
    return template_service.create_template(
        type="Expense",
        company="Landlord",
        amount_type="fixed",
        amount=Decimal("1200"),
        start_date=date(2024, 1, 31),
        recurrence_pattern={"frequency": "monthly"},
        tags=["Housing"],
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
