"""Tests for TemplateService."""

from datetime import date
from decimal import Decimal

import pytest

from pocketledger.domain.entities import (
    AmountType,
    ExceptionType,
    IntervalRule,
    MonthlyRule,
    TransactionType,
)
from pocketledger.domain.errors import NotFoundError, ValidationError


def test_create_template(template_service, rent_template):
    stored = template_service.get_template(rent_template.id)

    assert stored.type == TransactionType.EXPENSE
    assert stored.company == "Landlord"
    assert stored.amount_type == AmountType.FIXED
    assert stored.amount == Decimal("1200")
    assert stored.start_date == date(2024, 1, 31)
    assert stored.recurrence == MonthlyRule()
    assert stored.tags == ("Housing",)
    assert stored.is_active is True
    assert stored.last_generated is None


def test_create_template_reports_all_errors(template_service):
    with pytest.raises(ValidationError) as excinfo:
        template_service.create_template(
            type="Expense",
            company="",
            amount_type="fixed",
            start_date="2024-01-01",
            recurrence_pattern={"frequency": "custom", "interval": 0},
        )

    assert set(excinfo.value.errors) == {
        "Company is required",
        "Amount is required for fixed amount type",
        "Interval must be at least 1 day for custom frequency",
    }
    assert template_service.list_templates() == []


def test_variable_template_keeps_estimate_only(template_service):
    template = template_service.create_template(
        type="Expense",
        company="Electric",
        amount_type="variable",
        amount=99,
        estimated_amount=80,
        start_date=date(2024, 1, 10),
        recurrence_pattern={"frequency": "custom", "interval": 30},
    )

    assert template.amount is None
    assert template.estimated_amount == Decimal("80")
    assert template.recurrence == IntervalRule(interval=30)


def test_list_templates_active_only(template_service, rent_template):
    other = template_service.create_template(
        type="Income",
        company="Employer",
        amount_type="fixed",
        amount=2000,
        start_date=date(2024, 1, 1),
        recurrence_pattern={"frequency": "biweekly"},
    )
    template_service.set_active(other.id, False)

    assert [t.id for t in template_service.list_templates()] == [other.id, rent_template.id]
    assert [t.id for t in template_service.list_templates(active_only=True)] == [rent_template.id]


def test_update_template_merges_changes(template_service, rent_template, temp_db):
    temp_db.save_template_watermark(rent_template.id, date(2024, 2, 29))

    updated = template_service.update_template(rent_template.id, amount=1250, tags=None)

    assert updated.amount == Decimal("1250")
    assert updated.tags == ("Housing",)
    assert updated.last_generated == date(2024, 2, 29)


def test_update_template_to_variable_clears_amount(template_service, rent_template):
    updated = template_service.update_template(rent_template.id, amount_type="variable")

    assert updated.amount_type == AmountType.VARIABLE
    assert updated.amount is None


def test_update_template_validates(template_service, rent_template):
    with pytest.raises(ValidationError, match="End date cannot be before start date"):
        template_service.update_template(rent_template.id, end_date=date(2023, 1, 1))


def test_update_missing_template(template_service):
    with pytest.raises(NotFoundError, match="Template missing not found"):
        template_service.update_template("missing", amount=1)


def test_delete_template_keeps_transactions(
    template_service, recurring_service, transaction_service, rent_template
):
    recurring_service.process_due(date(2024, 2, 1))
    template_service.add_exception(rent_template.id, date(2024, 2, 29), "skip")

    template_service.delete_template(rent_template.id)

    assert template_service.get_template(rent_template.id) is None
    assert template_service.list_exceptions(rent_template.id) == []
    assert len(transaction_service.list_transactions(template_id=rent_template.id)) == 1


def test_add_exception_replaces_existing(template_service, rent_template):
    template_service.add_exception(rent_template.id, date(2024, 2, 29), "skip")
    template_service.add_exception(rent_template.id, "2024-02-29", "amount", modified_amount=Decimal("900"))

    exceptions = template_service.list_exceptions(rent_template.id)

    assert len(exceptions) == 1
    assert exceptions[0].exception_type == ExceptionType.AMOUNT
    assert exceptions[0].modified_amount == Decimal("900")


def test_add_exception_validation(template_service, rent_template):
    with pytest.raises(ValidationError) as excinfo:
        template_service.add_exception(rent_template.id, "soon", "postpone")

    assert len(excinfo.value.errors) == 2

    with pytest.raises(ValidationError, match="Modified amount"):
        template_service.add_exception(rent_template.id, date(2024, 2, 29), "amount")
    with pytest.raises(ValidationError, match="Modified date"):
        template_service.add_exception(rent_template.id, date(2024, 2, 29), "date")


def test_add_exception_to_missing_template(template_service):
    with pytest.raises(NotFoundError):
        template_service.add_exception("missing", date(2024, 2, 29), "skip")


def test_remove_exception(template_service, rent_template):
    template_service.add_exception(rent_template.id, date(2024, 2, 29), "skip")

    template_service.remove_exception(rent_template.id, date(2024, 2, 29))

    assert template_service.list_exceptions(rent_template.id) == []
    with pytest.raises(NotFoundError):
        template_service.remove_exception(rent_template.id, date(2024, 2, 29))


def test_update_template_clears_end_date(template_service, rent_template):
    template_service.update_template(rent_template.id, end_date=date(2024, 6, 30))

    cleared = template_service.update_template(rent_template.id, clear_end_date=True)

    assert cleared.end_date is None
    assert template_service.get_template(rent_template.id).end_date is None


def test_update_template_leaves_end_date_when_not_given(template_service, rent_template):
    template_service.update_template(rent_template.id, end_date=date(2024, 6, 30))

    updated = template_service.update_template(rent_template.id, company="New landlord")

    assert updated.end_date == date(2024, 6, 30)
