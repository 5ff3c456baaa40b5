"""Tests for the SQLAlchemy storage collaborator."""

from datetime import date
from decimal import Decimal

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    AmountType,
    DayListRule,
    ExceptionType,
    RecurrenceTemplate,
    SavingsAccount,
    TemplateException,
    Transaction,
    TransactionType,
)


def _template(**overrides):
    fields = {
        "id": None,
        "type": TransactionType.EXPENSE,
        "company": "Insurer",
        "amount_type": AmountType.FIXED,
        "amount": Decimal("45.00"),
        "start_date": date(2024, 1, 1),
        "recurrence": DayListRule(days=(1, 15)),
    }
    fields.update(overrides)
    return RecurrenceTemplate(**fields)


def test_sqlalchemy_database_implements_interface(temp_db):
    assert isinstance(temp_db, Database)


def test_save_template_assigns_id_and_round_trips_rule(temp_db):
    saved = temp_db.save_template(_template(tags=("Insurance",)))

    loaded = temp_db.get_template(saved.id)

    assert saved.id
    assert loaded.recurrence == DayListRule(days=(1, 15))
    assert loaded.tags == ("Insurance",)
    assert loaded.created_at is not None


def test_save_template_updates_existing_row(temp_db):
    saved = temp_db.save_template(_template())

    temp_db.save_template(_template(id=saved.id, company="New Insurer"))

    assert [t.company for t in temp_db.list_templates()] == ["New Insurer"]


def test_load_active_templates(temp_db):
    active = temp_db.save_template(_template())
    temp_db.save_template(_template(company="Old", is_active=False))

    assert [t.id for t in temp_db.load_active_templates()] == [active.id]


def test_save_template_watermark(temp_db):
    saved = temp_db.save_template(_template())

    temp_db.save_template_watermark(saved.id, date(2024, 1, 15))

    assert temp_db.get_template(saved.id).last_generated == date(2024, 1, 15)


def test_delete_template(temp_db):
    saved = temp_db.save_template(_template())

    assert temp_db.delete_template(saved.id) is True
    assert temp_db.delete_template(saved.id) is False


def test_template_exceptions(temp_db):
    saved = temp_db.save_template(_template())
    temp_db.save_template_exception(
        TemplateException(
            template_id=saved.id,
            occurrence_date=date(2024, 1, 15),
            exception_type=ExceptionType.SKIP,
        )
    )
    temp_db.save_template_exception(
        TemplateException(
            template_id=saved.id,
            occurrence_date=date(2024, 1, 1),
            exception_type=ExceptionType.AMOUNT,
            modified_amount=Decimal("50"),
        )
    )

    listed = temp_db.list_template_exceptions(saved.id)

    assert [e.occurrence_date for e in listed] == [date(2024, 1, 1), date(2024, 1, 15)]
    assert temp_db.list_template_exceptions("other") == []
    assert temp_db.delete_template_exception(saved.id, date(2024, 1, 15)) is True
    assert temp_db.delete_template_exception(saved.id, date(2024, 1, 15)) is False
    assert temp_db.delete_template_exceptions(saved.id) == 1


def test_transactions_round_trip(temp_db):
    saved = temp_db.save_transaction(
        Transaction(
            id=None,
            date=date(2024, 1, 15),
            type=TransactionType.EXPENSE,
            amount=Decimal("-45.00"),
            company="Insurer",
            paid=False,
            tags=("Insurance", "Repeated"),
            template_id="tpl-1",
            is_auto_generated=True,
            notes="auto",
        )
    )

    loaded = temp_db.get_transaction(saved.id)

    assert loaded.amount == Decimal("-45.00")
    assert loaded.tags == ("Insurance", "Repeated")
    assert loaded.template_id == "tpl-1"
    assert loaded.is_auto_generated is True
    assert loaded.notes == "auto"
    assert temp_db.load_all_transactions() == [loaded]
    assert temp_db.get_transaction("missing") is None


def test_savings_accounts_round_trip(temp_db):
    saved = temp_db.save_savings_account(SavingsAccount(id=None, name="Rainy day", balance=Decimal("99.99")))
    temp_db.save_savings_account(SavingsAccount(id=None, name="Car", balance=Decimal("10.00")))

    loaded = temp_db.get_savings_account(saved.id)

    assert loaded.name == "Rainy day"
    assert loaded.balance == Decimal("99.99")
    assert loaded.created_at is not None
    assert [a.name for a in temp_db.list_savings_accounts()] == ["Car", "Rainy day"]

    temp_db.save_savings_account(SavingsAccount(id=saved.id, name="Rainy day", balance=Decimal("120.00")))
    assert temp_db.get_savings_account(saved.id).balance == Decimal("120.00")

    assert temp_db.delete_savings_account(saved.id) is True
    assert temp_db.delete_savings_account(saved.id) is False
    assert temp_db.get_savings_account("missing") is None
