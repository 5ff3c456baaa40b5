"""Tests for SavingsAccountService."""

from decimal import Decimal

import pytest

from pocketledger.domain.errors import NotFoundError, ValidationError


def test_create_account(savings_service):
    account = savings_service.create_account("  Emergency fund ", Decimal("1500.50"))

    assert account.id is not None
    assert account.name == "Emergency fund"
    assert account.balance == Decimal("1500.50")
    assert savings_service.get_account(account.id) == account


def test_create_account_reports_all_errors(savings_service):
    with pytest.raises(ValidationError) as exc_info:
        savings_service.create_account("", None)

    assert exc_info.value.errors == ("Name is required", "Balance is required")


def test_create_account_rejects_non_numeric_balance(savings_service):
    with pytest.raises(ValidationError, match="Balance must be a number"):
        savings_service.create_account("Holiday", "lots")


def test_zero_and_negative_balances_are_allowed(savings_service):
    assert savings_service.create_account("Empty", 0).balance == Decimal("0")
    assert savings_service.create_account("Overdrawn", -25).balance == Decimal("-25")


def test_list_accounts_sorted_by_name(savings_service):
    savings_service.create_account("Vacation", 100)
    savings_service.create_account("Car", 200)
    savings_service.create_account("House", 300)

    assert [a.name for a in savings_service.list_accounts()] == ["Car", "House", "Vacation"]


def test_update_account(savings_service):
    account = savings_service.create_account("Car", 200)

    renamed = savings_service.update_account(account.id, name="New car")
    topped_up = savings_service.update_account(account.id, balance=Decimal("450.75"))

    assert renamed.name == "New car"
    assert renamed.balance == Decimal("200")
    assert topped_up.name == "New car"
    assert topped_up.balance == Decimal("450.75")
    assert len(savings_service.list_accounts()) == 1


def test_update_account_validates(savings_service):
    account = savings_service.create_account("Car", 200)

    with pytest.raises(ValidationError, match="Name is required"):
        savings_service.update_account(account.id, name="   ")
    assert savings_service.get_account(account.id).name == "Car"


def test_update_missing_account(savings_service):
    with pytest.raises(NotFoundError, match="Savings account missing not found"):
        savings_service.update_account("missing", balance=1)


def test_delete_account(savings_service):
    account = savings_service.create_account("Car", 200)

    savings_service.delete_account(account.id)

    assert savings_service.get_account(account.id) is None
    with pytest.raises(NotFoundError, match="Savings account .* not found"):
        savings_service.delete_account(account.id)
