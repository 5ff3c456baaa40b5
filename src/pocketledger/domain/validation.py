"""Validators for recurrence templates and ad-hoc transactions.

Validators never raise. They inspect a plain mapping (the shape a caller
submits) and return every violated rule in a ``ValidationResult``.
"""

from decimal import Decimal
from typing import Any, Mapping

from pocketledger.domain.entities import AmountType, TransactionType, ValidationResult
from pocketledger.utils.date_parser import to_date

TRANSACTION_TYPES = tuple(t.value for t in TransactionType)
AMOUNT_TYPES = tuple(a.value for a in AmountType)
TEMPLATE_FREQUENCIES = ("monthly", "biweekly", "custom")


def is_number(value: Any) -> bool:
    """True for finite int/float/Decimal values; booleans are not numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    return value == value and value not in (float("inf"), float("-inf"))


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or value.strip() == ""


def _valid_date(value: Any) -> bool:
    try:
        to_date(value)
    except ValueError:
        return False
    return True


def validate_template(template: Mapping[str, Any]) -> ValidationResult:
    """Check a recurrence template before it is persisted.

    Amount signs are not checked here; they are applied when occurrences
    are materialized.
    """
    errors: list[str] = []

    type_ = template.get("type")
    if not type_:
        errors.append("Transaction type is required")
    elif type_ not in TRANSACTION_TYPES:
        errors.append(f"Transaction type must be one of: {', '.join(TRANSACTION_TYPES)}")

    if _is_blank(template.get("company")):
        errors.append("Company is required")

    amount_type = template.get("amount_type")
    if not amount_type:
        errors.append("Amount type is required")
    elif amount_type not in AMOUNT_TYPES:
        errors.append(f"Amount type must be one of: {', '.join(AMOUNT_TYPES)}")

    if amount_type == AmountType.FIXED.value:
        amount = template.get("amount")
        if amount is None:
            errors.append("Amount is required for fixed amount type")
        elif not is_number(amount) or amount == 0:
            errors.append("Amount must be a non-zero number")

    start_date = template.get("start_date")
    if not start_date:
        errors.append("Start date is required")
    elif not _valid_date(start_date):
        errors.append("Start date must be a valid date (YYYY-MM-DD)")

    end_date = template.get("end_date")
    if end_date:
        if not _valid_date(end_date):
            errors.append("End date must be a valid date (YYYY-MM-DD)")
        elif start_date and _valid_date(start_date) and to_date(end_date) < to_date(start_date):
            errors.append("End date cannot be before start date")

    pattern = template.get("recurrence_pattern")
    if not pattern:
        errors.append("Recurrence pattern is required")
    elif not isinstance(pattern, Mapping):
        errors.append("Recurrence pattern must be a mapping")
    else:
        frequency = pattern.get("frequency")
        if not frequency:
            errors.append("Recurrence frequency is required")
        elif frequency not in TEMPLATE_FREQUENCIES:
            errors.append(f"Frequency must be one of: {', '.join(TEMPLATE_FREQUENCIES)}")

        if frequency == "custom":
            interval = pattern.get("interval")
            if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
                errors.append("Interval must be at least 1 day for custom frequency")

    return ValidationResult.from_errors(errors)


def validate_transaction(transaction: Mapping[str, Any]) -> ValidationResult:
    """Check an ad-hoc transaction after its amount has been normalized.

    A zero amount is accepted only for occurrences of a repeat series whose
    amount is not known yet (``repeat`` set).
    """
    errors: list[str] = []

    date_value = transaction.get("date")
    if not date_value:
        errors.append("Date is required")
    elif not _valid_date(date_value):
        errors.append("Date must be a valid date (YYYY-MM-DD)")

    type_ = transaction.get("type")
    if not type_:
        errors.append("Transaction type is required")
    elif type_ not in TRANSACTION_TYPES:
        errors.append(f"Transaction type must be one of: {', '.join(TRANSACTION_TYPES)}")

    amount = transaction.get("amount")
    if amount is None:
        errors.append("Amount is required")
    elif not is_number(amount):
        errors.append("Amount must be a number")
    elif amount == 0 and not transaction.get("repeat"):
        errors.append("Amount must be a non-zero number")

    if _is_blank(transaction.get("company")):
        errors.append("Company is required")

    paid = transaction.get("paid")
    if paid is None:
        errors.append("Paid status is required")
    elif not isinstance(paid, bool):
        errors.append("Paid status must be a boolean")

    if is_number(amount) and amount != 0:
        if type_ == TransactionType.INCOME.value and amount < 0:
            errors.append("Income amount must be positive")
        if type_ in (TransactionType.EXPENSE.value, TransactionType.TRANSFER.value) and amount > 0:
            errors.append("Expense and Transfer amounts must be negative")

    return ValidationResult.from_errors(errors)


def validate_savings_account(account: Mapping[str, Any]) -> ValidationResult:
    """Check a savings account. Any finite balance is accepted, including zero."""
    errors: list[str] = []

    if _is_blank(account.get("name")):
        errors.append("Name is required")

    balance = account.get("balance")
    if balance is None:
        errors.append("Balance is required")
    elif not is_number(balance):
        errors.append("Balance must be a number")

    return ValidationResult.from_errors(errors)
