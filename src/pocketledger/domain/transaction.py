"""Transaction normalization, repeat expansion and the transaction service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from dateutil.relativedelta import relativedelta

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    REPEATED_TAG,
    Transaction as TransactionEntity,
    TransactionType,
)
from pocketledger.domain.errors import NotFoundError, ValidationError, transaction_not_found
from pocketledger.domain.validation import is_number, validate_transaction
from pocketledger.utils.date_parser import to_date

logger = logging.getLogger(__name__)

REPEAT_STEPS = {
    "daily": relativedelta(days=1),
    "weekly": relativedelta(weeks=1),
    "biweekly": relativedelta(weeks=2),
    "monthly": relativedelta(months=1),
    "quarterly": relativedelta(months=3),
}
MAX_REPEAT_OCCURRENCES = 1000


def apply_sign(type_: Any, amount: Decimal) -> Decimal:
    """Force the sign of ``amount`` from the transaction type.

    Income is positive, Expense and Transfer are negative. Zero stays zero.
    """
    if amount == 0:
        return Decimal(0)
    if type_ == TransactionType.INCOME.value:
        return abs(amount)
    if type_ in (TransactionType.EXPENSE.value, TransactionType.TRANSFER.value):
        return -abs(amount)
    return amount


def normalize_amount(transaction: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``transaction`` with its amount signed by type.

    The caller-supplied sign is ignored. Non-numeric amounts are left for
    the validator to report.
    """
    normalized = dict(transaction)
    amount = normalized.get("amount")
    if is_number(amount):
        normalized["amount"] = apply_sign(normalized.get("type"), Decimal(str(amount)))
    return normalized


def expand_repeat(transaction: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Expand a "repeat until" entry into one record per step.

    Steps run from ``date`` through ``repeat_until`` inclusive. Month based
    steps are measured from the first date, so a series starting on the
    31st lands on the last day of shorter months without drifting.
    Every record is normalized and validated before any is returned; one
    invalid occurrence fails the whole series.

    Raises:
        ValidationError: If the repeat settings or any occurrence is invalid
    """
    frequency = transaction.get("repeat_frequency")
    step = REPEAT_STEPS.get(frequency)
    if step is None:
        raise ValidationError(
            [f"Repeat frequency must be one of: {', '.join(REPEAT_STEPS)}"]
        )

    try:
        first = to_date(transaction.get("date"))
        until = to_date(transaction.get("repeat_until"))
    except ValueError as e:
        raise ValidationError([str(e)])
    if until < first:
        raise ValidationError(["Repeat until date cannot be before the transaction date"])

    base = {k: v for k, v in transaction.items() if k not in ("repeat_frequency", "repeat_until")}
    tags = list(base.get("tags") or [])
    if REPEATED_TAG not in tags:
        tags.append(REPEATED_TAG)

    records = []
    index = 0
    current = first
    while current <= until:
        if index >= MAX_REPEAT_OCCURRENCES:
            raise ValidationError(
                [f"Repeat would create more than {MAX_REPEAT_OCCURRENCES} transactions"]
            )
        record = normalize_amount({**base, "date": current, "tags": list(tags), "repeat": True})
        result = validate_transaction(record)
        if not result.valid:
            raise ValidationError(result.errors)
        records.append(record)
        index += 1
        current = first + step * index
    return records


def _to_entity(record: Mapping[str, Any], transaction_id: Optional[str] = None) -> TransactionEntity:
    amount = record["amount"]
    return TransactionEntity(
        id=transaction_id,
        date=to_date(record["date"]),
        type=TransactionType(record["type"]),
        amount=amount,
        company=record["company"].strip(),
        paid=record["paid"],
        tags=tuple(record.get("tags") or ()),
        template_id=record.get("template_id"),
        is_auto_generated=record.get("is_auto_generated", False),
        is_pending=record.get("is_pending", bool(record.get("repeat")) and amount == 0),
        notes=record.get("notes"),
    )


class TransactionService:
    """Service for managing ad-hoc and generated transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        date: date | str,
        type: str,
        amount: Decimal | int | float,
        company: str,
        paid: bool,
        tags: Optional[Iterable[str]] = None,
        notes: Optional[str] = None,
    ) -> TransactionEntity:
        """Create a single transaction.

        The amount is re-signed from the type before validation.

        Returns:
            The persisted transaction

        Raises:
            ValidationError: If the transaction is invalid
        """
        record = normalize_amount(
            {
                "date": date,
                "type": type,
                "amount": amount,
                "company": company,
                "paid": paid,
                "tags": list(tags or ()),
                "notes": notes,
            }
        )
        result = validate_transaction(record)
        if not result.valid:
            raise ValidationError(result.errors)
        return self.db.save_transaction(_to_entity(record))

    def create_repeated_transactions(
        self,
        date: date | str,
        type: str,
        amount: Decimal | int | float,
        company: str,
        paid: bool,
        repeat_frequency: str,
        repeat_until: date | str,
        tags: Optional[Iterable[str]] = None,
        notes: Optional[str] = None,
    ) -> list[TransactionEntity]:
        """Create one transaction per repeat step up to ``repeat_until``.

        A zero amount is allowed here and marks every occurrence as pending.
        Nothing is persisted unless every occurrence is valid.

        Raises:
            ValidationError: If the repeat settings or any occurrence is invalid
        """
        records = expand_repeat(
            {
                "date": date,
                "type": type,
                "amount": amount,
                "company": company,
                "paid": paid,
                "tags": list(tags or ()),
                "notes": notes,
                "repeat_frequency": repeat_frequency,
                "repeat_until": repeat_until,
            }
        )
        created = [self.db.save_transaction(_to_entity(record)) for record in records]
        logger.info("Created %d repeated transactions for %s", len(created), company)
        return created

    def get_transaction(self, transaction_id: str) -> Optional[TransactionEntity]:
        """Get transaction by ID, or None if not found."""
        return self.db.get_transaction(transaction_id)

    def require_transaction(self, transaction_id: str) -> TransactionEntity:
        """Get transaction by ID.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        pending_only: bool = False,
        template_id: Optional[str] = None,
    ) -> list[TransactionEntity]:
        """List transactions with filters, newest first."""
        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            pending_only=pending_only,
            template_id=template_id,
        )

    def update_transaction(
        self,
        transaction_id: str,
        date: Optional[date | str] = None,
        type: Optional[str] = None,
        amount: Optional[Decimal | int | float] = None,
        company: Optional[str] = None,
        paid: Optional[bool] = None,
        tags: Optional[Iterable[str]] = None,
        notes: Optional[str] = None,
    ) -> TransactionEntity:
        """Update the given fields of a transaction.

        The merged record is normalized and validated like a new one. A
        pending transaction keeps its zero amount until a real amount is
        set, which also clears the pending flag.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If the updated transaction is invalid
        """
        txn = self.require_transaction(transaction_id)

        record = {
            "date": txn.date if date is None else date,
            "type": txn.type.value if type is None else type,
            "amount": txn.amount if amount is None else amount,
            "company": txn.company if company is None else company,
            "paid": txn.paid if paid is None else paid,
            "tags": list(txn.tags if tags is None else tags),
            "notes": txn.notes if notes is None else notes,
            "template_id": txn.template_id,
            "is_auto_generated": txn.is_auto_generated,
        }
        record = normalize_amount(record)
        still_pending = txn.is_pending and record["amount"] == 0
        record["repeat"] = still_pending
        record["is_pending"] = still_pending

        result = validate_transaction(record)
        if not result.valid:
            raise ValidationError(result.errors)
        return self.db.save_transaction(_to_entity(record, transaction_id=txn.id))

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        if not self.db.delete_transaction(transaction_id):
            raise NotFoundError(transaction_not_found(transaction_id))
