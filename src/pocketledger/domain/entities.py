"""Domain model entities for pocketledger.

These are pure data classes representing business concepts, independent of
database schema. Recurrence rules are a tagged variant: every rule carries a
``kind`` discriminator and the date calculator matches on the rule type.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class TransactionType(str, Enum):
    """Direction of money movement."""

    INCOME = "Income"
    EXPENSE = "Expense"
    TRANSFER = "Transfer"


class AmountType(str, Enum):
    """Whether a template knows its amount up front."""

    FIXED = "fixed"
    VARIABLE = "variable"


class ExceptionType(str, Enum):
    """How a single template occurrence deviates from the rule."""

    SKIP = "skip"
    AMOUNT = "amount"
    DATE = "date"


REPEATED_TAG = "Repeated"


@dataclass(frozen=True)
class MonthlyRule:
    """Once a month on the anchor day (start date's day unless given)."""

    day_of_month: Optional[int] = None
    kind: str = field(default="monthly", init=False)


@dataclass(frozen=True)
class BiweeklyRule:
    """Every 14 days from the start date."""

    kind: str = field(default="biweekly", init=False)


@dataclass(frozen=True)
class IntervalRule:
    """Every ``interval`` days from the start date."""

    interval: int
    kind: str = field(default="custom", init=False)


@dataclass(frozen=True)
class WeeklyRule:
    """Every week on ``day_of_week`` (0 = Sunday .. 6 = Saturday)."""

    day_of_week: int
    kind: str = field(default="weekly", init=False)


@dataclass(frozen=True)
class DayListRule:
    """Every month on each of the listed days of month."""

    days: tuple[int, ...]
    kind: str = field(default="custom_dates", init=False)


RecurrenceRule = Union[MonthlyRule, BiweeklyRule, IntervalRule, WeeklyRule, DayListRule]


@dataclass(frozen=True)
class RecurrenceTemplate:
    """Recurring transaction template."""

    id: Optional[str]
    type: TransactionType
    company: str
    amount_type: AmountType
    start_date: date
    recurrence: RecurrenceRule
    tags: tuple[str, ...] = ()
    amount: Optional[Decimal] = None
    estimated_amount: Optional[Decimal] = None
    paid: bool = False
    end_date: Optional[date] = None
    is_active: bool = True
    last_generated: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Transaction:
    """Ledger transaction.

    ``id`` is None for drafts that have not been persisted yet.
    """

    id: Optional[str]
    date: date
    type: TransactionType
    amount: Decimal
    company: str
    paid: bool
    tags: tuple[str, ...] = ()
    template_id: Optional[str] = None
    is_auto_generated: bool = False
    is_pending: bool = False
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class TemplateException:
    """Per-occurrence override of a recurrence template."""

    template_id: str
    occurrence_date: date
    exception_type: ExceptionType
    modified_amount: Optional[Decimal] = None
    modified_date: Optional[date] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class SavingsAccount:
    """Savings account tracked alongside the ledger by its current balance."""

    id: Optional[str]
    name: str
    balance: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validator: every violated rule, not just the first."""

    valid: bool
    errors: tuple[str, ...] = ()

    @classmethod
    def from_errors(cls, errors: list[str]) -> "ValidationResult":
        return cls(valid=not errors, errors=tuple(errors))


@dataclass(frozen=True)
class BatchPlan:
    """Transactions to create and watermarks to write for one batch run."""

    created: tuple[Transaction, ...]
    watermarks: dict[str, date]
    duplicates: int = 0
    skipped: int = 0


@dataclass(frozen=True)
class ProcessFailure:
    """A transaction that could not be persisted during a batch run."""

    template_id: str
    date: date
    error: str


@dataclass(frozen=True)
class ProcessResult:
    """Observable outcome of processing due recurring transactions."""

    created: tuple[Transaction, ...]
    watermarks: dict[str, date]
    duplicates: int = 0
    skipped: int = 0
    failures: tuple[ProcessFailure, ...] = ()

    @property
    def success(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class BalanceSummary:
    """Balance of all transactions up to a date.

    ``balance`` includes ``savings`` when savings accounts were requested.
    """

    end_date: date
    balance: Decimal
    count: int
    include_unpaid: bool = False
    savings: Optional[Decimal] = None
