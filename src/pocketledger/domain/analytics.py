"""Balance analytics."""

from datetime import date
from decimal import Decimal
from typing import Iterable

from pocketledger.database.base import Database
from pocketledger.domain.entities import BalanceSummary, Transaction


def calculate_balance(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), Decimal(0))


def total_income(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions if t.amount > 0), Decimal(0))


def total_expenses(transactions: Iterable[Transaction]) -> Decimal:
    """Sum of negative amounts (the result is negative or zero)."""
    return sum((t.amount for t in transactions if t.amount < 0), Decimal(0))


class AnalyticsService:
    """Service for balance calculations."""

    def __init__(self, db: Database):
        """Initialize analytics service.

        Args:
            db: Database instance
        """
        self.db = db

    def balance(
        self, end_date: date, include_unpaid: bool = False, include_savings: bool = False
    ) -> BalanceSummary:
        """Balance of all transactions dated on or before ``end_date``.

        Args:
            end_date: Last day included
            include_unpaid: If True, unpaid transactions count too
            include_savings: If True, current savings account balances are added

        Returns:
            BalanceSummary with the balance and number of transactions
        """
        total, count = self.db.get_balance(end_date, include_unpaid=include_unpaid)
        savings = None
        if include_savings:
            savings = sum((a.balance for a in self.db.list_savings_accounts()), Decimal(0))
            total += savings
        return BalanceSummary(
            end_date=end_date,
            balance=total,
            count=count,
            include_unpaid=include_unpaid,
            savings=savings,
        )

    def period_totals(self, start_date: date, end_date: date) -> dict[str, Decimal]:
        """Income, expenses and net for transactions within a period."""
        transactions = self.db.list_transactions(start_date=start_date, end_date=end_date)
        return {
            "income": total_income(transactions),
            "expenses": total_expenses(transactions),
            "net": calculate_balance(transactions),
        }
