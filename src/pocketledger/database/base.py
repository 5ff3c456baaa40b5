"""Abstract database interface."""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from pocketledger.domain.entities import (
    RecurrenceTemplate,
    SavingsAccount,
    TemplateException,
    Transaction,
)


class Database(ABC):
    """Abstract storage collaborator for pocketledger.

    Services receive an instance explicitly; nothing in the domain layer
    opens a connection on its own.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Template operations
    @abstractmethod
    def save_template(self, template: RecurrenceTemplate) -> RecurrenceTemplate:
        """Insert or update a template. Assigns an id when it has none."""
        pass

    @abstractmethod
    def get_template(self, template_id: str) -> Optional[RecurrenceTemplate]:
        """Get template by ID."""
        pass

    @abstractmethod
    def list_templates(self, active_only: bool = False) -> list[RecurrenceTemplate]:
        """List templates, ordered by company."""
        pass

    def load_active_templates(self) -> list[RecurrenceTemplate]:
        """List templates that may still produce occurrences."""
        return self.list_templates(active_only=True)

    @abstractmethod
    def save_template_watermark(self, template_id: str, last_generated: date) -> None:
        """Record the latest materialized occurrence date of a template."""
        pass

    @abstractmethod
    def delete_template(self, template_id: str) -> bool:
        """Delete a template. Generated transactions are left untouched."""
        pass

    # Template exception operations
    @abstractmethod
    def save_template_exception(self, exception: TemplateException) -> TemplateException:
        """Insert or replace the exception for (template_id, occurrence_date)."""
        pass

    @abstractmethod
    def list_template_exceptions(
        self, template_id: Optional[str] = None
    ) -> list[TemplateException]:
        """List exceptions, optionally for one template."""
        pass

    @abstractmethod
    def delete_template_exception(self, template_id: str, occurrence_date: date) -> bool:
        """Delete one exception. Returns False if there was none."""
        pass

    @abstractmethod
    def delete_template_exceptions(self, template_id: str) -> int:
        """Delete all exceptions of a template. Returns how many were removed."""
        pass

    # Transaction operations
    @abstractmethod
    def save_transaction(self, transaction: Transaction) -> Transaction:
        """Insert or update a transaction. Assigns an id when it has none."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        pending_only: bool = False,
        template_id: Optional[str] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first.

        Args:
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            pending_only: If True, only return transactions awaiting an amount
            template_id: Optional filter on the generating template
        """
        pass

    def load_all_transactions(self) -> list[Transaction]:
        """All transactions, used for duplicate detection."""
        return self.list_transactions()

    @abstractmethod
    def delete_transaction(self, transaction_id: str) -> bool:
        """Delete a transaction. Returns False if it did not exist."""
        pass

    # Savings account operations
    @abstractmethod
    def save_savings_account(self, account: SavingsAccount) -> SavingsAccount:
        """Insert or update a savings account. Assigns an id when it has none."""
        pass

    @abstractmethod
    def get_savings_account(self, account_id: str) -> Optional[SavingsAccount]:
        """Get savings account by ID."""
        pass

    @abstractmethod
    def list_savings_accounts(self) -> list[SavingsAccount]:
        """List savings accounts, ordered by name."""
        pass

    @abstractmethod
    def delete_savings_account(self, account_id: str) -> bool:
        """Delete a savings account. Returns False if it did not exist."""
        pass

    @abstractmethod
    def get_balance(self, end_date: date, include_unpaid: bool = False) -> tuple[Decimal, int]:
        """Sum and count of transactions dated on or before ``end_date``.

        Unpaid transactions are excluded unless ``include_unpaid`` is set.
        """
        pass
