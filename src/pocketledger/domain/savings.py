"""Savings account domain service."""

import logging
from decimal import Decimal
from typing import Optional

from pocketledger.database.base import Database
from pocketledger.domain.entities import SavingsAccount
from pocketledger.domain.errors import NotFoundError, ValidationError, savings_account_not_found
from pocketledger.domain.validation import validate_savings_account

logger = logging.getLogger(__name__)


class SavingsAccountService:
    """Service for managing savings accounts.

    Savings accounts are not part of the ledger; only their current balance
    is tracked, and it can be added to the ledger balance on request.
    """

    def __init__(self, db: Database):
        """Initialize savings account service.

        Args:
            db: Database instance
        """
        self.db = db

    def _build(self, name, balance, account_id: Optional[str] = None) -> SavingsAccount:
        result = validate_savings_account({"name": name, "balance": balance})
        if not result.valid:
            raise ValidationError(result.errors)
        return SavingsAccount(id=account_id, name=name.strip(), balance=Decimal(str(balance)))

    def create_account(self, name: str, balance: Decimal | int | float) -> SavingsAccount:
        """Create a savings account.

        Raises:
            ValidationError: If the name is blank or the balance is not a number
        """
        account = self.db.save_savings_account(self._build(name, balance))
        logger.info("Created savings account %s (%s)", account.id, account.name)
        return account

    def get_account(self, account_id: str) -> Optional[SavingsAccount]:
        """Get savings account by ID, or None if not found."""
        return self.db.get_savings_account(account_id)

    def require_account(self, account_id: str) -> SavingsAccount:
        """Get savings account by ID.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        account = self.db.get_savings_account(account_id)
        if account is None:
            raise NotFoundError(savings_account_not_found(account_id))
        return account

    def list_accounts(self) -> list[SavingsAccount]:
        """List savings accounts by name."""
        return self.db.list_savings_accounts()

    def update_account(
        self,
        account_id: str,
        name: Optional[str] = None,
        balance: Optional[Decimal | int | float] = None,
    ) -> SavingsAccount:
        """Rename an account or set its balance.

        Raises:
            NotFoundError: If the account doesn't exist
            ValidationError: If the updated account is invalid
        """
        existing = self.require_account(account_id)
        account = self._build(
            existing.name if name is None else name,
            existing.balance if balance is None else balance,
            account_id=existing.id,
        )
        return self.db.save_savings_account(account)

    def delete_account(self, account_id: str) -> None:
        """Delete a savings account.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        if not self.db.delete_savings_account(account_id):
            raise NotFoundError(savings_account_not_found(account_id))
