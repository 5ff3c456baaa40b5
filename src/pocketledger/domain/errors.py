"""Shared domain error messages and error types."""

from typing import Iterable


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic.

    Carries the full list of violated rules in ``errors``.
    """

    def __init__(self, errors: Iterable[str], message: str = "Validation failed"):
        self.errors = tuple(errors)
        detail = "; ".join(self.errors)
        super().__init__(f"{message}: {detail}" if detail else message)


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class StorageError(DomainError):
    """The storage collaborator failed to load or persist data."""


def template_not_found(template_id: str) -> str:
    """Return message for missing template."""
    return f"Template {template_id} not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def exception_not_found(template_id: str, occurrence_date) -> str:
    """Return message for missing template exception."""
    return f"No exception for template {template_id} on {occurrence_date}"


def savings_account_not_found(account_id: str) -> str:
    """Return message for missing savings account."""
    return f"Savings account {account_id} not found"
