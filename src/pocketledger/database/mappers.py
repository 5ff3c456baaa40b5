"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the recurrence rule
variant, which is stored as a JSON pattern document.
"""

from pocketledger.domain import entities as domain
from pocketledger.domain.recurrence import parse_recurrence, recurrence_to_dict
from pocketledger.database.models import (
    RecurringTemplate as ORMTemplate,
    SavingsAccount as ORMSavingsAccount,
    TemplateException as ORMTemplateException,
    Transaction as ORMTransaction,
)


def template_to_domain(orm_template: ORMTemplate) -> domain.RecurrenceTemplate:
    """Convert SQLAlchemy RecurringTemplate model to domain entity."""
    return domain.RecurrenceTemplate(
        id=orm_template.id,
        type=domain.TransactionType(orm_template.type),
        company=orm_template.company,
        tags=tuple(orm_template.tags or ()),
        amount_type=domain.AmountType(orm_template.amount_type),
        amount=orm_template.amount,
        estimated_amount=orm_template.estimated_amount,
        paid=orm_template.paid,
        start_date=orm_template.start_date,
        end_date=orm_template.end_date,
        recurrence=parse_recurrence(orm_template.recurrence_pattern),
        is_active=orm_template.is_active,
        last_generated=orm_template.last_generated,
        created_at=orm_template.created_at,
        updated_at=orm_template.updated_at,
    )


def apply_template(orm_template: ORMTemplate, template: domain.RecurrenceTemplate) -> None:
    """Copy domain template fields onto an ORM row."""
    orm_template.type = template.type.value
    orm_template.company = template.company
    orm_template.tags = list(template.tags)
    orm_template.amount_type = template.amount_type.value
    orm_template.amount = template.amount
    orm_template.estimated_amount = template.estimated_amount
    orm_template.paid = template.paid
    orm_template.start_date = template.start_date
    orm_template.end_date = template.end_date
    orm_template.recurrence_pattern = recurrence_to_dict(template.recurrence)
    orm_template.is_active = template.is_active
    orm_template.last_generated = template.last_generated


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        type=domain.TransactionType(orm_transaction.type),
        amount=orm_transaction.amount,
        company=orm_transaction.company,
        paid=orm_transaction.paid,
        tags=tuple(orm_transaction.tags or ()),
        template_id=orm_transaction.template_id,
        is_auto_generated=orm_transaction.is_auto_generated,
        is_pending=orm_transaction.is_pending,
        notes=orm_transaction.notes,
        created_at=orm_transaction.created_at,
    )


def apply_transaction(orm_transaction: ORMTransaction, transaction: domain.Transaction) -> None:
    """Copy domain transaction fields onto an ORM row."""
    orm_transaction.date = transaction.date
    orm_transaction.type = transaction.type.value
    orm_transaction.amount = transaction.amount
    orm_transaction.company = transaction.company
    orm_transaction.paid = transaction.paid
    orm_transaction.tags = list(transaction.tags)
    orm_transaction.template_id = transaction.template_id
    orm_transaction.is_auto_generated = transaction.is_auto_generated
    orm_transaction.is_pending = transaction.is_pending
    orm_transaction.notes = transaction.notes


def template_exception_to_domain(orm_exception: ORMTemplateException) -> domain.TemplateException:
    """Convert SQLAlchemy TemplateException model to domain entity."""
    return domain.TemplateException(
        id=orm_exception.id,
        template_id=orm_exception.template_id,
        occurrence_date=orm_exception.occurrence_date,
        exception_type=domain.ExceptionType(orm_exception.exception_type),
        modified_amount=orm_exception.modified_amount,
        modified_date=orm_exception.modified_date,
    )


def savings_account_to_domain(orm_account: ORMSavingsAccount) -> domain.SavingsAccount:
    """Convert SQLAlchemy SavingsAccount model to domain entity."""
    return domain.SavingsAccount(
        id=orm_account.id,
        name=orm_account.name,
        balance=orm_account.balance,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )
