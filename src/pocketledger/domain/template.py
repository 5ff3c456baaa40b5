"""Recurrence template domain service."""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    AmountType,
    ExceptionType,
    RecurrenceTemplate,
    TemplateException,
    TransactionType,
)
from pocketledger.domain.errors import (
    NotFoundError,
    ValidationError,
    exception_not_found,
    template_not_found,
)
from pocketledger.domain.recurrence import parse_recurrence, recurrence_to_dict
from pocketledger.domain.validation import is_number, validate_template
from pocketledger.utils.date_parser import to_date

logger = logging.getLogger(__name__)


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value))


def template_to_dict(template: RecurrenceTemplate) -> dict[str, Any]:
    """Flatten a template into the mapping shape the validator checks."""
    return {
        "type": template.type.value,
        "company": template.company,
        "tags": list(template.tags),
        "amount_type": template.amount_type.value,
        "amount": template.amount,
        "estimated_amount": template.estimated_amount,
        "paid": template.paid,
        "start_date": template.start_date,
        "end_date": template.end_date,
        "recurrence_pattern": recurrence_to_dict(template.recurrence),
        "is_active": template.is_active,
    }


class TemplateService:
    """Service for managing recurrence templates and their exceptions."""

    def __init__(self, db: Database):
        """Initialize template service.

        Args:
            db: Database instance
        """
        self.db = db

    def _build(self, data: Mapping[str, Any], existing: Optional[RecurrenceTemplate] = None) -> RecurrenceTemplate:
        result = validate_template(data)
        if not result.valid:
            raise ValidationError(result.errors)

        amount_type = AmountType(data["amount_type"])
        amount = _decimal(data.get("amount")) if amount_type == AmountType.FIXED else None
        estimated = data.get("estimated_amount")
        if amount_type == AmountType.VARIABLE and estimated is not None:
            if not is_number(estimated):
                raise ValidationError(["Estimated amount must be a number"])
            estimated = _decimal(estimated)
        else:
            estimated = None

        try:
            recurrence = parse_recurrence(data["recurrence_pattern"])
        except ValueError as e:
            raise ValidationError([str(e)])

        end_date = data.get("end_date")
        return RecurrenceTemplate(
            id=existing.id if existing else None,
            type=TransactionType(data["type"]),
            company=data["company"].strip(),
            tags=tuple(data.get("tags") or ()),
            amount_type=amount_type,
            amount=amount,
            estimated_amount=estimated,
            paid=bool(data.get("paid", False)),
            start_date=to_date(data["start_date"]),
            end_date=to_date(end_date) if end_date else None,
            recurrence=recurrence,
            is_active=bool(data.get("is_active", True)),
            last_generated=existing.last_generated if existing else None,
        )

    def create_template(
        self,
        type: str,
        company: str,
        amount_type: str,
        start_date: date | str,
        recurrence_pattern: Mapping[str, Any],
        amount: Optional[Decimal | int | float] = None,
        estimated_amount: Optional[Decimal | int | float] = None,
        tags: Optional[Iterable[str]] = None,
        paid: bool = False,
        end_date: Optional[date | str] = None,
        is_active: bool = True,
    ) -> RecurrenceTemplate:
        """Create a recurrence template.

        Returns:
            The persisted template, with no watermark yet

        Raises:
            ValidationError: If the template is invalid
        """
        template = self._build(
            {
                "type": type,
                "company": company,
                "amount_type": amount_type,
                "amount": amount,
                "estimated_amount": estimated_amount,
                "tags": list(tags or ()),
                "paid": paid,
                "start_date": start_date,
                "end_date": end_date,
                "recurrence_pattern": recurrence_pattern,
                "is_active": is_active,
            }
        )
        saved = self.db.save_template(template)
        logger.info("Created template %s for %s", saved.id, saved.company)
        return saved

    def get_template(self, template_id: str) -> Optional[RecurrenceTemplate]:
        """Get template by ID, or None if not found."""
        return self.db.get_template(template_id)

    def require_template(self, template_id: str) -> RecurrenceTemplate:
        """Get template by ID.

        Raises:
            NotFoundError: If the template doesn't exist
        """
        template = self.db.get_template(template_id)
        if template is None:
            raise NotFoundError(template_not_found(template_id))
        return template

    def list_templates(self, active_only: bool = False) -> list[RecurrenceTemplate]:
        """List templates, optionally only the active ones."""
        return self.db.list_templates(active_only=active_only)

    def update_template(
        self, template_id: str, clear_end_date: bool = False, **changes: Any
    ) -> RecurrenceTemplate:
        """Update template fields.

        Accepts the keyword arguments of ``create_template``; None values
        leave a field unchanged. Set ``clear_end_date`` to remove the end
        date. The merged template is validated again; its watermark is
        preserved.

        Note that changing ``company`` changes the duplicate-detection key
        of future occurrences.

        Raises:
            NotFoundError: If the template doesn't exist
            ValidationError: If the updated template is invalid
        """
        existing = self.require_template(template_id)
        data = template_to_dict(existing)
        data.update({k: v for k, v in changes.items() if v is not None})
        if changes.get("amount_type") == AmountType.VARIABLE.value:
            data["amount"] = None
        if clear_end_date:
            data["end_date"] = None
        return self.db.save_template(self._build(data, existing=existing))

    def set_active(self, template_id: str, is_active: bool) -> RecurrenceTemplate:
        """Activate or deactivate a template.

        Raises:
            NotFoundError: If the template doesn't exist
        """
        existing = self.require_template(template_id)
        return self.db.save_template(replace(existing, is_active=is_active))

    def delete_template(self, template_id: str) -> None:
        """Delete a template and its exceptions.

        Transactions already generated from the template are kept.

        Raises:
            NotFoundError: If the template doesn't exist
        """
        self.require_template(template_id)
        removed = self.db.delete_template_exceptions(template_id)
        self.db.delete_template(template_id)
        logger.info("Deleted template %s and %d exceptions", template_id, removed)

    # Exceptions
    def add_exception(
        self,
        template_id: str,
        occurrence_date: date | str,
        exception_type: str,
        modified_amount: Optional[Decimal | int | float] = None,
        modified_date: Optional[date | str] = None,
    ) -> TemplateException:
        """Override a single occurrence of a template.

        ``skip`` drops the occurrence, ``amount`` replaces its amount and
        ``date`` moves it. Adding an exception for a date that already has
        one replaces it.

        Raises:
            NotFoundError: If the template doesn't exist
            ValidationError: If the exception is incomplete
        """
        self.require_template(template_id)

        errors = []
        try:
            kind = ExceptionType(exception_type)
        except ValueError:
            kind = None
            errors.append(
                f"Exception type must be one of: {', '.join(e.value for e in ExceptionType)}"
            )
        try:
            occurrence = to_date(occurrence_date)
        except ValueError as e:
            occurrence = None
            errors.append(str(e))

        amount = None
        new_date = None
        if kind == ExceptionType.AMOUNT:
            if not is_number(modified_amount) or modified_amount == 0:
                errors.append("Modified amount must be a non-zero number")
            else:
                amount = _decimal(modified_amount)
        elif kind == ExceptionType.DATE:
            try:
                new_date = to_date(modified_date)
            except ValueError:
                errors.append("Modified date is required for date exceptions")

        if errors:
            raise ValidationError(errors)

        return self.db.save_template_exception(
            TemplateException(
                template_id=template_id,
                occurrence_date=occurrence,
                exception_type=kind,
                modified_amount=amount,
                modified_date=new_date,
            )
        )

    def remove_exception(self, template_id: str, occurrence_date: date | str) -> None:
        """Remove the exception for one occurrence.

        Raises:
            NotFoundError: If there is no such exception
        """
        occurrence = to_date(occurrence_date)
        if not self.db.delete_template_exception(template_id, occurrence):
            raise NotFoundError(exception_not_found(template_id, occurrence))

    def list_exceptions(self, template_id: str) -> list[TemplateException]:
        """List the exceptions of a template, by occurrence date."""
        return self.db.list_template_exceptions(template_id)
