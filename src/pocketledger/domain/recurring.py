"""Recurring transaction processing.

``materialize`` turns one occurrence of a template into a transaction
draft, ``plan_batch`` decides which drafts a run should create and how far
each template's watermark advances, and ``RecurringService`` wires both to
the storage collaborator.

Duplicate detection matches generated rows on (template id, date,
company). Company is part of that key, so renaming a template's company
after it has generated transactions makes earlier rows unrecognizable:
re-processing dates at or before the watermark would not be caught. The
watermark normally prevents that, since dates at or before it are never
emitted again.
"""

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    AmountType,
    BatchPlan,
    ExceptionType,
    ProcessFailure,
    ProcessResult,
    RecurrenceTemplate,
    TemplateException,
    Transaction,
)
from pocketledger.domain.errors import StorageError
from pocketledger.domain.recurrence import due_dates, occurrences_between
from pocketledger.domain.transaction import apply_sign
from pocketledger.utils.date_parser import to_date

logger = logging.getLogger(__name__)

OccurrenceKey = tuple[Optional[str], date, str]


def materialize(template: RecurrenceTemplate, occurrence: date) -> Transaction:
    """Build the transaction draft for one occurrence of ``template``.

    Fixed amounts are signed by type; variable amounts are zero and pending.
    """
    if template.amount_type == AmountType.FIXED:
        amount = apply_sign(template.type.value, abs(template.amount))
        is_pending = False
    else:
        amount = Decimal(0)
        is_pending = True

    return Transaction(
        id=None,
        date=occurrence,
        type=template.type,
        amount=amount,
        company=template.company,
        paid=template.paid,
        tags=tuple(template.tags or ()),
        template_id=template.id,
        is_auto_generated=True,
        is_pending=is_pending,
    )


def apply_exception(draft: Transaction, exception: TemplateException) -> Transaction:
    """Apply an amount or date override to a draft.

    Skip exceptions never reach this point; the planner drops the occurrence.
    """
    if exception.exception_type == ExceptionType.AMOUNT and exception.modified_amount is not None:
        return replace(
            draft,
            amount=apply_sign(draft.type.value, exception.modified_amount),
            is_pending=False,
        )
    if exception.exception_type == ExceptionType.DATE and exception.modified_date is not None:
        return replace(draft, date=exception.modified_date)
    return draft


def occurrence_key(transaction: Transaction) -> OccurrenceKey:
    return (transaction.template_id, transaction.date, transaction.company)


def plan_batch(
    templates: Iterable[RecurrenceTemplate],
    now: date | datetime,
    existing: Iterable[Transaction],
    exceptions: Iterable[TemplateException] = (),
) -> BatchPlan:
    """Work out what a processing run should create.

    For every active template that has started, each due occurrence is
    materialized and compared with ``existing`` on (template id, date,
    company). Duplicates and skipped occurrences are not created but still
    count toward the template's new watermark, which is the latest
    occurrence date of the run (never earlier than the previous one).
    """
    as_of = to_date(now)
    seen: set[OccurrenceKey] = {occurrence_key(t) for t in existing if t.template_id}
    overrides = {(e.template_id, e.occurrence_date): e for e in exceptions}

    created: list[Transaction] = []
    watermarks: dict[str, date] = {}
    duplicates = 0
    skipped = 0

    for template in templates:
        if not template.is_active or template.start_date > as_of:
            continue

        occurrences = due_dates(template, as_of)
        if not occurrences:
            continue

        for occurrence in occurrences:
            exception = overrides.get((template.id, occurrence))
            if exception is not None and exception.exception_type == ExceptionType.SKIP:
                skipped += 1
                continue

            draft = materialize(template, occurrence)
            if exception is not None:
                draft = apply_exception(draft, exception)

            key = occurrence_key(draft)
            if key in seen:
                duplicates += 1
                continue
            seen.add(key)
            created.append(draft)

        latest = occurrences[-1]
        if template.last_generated is not None and template.last_generated > latest:
            latest = template.last_generated
        watermarks[template.id] = latest

    return BatchPlan(
        created=tuple(created),
        watermarks=watermarks,
        duplicates=duplicates,
        skipped=skipped,
    )


class RecurringService:
    """Service that materializes due recurring transactions."""

    def __init__(self, db: Database):
        """Initialize recurring service.

        Args:
            db: Database instance
        """
        self.db = db

    def process_due(self, now: Optional[date | datetime] = None) -> ProcessResult:
        """Create every due transaction and advance template watermarks.

        Each template is persisted independently. If saving one of its
        transactions fails, the remaining transactions are still attempted
        but that template's watermark is left unchanged, so the next run
        retries it; already saved rows are then caught as duplicates. This
        gives at-least-once delivery, not exactly-once.

        Args:
            now: Processing date (defaults to today)

        Returns:
            ProcessResult with created transactions, new watermarks and any
            persistence failures

        Raises:
            StorageError: If templates or transactions cannot be loaded
        """
        as_of = to_date(now) if now is not None else date.today()

        try:
            templates = self.db.load_active_templates()
            exceptions = self.db.list_template_exceptions()
            existing = self.db.load_all_transactions()
        except Exception as e:
            raise StorageError(f"Could not load recurring data: {e}") from e

        plan = plan_batch(templates, as_of, existing, exceptions)

        drafts_by_template: dict[str, list[Transaction]] = defaultdict(list)
        for draft in plan.created:
            drafts_by_template[draft.template_id].append(draft)

        created: list[Transaction] = []
        watermarks: dict[str, date] = {}
        failures: list[ProcessFailure] = []

        for template_id, watermark in plan.watermarks.items():
            complete = True
            for draft in drafts_by_template.get(template_id, []):
                try:
                    created.append(self.db.save_transaction(draft))
                except Exception as e:
                    complete = False
                    logger.warning(
                        "Failed to save occurrence %s of template %s: %s",
                        draft.date,
                        template_id,
                        e,
                    )
                    failures.append(ProcessFailure(template_id=template_id, date=draft.date, error=str(e)))

            if not complete:
                continue

            try:
                self.db.save_template_watermark(template_id, watermark)
            except Exception as e:
                logger.warning("Failed to advance watermark of template %s: %s", template_id, e)
                failures.append(ProcessFailure(template_id=template_id, date=watermark, error=str(e)))
                continue
            watermarks[template_id] = watermark
            logger.info("Template %s processed through %s", template_id, watermark)

        logger.info(
            "Processed recurring templates as of %s: %d created, %d duplicates, %d skipped",
            as_of,
            len(created),
            plan.duplicates,
            plan.skipped,
        )
        return ProcessResult(
            created=tuple(created),
            watermarks=watermarks,
            duplicates=plan.duplicates,
            skipped=plan.skipped,
            failures=tuple(failures),
        )

    def forecast(self, start_date: date, end_date: date) -> list[Transaction]:
        """Project drafts for every active template in ``[start_date, end_date]``.

        Already generated occurrences are included; nothing is persisted.
        Skip exceptions remove occurrences, other exceptions are applied.
        """
        overrides = {
            (e.template_id, e.occurrence_date): e for e in self.db.list_template_exceptions()
        }
        drafts: list[Transaction] = []
        for template in self.db.load_active_templates():
            for occurrence in occurrences_between(template, start_date, end_date):
                exception = overrides.get((template.id, occurrence))
                if exception is not None and exception.exception_type == ExceptionType.SKIP:
                    continue
                draft = materialize(template, occurrence)
                if exception is not None:
                    draft = apply_exception(draft, exception)
                drafts.append(draft)
        return sorted(drafts, key=lambda t: (t.date, t.company))
