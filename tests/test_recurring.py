"""Tests for materializing occurrences and planning batch runs."""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

from pocketledger.domain.entities import (
    AmountType,
    BiweeklyRule,
    ExceptionType,
    TemplateException,
    Transaction,
    TransactionType,
)
from pocketledger.domain.recurring import apply_exception, materialize, plan_batch


def _existing(template_id, when, company, amount=Decimal("-100")):
    return Transaction(
        id="txn-existing",
        date=when,
        type=TransactionType.EXPENSE,
        amount=amount,
        company=company,
        paid=False,
        template_id=template_id,
        is_auto_generated=True,
    )


def test_materialize_fixed_expense_is_negative(make_template):
    template = make_template(amount=Decimal("100"), tags=("Housing",), paid=True)

    draft = materialize(template, date(2024, 2, 29))

    assert draft.id is None
    assert draft.date == date(2024, 2, 29)
    assert draft.amount == Decimal("-100")
    assert draft.type == TransactionType.EXPENSE
    assert draft.company == "Landlord"
    assert draft.tags == ("Housing",)
    assert draft.paid is True
    assert draft.template_id == "tpl-1"
    assert draft.is_auto_generated is True
    assert draft.is_pending is False


def test_materialize_income_is_positive(make_template):
    template = make_template(type=TransactionType.INCOME, amount=Decimal("-2500"))

    assert materialize(template, date(2024, 1, 31)).amount == Decimal("2500")


def test_materialize_variable_is_pending_zero(make_template):
    template = make_template(
        amount_type=AmountType.VARIABLE,
        amount=None,
        estimated_amount=Decimal("80"),
    )

    draft = materialize(template, date(2024, 1, 31))

    assert draft.amount == 0
    assert draft.is_pending is True


def test_apply_amount_exception_signs_amount(make_template):
    draft = materialize(make_template(amount_type=AmountType.VARIABLE, amount=None), date(2024, 1, 31))
    exception = TemplateException(
        template_id="tpl-1",
        occurrence_date=date(2024, 1, 31),
        exception_type=ExceptionType.AMOUNT,
        modified_amount=Decimal("95.10"),
    )

    updated = apply_exception(draft, exception)

    assert updated.amount == Decimal("-95.10")
    assert updated.is_pending is False


def test_apply_date_exception_moves_draft(make_template):
    draft = materialize(make_template(), date(2024, 3, 31))
    exception = TemplateException(
        template_id="tpl-1",
        occurrence_date=date(2024, 3, 31),
        exception_type=ExceptionType.DATE,
        modified_date=date(2024, 4, 1),
    )

    assert apply_exception(draft, exception).date == date(2024, 4, 1)


def test_plan_batch_creates_due_occurrences(make_template):
    template = make_template(amount=Decimal("100"))

    plan = plan_batch([template], datetime(2024, 3, 15, 9, 30), existing=[])

    assert [t.date for t in plan.created] == [date(2024, 1, 31), date(2024, 2, 29)]
    assert [t.amount for t in plan.created] == [Decimal("-100"), Decimal("-100")]
    assert plan.watermarks == {"tpl-1": date(2024, 2, 29)}
    assert plan.duplicates == 0


def test_plan_batch_duplicate_still_advances_watermark(make_template):
    template = make_template(company="Rent")
    existing = [_existing("tpl-1", date(2024, 2, 29), "Rent")]

    plan = plan_batch([template], date(2024, 3, 15), existing)

    assert [t.date for t in plan.created] == [date(2024, 1, 31)]
    assert plan.duplicates == 1
    assert plan.watermarks == {"tpl-1": date(2024, 2, 29)}


def test_plan_batch_duplicate_key_includes_company(make_template):
    template = make_template(company="Rent")
    existing = [_existing("tpl-1", date(2024, 2, 29), "Old Landlord")]

    plan = plan_batch([template], date(2024, 3, 15), existing)

    assert len(plan.created) == 2


def test_plan_batch_ignores_unlinked_transactions(make_template):
    template = make_template()
    existing = [_existing(None, date(2024, 1, 31), "Landlord")]

    plan = plan_batch([template], date(2024, 2, 1), existing)

    assert len(plan.created) == 1


def test_plan_batch_is_idempotent(make_template):
    template = make_template()
    now = date(2024, 5, 10)

    first = plan_batch([template], now, existing=[])
    advanced = replace(template, last_generated=first.watermarks["tpl-1"])
    second = plan_batch([advanced], now, existing=list(first.created))
    replay = plan_batch([template], now, existing=list(first.created))

    assert len(first.created) == 4
    assert second.created == ()
    assert second.watermarks == {}
    assert replay.created == ()
    assert replay.duplicates == 4
    assert replay.watermarks == first.watermarks


def test_plan_batch_watermark_is_monotonic(make_template):
    template = make_template(start_date=date(2024, 1, 1), recurrence=BiweeklyRule())
    watermarks = []
    existing = []

    for now in (date(2024, 1, 20), date(2024, 1, 20), date(2024, 2, 5), date(2024, 3, 1)):
        plan = plan_batch([template], now, existing)
        existing.extend(plan.created)
        if "tpl-1" in plan.watermarks:
            template = replace(template, last_generated=plan.watermarks["tpl-1"])
        watermarks.append(template.last_generated)

    assert watermarks == [date(2024, 1, 15), date(2024, 1, 15), date(2024, 1, 29), date(2024, 2, 26)]
    assert len({t.date for t in existing}) == len(existing)


def test_plan_batch_skips_inactive_and_future_templates(make_template):
    inactive = make_template(id="tpl-inactive", is_active=False)
    future = make_template(id="tpl-future", start_date=date(2025, 1, 1))

    plan = plan_batch([inactive, future], date(2024, 6, 1), existing=[])

    assert plan.created == ()
    assert plan.watermarks == {}


def test_plan_batch_skip_exception_drops_occurrence_but_advances(make_template):
    template = make_template()
    skip = TemplateException(
        template_id="tpl-1",
        occurrence_date=date(2024, 2, 29),
        exception_type=ExceptionType.SKIP,
    )

    plan = plan_batch([template], date(2024, 3, 1), existing=[], exceptions=[skip])

    assert [t.date for t in plan.created] == [date(2024, 1, 31)]
    assert plan.skipped == 1
    assert plan.watermarks == {"tpl-1": date(2024, 2, 29)}


def test_plan_batch_amount_exception(make_template):
    template = make_template()
    override = TemplateException(
        template_id="tpl-1",
        occurrence_date=date(2024, 2, 29),
        exception_type=ExceptionType.AMOUNT,
        modified_amount=Decimal("1250"),
    )

    plan = plan_batch([template], date(2024, 3, 1), existing=[], exceptions=[override])

    assert [t.amount for t in plan.created] == [Decimal("-1200"), Decimal("-1250")]


def test_plan_batch_handles_templates_independently(make_template):
    rent = make_template()
    salary = make_template(
        id="tpl-2",
        type=TransactionType.INCOME,
        company="Employer",
        amount=Decimal("2000"),
        start_date=date(2024, 1, 1),
        recurrence=BiweeklyRule(),
    )

    plan = plan_batch([rent, salary], date(2024, 2, 1), existing=[])

    assert plan.watermarks == {"tpl-1": date(2024, 1, 31), "tpl-2": date(2024, 1, 29)}
    assert sum(1 for t in plan.created if t.template_id == "tpl-2") == 3
