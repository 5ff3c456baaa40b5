"""Domain layer for pocketledger application.

Services live in their own modules (``pocketledger.domain.transaction``,
``.template``, ``.recurring``, ``.analytics``) and are imported from there;
this package only re-exports the entities so that the database layer can
depend on it without a cycle.
"""

from pocketledger.domain.entities import (
    AmountType,
    RecurrenceTemplate,
    TemplateException,
    Transaction,
    TransactionType,
)

__all__ = [
    "AmountType",
    "RecurrenceTemplate",
    "TemplateException",
    "Transaction",
    "TransactionType",
]
