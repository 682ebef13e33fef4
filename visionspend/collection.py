"""
Canonical transaction collection operations.

The collection is a tuple of frozen Transactions. Every operation here returns
a new tuple; stored records are never changed in place. Edits swap in a new
Transaction carrying the same id.

De-duplication is by id only. Two identical rows from two separate imports get
different ids and are both kept.
"""

import dataclasses
import logging
from datetime import date, datetime
from typing import Iterable, Tuple

import numpy as np

from .classify import parse_number
from .models import EditRejected, Transaction

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('date', 'description', 'amount')


def sort_by_date(transactions: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    """Newest first; transactions on the same date keep their relative order."""
    return tuple(sorted(transactions, key=lambda t: t.date, reverse=True))


def merge_transactions(existing: Iterable[Transaction],
                       new: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    """Fold a newly imported batch into the collection.

    Args:
        existing (iterable): Current collection
        new (iterable): Freshly imported transactions

    Returns:
        tuple: Existing plus new transactions whose id was not already present,
            sorted by date descending
    """
    existing = tuple(existing)
    seen_ids = {t.id for t in existing}

    kept = []
    skipped = 0
    for transaction in new:
        if transaction.id in seen_ids:
            skipped += 1
            continue
        seen_ids.add(transaction.id)
        kept.append(transaction)

    if skipped:
        logger.info(f"Skipped {skipped} transactions with duplicate ids")
    logger.info(f"Merged {len(kept)} new transactions into {len(existing)} existing")

    return sort_by_date(existing + tuple(kept))


def _replace(collection, transaction_id, **changes):
    collection = tuple(collection)
    for index, transaction in enumerate(collection):
        if transaction.id == transaction_id:
            updated = dataclasses.replace(transaction, **changes)
            return collection[:index] + (updated,) + collection[index + 1:]
    raise EditRejected(f"No transaction with id {transaction_id}")


def parse_edit_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise EditRejected(f"Invalid date: {value!r}")
    try:
        return datetime.strptime(value.strip(), '%Y-%m-%d').date()
    except ValueError:
        raise EditRejected(f"Invalid date: {value!r}. Expected yyyy-MM-dd")


def parse_edit_amount(value) -> float:
    if isinstance(value, bool):
        raise EditRejected(f"Invalid amount: {value!r}")
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        amount = parse_number(value)
    if amount is None or not np.isfinite(amount):
        raise EditRejected(f"Invalid amount: {value!r}")
    return amount


def update_field(collection, transaction_id: str, field: str, value) -> Tuple[Transaction, ...]:
    """Replace the date, description or amount of one transaction.

    Args:
        collection (iterable): Current collection
        transaction_id (str): Id of the transaction to edit
        field (str): One of EDITABLE_FIELDS
        value: New value; dates as 'yyyy-MM-dd' text or a date, amounts as
            text or a number

    Returns:
        tuple: New collection with the edited transaction swapped in

    Raises:
        EditRejected: If the field is not editable, the value is invalid or
            the id is unknown
    """
    if field not in EDITABLE_FIELDS:
        raise EditRejected(f"Field {field!r} cannot be edited. Expected one of: {EDITABLE_FIELDS}")

    if field == 'date':
        new_value = parse_edit_date(value)
    elif field == 'amount':
        new_value = parse_edit_amount(value)
    else:
        if not isinstance(value, str) or not value.strip():
            raise EditRejected("Description cannot be empty")
        new_value = value

    return _replace(collection, transaction_id, **{field: new_value})


def update_category(collection, transaction_id: str, category: str) -> Tuple[Transaction, ...]:
    """Reassign the category of one transaction.

    Raises:
        EditRejected: If the category is blank or the id is unknown
    """
    if not isinstance(category, str) or not category.strip():
        raise EditRejected("Category cannot be empty")
    return _replace(collection, transaction_id, category=category.strip())
