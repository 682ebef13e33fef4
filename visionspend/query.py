"""
Derived views over the transaction collection.

The view is recomputed from scratch for every combination of inputs: search
term, date range, sort descriptor and category filter. Nothing is cached here;
TransactionSession memoizes the last result.
"""

import locale
import logging
from typing import Iterable, List, Optional

import pandas as pd

from .models import DateRange, SortDescriptor, Transaction

logger = logging.getLogger(__name__)

FRAME_COLUMNS = ['id', 'date', 'description', 'category', 'amount']
STRING_COLUMNS = ['id', 'description', 'category']

DEFAULT_SORT = SortDescriptor('date', 'desc')


def transactions_to_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Build a DataFrame with one row per transaction.

    The index is the position of each transaction in the input, so rows can be
    mapped back to the original objects after filtering and sorting.
    """
    records = [
        {
            'id': t.id,
            'date': t.date,
            'description': t.description,
            'category': t.category,
            'amount': t.amount,
        }
        for t in transactions
    ]
    df = pd.DataFrame(records, columns=FRAME_COLUMNS)
    df['date'] = pd.to_datetime(df['date'])
    df['amount'] = df['amount'].astype(float)
    return df


def _collation_key(series: pd.Series) -> pd.Series:
    return series.map(lambda v: locale.strxfrm(v.casefold()) if isinstance(v, str) else None)


def sort_frame(df: pd.DataFrame, sort_descriptor: Optional[SortDescriptor]) -> pd.DataFrame:
    """Sort by the descriptor's column.

    Strings are compared by locale.strxfrm of the casefolded value, numbers
    and dates by their natural order. strxfrm follows LC_COLLATE only after
    the application has called locale.setlocale; under the default C locale
    this is plain code point order of the casefolded text. Missing values
    sort before any present value, so they come last when descending. Ties
    keep their prior relative order.
    """
    if sort_descriptor is None or not sort_descriptor.column:
        return df
    column = sort_descriptor.column
    if column not in df.columns:
        # Every value is missing, so every comparison is a tie
        logger.debug(f"Unknown sort column {column!r}; keeping input order")
        return df

    ascending = sort_descriptor.direction == 'asc'
    return df.sort_values(
        by=column,
        ascending=ascending,
        kind='stable',
        na_position='first' if ascending else 'last',
        key=_collation_key if column in STRING_COLUMNS else None,
    )


def filter_frame(df: pd.DataFrame, search_term: str = '', date_range: Optional[DateRange] = None,
                 category: Optional[str] = 'all') -> pd.DataFrame:
    mask = pd.Series(True, index=df.index)

    if search_term:
        term = search_term.lower()
        in_description = df['description'].str.lower().str.contains(term, regex=False)
        in_category = df['category'].fillna('').str.lower().str.contains(term, regex=False)
        mask &= in_description | in_category

    if date_range is not None:
        if date_range.start is not None:
            mask &= df['date'] >= pd.Timestamp(date_range.start)
        if date_range.end is not None:
            mask &= df['date'] <= pd.Timestamp(date_range.end)

    if category and category.lower() != 'all':
        mask &= df['category'].fillna('').str.lower() == category.lower()

    return df[mask]


def query_transactions(transactions: Iterable[Transaction], search_term: str = '',
                       date_range: Optional[DateRange] = None,
                       sort_descriptor: Optional[SortDescriptor] = DEFAULT_SORT,
                       category: Optional[str] = 'all') -> List[Transaction]:
    """Filter and sort the collection for display.

    Args:
        transactions (iterable): Canonical collection
        search_term (str): Case-insensitive substring matched against
            description or category; empty means no filtering
        date_range (DateRange, optional): Inclusive date bounds
        sort_descriptor (SortDescriptor, optional): Column and direction;
            None keeps collection order
        category (str, optional): Exact category (case-insensitive); 'all'
            means no filtering

    Returns:
        list: Matching transactions in display order
    """
    transactions = list(transactions)
    if not transactions:
        return []

    df = transactions_to_frame(transactions)
    df = filter_frame(df, search_term, date_range, category)
    df = sort_frame(df, sort_descriptor)

    return [transactions[position] for position in df.index]


def toggle_sort(current: Optional[SortDescriptor], column: str) -> SortDescriptor:
    """Sort descriptor after a click on a column header.

    Clicking the column already sorted ascending flips it to descending; any
    other click sorts that column ascending.
    """
    if current is not None and current.column == column and current.direction == 'asc':
        return SortDescriptor(column, 'desc')
    return SortDescriptor(column, 'asc')
