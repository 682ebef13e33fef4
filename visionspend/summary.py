"""
Expense aggregates for chart consumers.

Only expenses (negative amounts) are counted, as positive spending magnitudes
rounded to cents.
"""

import logging
from typing import Dict, Iterable, List, Tuple

import pandas as pd

from .models import Transaction, UNCATEGORIZED
from .query import transactions_to_frame

logger = logging.getLogger(__name__)

HEATMAP_CAP = 1000.0
HEATMAP_THRESHOLDS = [0.1, 0.3, 0.6, 0.8]


def expenses_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    df = transactions_to_frame(transactions)
    df = df[df['amount'] < 0].copy()
    df['spending'] = df['amount'].abs()
    df['category'] = df['category'].where(df['category'] != '', UNCATEGORIZED)
    logger.debug(f"Aggregating {len(df)} expense transactions")
    return df


def spending_by_category(transactions: Iterable[Transaction], limit=10) -> List[Tuple[str, float]]:
    """Total spending per category, largest first.

    Args:
        transactions (iterable): Transactions to aggregate
        limit (int, optional): Maximum number of categories returned; None for all

    Returns:
        list: (category, spending) pairs
    """
    df = expenses_frame(transactions)
    if df.empty:
        return []

    totals = df.groupby('category', sort=False)['spending'].sum().round(2)
    totals = totals.sort_values(ascending=False, kind='stable')
    if limit is not None:
        totals = totals.head(limit)
    return [(category, float(spending)) for category, spending in totals.items()]


def spending_by_month(transactions: Iterable[Transaction]) -> List[Tuple[str, float]]:
    """Total spending per calendar month in chronological order.

    Returns:
        list: (label, spending) pairs with labels like 'Jan 2024'
    """
    df = expenses_frame(transactions)
    if df.empty:
        return []

    df['month'] = df['date'].dt.to_period('M')
    totals = df.groupby('month')['spending'].sum().round(2).sort_index()
    return [(month.strftime('%b %Y'), float(spending)) for month, spending in totals.items()]


def daily_spending(transactions: Iterable[Transaction]) -> Dict:
    """Total spending per day, keyed by datetime.date."""
    df = expenses_frame(transactions)
    if df.empty:
        return {}

    totals = df.groupby(df['date'].dt.date)['spending'].sum().round(2)
    return {day: float(spending) for day, spending in totals.items()}


def heatmap_level(amount: float, max_spending: float) -> int:
    """Intensity bucket for one day of spending.

    Args:
        amount (float): Spending on the day
        max_spending (float): Highest daily spending in the period; values
            above 1000 are capped so one large day does not flatten the rest

    Returns:
        int: 0 for no spending, otherwise 1 (lightest) to 5 (darkest)
    """
    if amount <= 0:
        return 0
    cap = min(max_spending, HEATMAP_CAP)
    if cap <= 0:
        cap = 100.0
    share = min(amount / cap, 1.0)
    for level, threshold in enumerate(HEATMAP_THRESHOLDS, start=1):
        if share < threshold:
            return level
    return len(HEATMAP_THRESHOLDS) + 1
