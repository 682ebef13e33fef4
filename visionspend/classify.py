"""
Field role classification for schema-less transaction rows.

Source files carry no negotiated shape: some exports are Date/Description/Amount,
others Date/Amount/Description, some have extra columns. Instead of trusting a
header we probe plausible positions for the amount in a fixed order:

1. Field 0 is always the date candidate.
2. Field 3, when present, is an explicit category.
3. The amount is looked for in field 2, then field 1, then in any later field.
   Each of these is a hypothesis in DEFAULT_HYPOTHESES, evaluated top to bottom
   with early return.

The classifier only assigns roles. Turning the resolved strings into a date
and a float is done by standardize_date and clean_amount.
"""

import logging
import re
from datetime import datetime
from typing import Callable, Optional, Sequence, Tuple, Union

import numpy as np

from .models import Accepted, Rejected, UNKNOWN_DESCRIPTION

logger = logging.getLogger(__name__)

MIN_FIELDS = 3

# Tried in order; the first format that parses wins
DATE_FORMATS = [
    '%Y-%m-%d',           # ISO
    '%Y-%m-%d %H:%M:%S',  # ISO with time
    '%Y-%m-%dT%H:%M:%S',  # ISO 8601 timestamp
    '%Y/%m/%d',
    '%m/%d/%Y',           # US
    '%m-%d-%Y',           # US with dashes
    '%d/%m/%Y',           # Day first, only reached when month > 12
    '%d-%m-%Y',
    '%m/%d/%y',           # Short year
    '%Y%m%d',             # Compact
    '%b %d %Y',
    '%b %d, %Y',
    '%B %d, %Y',
    '%d %b %Y',
    '%d %B %Y',
]

_LEADING_FLOAT = re.compile(r'^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?')
_NON_AMOUNT_CHARS = re.compile(r'[^0-9.\-]')

Hypothesis = Callable[[Sequence[str]], Optional[Tuple[str, str]]]


def parse_number(text) -> Optional[float]:
    """Parse the leading number of a string, ignoring anything after it.

    Args:
        text (str): Raw text, e.g. '12.50', '-4', '4.50 USD'

    Returns:
        float or None: The finite number the text starts with, or None
    """
    if not isinstance(text, str):
        return None
    match = _LEADING_FLOAT.match(text.strip())
    if not match:
        return None
    value = float(match.group(0))
    if not np.isfinite(value):
        return None
    return value


def is_numeric(text) -> bool:
    """Check whether a field looks like an amount.

    The field must start with the number itself: '12.50' and '4.50 USD' count,
    '$4.50', '(12.00)' and 'Store 12' do not.
    """
    return parse_number(text) is not None


def clean_amount(amount) -> Optional[float]:
    """Clean and convert an amount string to a float.

    Every character that is not a digit, '.' or '-' is removed first, which
    drops currency symbols, thousand separators and parentheses.

    Args:
        amount (str or float): Amount to clean

    Returns:
        float or None: Signed amount, or None if nothing numeric remains
    """
    if amount is None:
        return None
    if isinstance(amount, (int, float)):
        return float(amount) if np.isfinite(amount) else None
    if not isinstance(amount, str):
        return None

    cleaned = _NON_AMOUNT_CHARS.sub('', amount)
    return parse_number(cleaned)


def standardize_date(date_str):
    """Convert a date string in one of DATE_FORMATS to a date.

    Args:
        date_str (str): Date string to parse

    Returns:
        datetime.date or None: Parsed date, or None if the date is invalid
    """
    if not isinstance(date_str, str):
        return None

    # Remove quotes and extra whitespace
    date_str = date_str.strip().strip('"\'')
    if not date_str:
        return None

    for fmt in DATE_FORMATS:
        try:
            dt = datetime.strptime(date_str, fmt)
        except ValueError:
            continue
        if dt.year < 1900 or dt.year > 2100:
            logger.debug(f"Date {date_str} out of range for format {fmt}")
            return None
        return dt.date()

    logger.debug(f"Could not parse date: {date_str}")
    return None


def amount_in_third_field(fields):
    """Date, Description, Amount"""
    if is_numeric(fields[2]):
        return fields[1], fields[2]
    return None


def amount_in_second_field(fields):
    """Date, Amount, Description"""
    if is_numeric(fields[1]):
        description = fields[2] if len(fields) > 2 and fields[2] else fields[0]
        return description, fields[1]
    return None


def first_numeric_field(fields):
    """Scan for the first numeric field after the date."""
    for i in range(1, len(fields)):
        if is_numeric(fields[i]):
            before = fields[i - 1]
            after = fields[i + 1] if i + 1 < len(fields) else ''
            return before or after or UNKNOWN_DESCRIPTION, fields[i]
    return None


DEFAULT_HYPOTHESES: Tuple[Hypothesis, ...] = (
    amount_in_third_field,
    amount_in_second_field,
    first_numeric_field,
)


def classify_fields(fields: Sequence[str],
                    hypotheses: Sequence[Hypothesis] = DEFAULT_HYPOTHESES) -> Union[Accepted, Rejected]:
    """Decide which field is the date, description, amount and category.

    Args:
        fields (list): Split, trimmed and unquoted row values
        hypotheses (list): Ordered amount/description probes; the first one
            that returns a match decides the roles

    Returns:
        Accepted or Rejected: Raw strings for each role, or why the row was dropped
    """
    if len(fields) < MIN_FIELDS:
        return Rejected(f"Expected at least {MIN_FIELDS} fields, got {len(fields)}")

    date_text = fields[0]
    category = fields[3] if len(fields) > 3 else ''

    roles = None
    for hypothesis in hypotheses:
        roles = hypothesis(fields)
        if roles is not None:
            break

    if roles is None:
        return Rejected("No numeric field found")

    description, amount_text = roles
    if not date_text:
        return Rejected("Missing date")
    if not description:
        return Rejected("Missing description")
    if not amount_text:
        return Rejected("Missing amount")

    return Accepted(
        date_text=date_text,
        description=description,
        amount_text=amount_text,
        category=category,
    )
