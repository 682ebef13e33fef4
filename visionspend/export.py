"""
CSV export of the displayed transactions.

Format:
- Header: Date,Description,Category,Amount
- Date: yyyy-MM-dd
- Description, Category: always double quoted, internal quotes doubled
- Amount: plain decimal string ('-4.5', '2500')
- Rows joined with '\n', encoded as UTF-8, saved as transactions.csv
"""

import logging
import pathlib
from decimal import Decimal
from typing import Iterable

from .models import Transaction
from .utils import ensure_directory

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ['Date', 'Description', 'Category', 'Amount']
EXPORT_FILE_NAME = 'transactions.csv'


def quote_field(value) -> str:
    text = '' if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def format_amount(amount: float) -> str:
    """Render an amount without exponent or trailing zeros."""
    if amount == 0:
        return '0'
    return format(Decimal(repr(float(amount))).normalize(), 'f')


def format_row(transaction: Transaction) -> str:
    return ','.join([
        transaction.date.isoformat(),
        quote_field(transaction.description),
        quote_field(transaction.category),
        format_amount(transaction.amount),
    ])


def export_csv(transactions: Iterable[Transaction]) -> str:
    """Render transactions, in the given order, as CSV text."""
    lines = [','.join(EXPORT_COLUMNS)]
    lines.extend(format_row(t) for t in transactions)
    return '\n'.join(lines)


def export_csv_bytes(transactions: Iterable[Transaction]) -> bytes:
    return export_csv(transactions).encode('utf-8')


def save_export(transactions: Iterable[Transaction], output_path=None) -> pathlib.Path:
    """Write the CSV export to disk.

    Args:
        transactions (iterable): Transactions in display order
        output_path (str or Path, optional): Directory or file path. Defaults
            to the 'exports' data directory.

    Returns:
        pathlib.Path: Path of the written file
    """
    if output_path is None:
        output_path = ensure_directory('exports')

    output_path = pathlib.Path(output_path)
    if output_path.is_dir() or not output_path.suffix:
        output_path = output_path / EXPORT_FILE_NAME

    output_path.parent.mkdir(parents=True, exist_ok=True)

    data = export_csv_bytes(transactions)
    output_path.write_bytes(data)
    logger.info(f"Exported transactions to {output_path}")
    return output_path
