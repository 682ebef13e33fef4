"""
VisionSpend - Schema-less transaction ingestion for spending analysis.

This package provides functionality to:
- Read loosely structured CSV/TSV/TXT exports (XLSX best effort) of transactions
- Infer which column holds the date, description, amount and category
- Merge imports into an in-memory collection without duplicating ids
- Search, filter and sort the collection for display
- Export the displayed transactions and aggregate spending for charts

The transaction format:
- id: Opaque identifier assigned at import
- date: Transaction date
- description: Transaction description (never empty)
- amount: Numeric amount (negative for expenses)
- category: Explicit, user assigned or inferred category
"""

from .models import (
    Transaction,
    DateRange,
    SortDescriptor,
    ImportResult,
    EditRejected,
    UnsupportedFileTypeError
)
from .classify import classify_fields, clean_amount, standardize_date
from .categories import infer_category, load_category_rules, available_categories
from .importer import (
    parse_line,
    parse_delimited,
    parse_csv,
    parse_tsv,
    parse_txt,
    detect_file_kind,
    import_file,
    import_text
)
from .collection import merge_transactions, update_field, update_category
from .query import query_transactions, toggle_sort
from .export import export_csv, save_export
from .summary import spending_by_category, spending_by_month, daily_spending
from .session import TransactionSession

__all__ = [
    'Transaction',
    'DateRange',
    'SortDescriptor',
    'ImportResult',
    'EditRejected',
    'UnsupportedFileTypeError',
    'classify_fields',
    'clean_amount',
    'standardize_date',
    'infer_category',
    'load_category_rules',
    'available_categories',
    'parse_line',
    'parse_delimited',
    'parse_csv',
    'parse_tsv',
    'parse_txt',
    'detect_file_kind',
    'import_file',
    'import_text',
    'merge_transactions',
    'update_field',
    'update_category',
    'query_transactions',
    'toggle_sort',
    'export_csv',
    'save_export',
    'spending_by_category',
    'spending_by_month',
    'daily_spending',
    'TransactionSession'
]
