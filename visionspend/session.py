"""
Session state for one user.

TransactionSession owns the canonical collection and the view inputs. The
collection is only ever replaced with a new tuple, so readers holding an older
tuple are never affected by later imports or edits.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from .categories import CategoryRule, load_category_rules
from .collection import merge_transactions, update_category, update_field
from .export import export_csv, export_csv_bytes, save_export
from .importer import import_file, import_text
from .models import DateRange, EditRejected, ImportResult, SortDescriptor, Transaction
from .query import DEFAULT_SORT, query_transactions, toggle_sort

logger = logging.getLogger(__name__)


class TransactionSession:
    """In-memory transaction state plus the current search, filter and sort."""

    def __init__(self, rules: Optional[Sequence[CategoryRule]] = None):
        self.rules = tuple(rules) if rules is not None else load_category_rules()
        self.reset()

    def reset(self):
        self.transactions: Tuple[Transaction, ...] = ()
        self.search_term = ''
        self.date_range = DateRange()
        self.sort_descriptor: Optional[SortDescriptor] = DEFAULT_SORT
        self.category_filter = 'all'
        self._view_key = None
        self._view: List[Transaction] = []

    def add_transactions(self, batch) -> int:
        """Merge a batch into the collection; returns how many were added."""
        before = len(self.transactions)
        self.transactions = merge_transactions(self.transactions, batch)
        return len(self.transactions) - before

    def _apply_import(self, result: ImportResult) -> ImportResult:
        if result.ok:
            self.add_transactions(result.transactions)
        return result

    def import_file(self, file_path) -> ImportResult:
        """Import a file from disk; the collection only changes on success."""
        return self._apply_import(import_file(file_path, self.rules))

    def import_text(self, file_content: str, file_name: str) -> ImportResult:
        return self._apply_import(import_text(file_content, file_name, self.rules))

    def edit_field(self, transaction_id: str, field: str, value) -> bool:
        """Edit date, description or amount; an invalid edit keeps the old value."""
        try:
            self.transactions = update_field(self.transactions, transaction_id, field, value)
        except EditRejected as e:
            logger.warning(f"Edit of {field} on {transaction_id} rejected: {str(e)}")
            return False
        return True

    def edit_category(self, transaction_id: str, category: str) -> bool:
        try:
            self.transactions = update_category(self.transactions, transaction_id, category)
        except EditRejected as e:
            logger.warning(f"Category edit on {transaction_id} rejected: {str(e)}")
            return False
        return True

    def toggle_sort(self, column: str) -> SortDescriptor:
        self.sort_descriptor = toggle_sort(self.sort_descriptor, column)
        return self.sort_descriptor

    @property
    def view(self) -> List[Transaction]:
        """Filtered and sorted transactions for display, memoized on its inputs."""
        key = (self.transactions, self.search_term, self.date_range,
               self.sort_descriptor, self.category_filter)
        if key != self._view_key:
            self._view = query_transactions(
                self.transactions,
                search_term=self.search_term,
                date_range=self.date_range,
                sort_descriptor=self.sort_descriptor,
                category=self.category_filter,
            )
            self._view_key = key
        return list(self._view)

    def export_csv(self) -> str:
        return export_csv(self.view)

    def export_csv_bytes(self) -> bytes:
        return export_csv_bytes(self.view)

    def save_export(self, output_path=None):
        return save_export(self.view, output_path)
