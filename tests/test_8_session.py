"""
Session Tests

This module tests the state container end to end: imports, edits, the
memoized view and export of what is displayed.
"""

import json

import pytest

import visionspend.session
from visionspend.categories import CategoryRule
from visionspend.models import DateRange, SortDescriptor
from visionspend.session import TransactionSession


@pytest.fixture
def session():
    return TransactionSession()


@pytest.fixture
def loaded_session(session, sample_transactions):
    session.add_transactions(sample_transactions)
    return session


class TestImports:
    """Test suite for imports through the session"""

    def test_import_text(self, session, csv_text):
        result = session.import_text(csv_text, 'bank.csv')
        assert result.ok
        assert len(session.transactions) == 3
        assert session.transactions[0].description == 'ACME Salary'

    def test_failed_imports_change_nothing(self, loaded_session, csv_text):
        before = loaded_session.transactions

        assert loaded_session.import_text("Date,Description,Amount", 'bank.csv').status == 'empty'
        assert loaded_session.import_text(csv_text, 'bank.pdf').status == 'unsupported'

        assert loaded_session.transactions is before

    def test_import_file(self, session, tmp_path, tsv_text):
        file_path = tmp_path / 'bank.tsv'
        file_path.write_text(tsv_text, encoding='utf-8')

        result = session.import_file(file_path)

        assert result.count == 2
        assert [t.description for t in session.transactions] == ['Uber ride', 'Paycheck']

    def test_unreadable_file(self, loaded_session, tmp_path):
        result = loaded_session.import_file(tmp_path / 'missing.csv')
        assert result.status == 'unreadable'
        assert len(loaded_session.transactions) == 6

    def test_repeated_import_duplicates_rows(self, session, csv_text):
        session.import_text(csv_text, 'bank.csv')
        session.import_text(csv_text, 'bank.csv')
        assert len(session.transactions) == 6

    def test_add_transactions_counts_new_rows(self, loaded_session, sample_transactions):
        assert loaded_session.add_transactions(sample_transactions) == 0

    def test_custom_rules(self, csv_text):
        session = TransactionSession(rules=[CategoryRule('Coffee', ('starbucks',))])
        session.import_text(csv_text, 'bank.csv')
        categories = {t.description: t.category for t in session.transactions}
        assert categories['Starbucks Coffee'] == 'Coffee'
        assert categories['Whole Foods Market'] == 'Miscellaneous'

    def test_rules_from_environment(self, tmp_path, monkeypatch, csv_text):
        rule_file = tmp_path / 'rules.json'
        rule_file.write_text(json.dumps([{'category': 'Shops', 'keywords': ['market']}]))
        monkeypatch.setenv('VISIONSPEND_CATEGORY_RULES', str(rule_file))

        session = TransactionSession()
        session.import_text(csv_text, 'bank.csv')

        assert [t.category for t in session.view if t.description == 'Whole Foods Market'] == ['Shops']


class TestEdits:
    """Test suite for edits through the session"""

    def test_rejected_amount_keeps_value(self, loaded_session):
        assert loaded_session.edit_field('t1', 'amount', 'abc') is False
        edited = [t for t in loaded_session.transactions if t.id == 't1'][0]
        assert edited.amount == -4.50

    def test_rejected_edit_is_logged(self, loaded_session, caplog):
        loaded_session.edit_field('t1', 'date', 'someday')
        assert "rejected" in caplog.text

    def test_accepted_edit(self, loaded_session):
        assert loaded_session.edit_field('t1', 'amount', '-5.00') is True
        assert [t.amount for t in loaded_session.view if t.id == 't1'] == [-5.0]

    def test_edit_category(self, loaded_session):
        assert loaded_session.edit_category('t3', 'Salary') is True
        assert loaded_session.edit_category('t3', '') is False
        assert [t.category for t in loaded_session.transactions if t.id == 't3'] == ['Salary']

    def test_edit_unknown_id(self, loaded_session):
        assert loaded_session.edit_category('missing', 'Salary') is False


class TestView:
    """Test suite for the memoized view"""

    def test_default_view(self, loaded_session):
        assert [t.id for t in loaded_session.view] == ['t5', 't6', 't4', 't3', 't2', 't1']

    def test_filters(self, loaded_session):
        loaded_session.search_term = 'cafe'
        loaded_session.date_range = DateRange(end=loaded_session.transactions[0].date)
        assert [t.id for t in loaded_session.view] == ['t6']

        loaded_session.search_term = ''
        loaded_session.category_filter = 'Groceries'
        assert [t.id for t in loaded_session.view] == ['t2']

    def test_view_is_memoized(self, loaded_session, monkeypatch):
        calls = []
        original = visionspend.session.query_transactions

        def counting_query(*args, **kwargs):
            calls.append(1)
            return original(*args, **kwargs)

        monkeypatch.setattr(visionspend.session, 'query_transactions', counting_query)

        loaded_session.view
        loaded_session.view
        assert len(calls) == 1

        loaded_session.search_term = 'uber'
        assert [t.id for t in loaded_session.view] == ['t5']
        assert len(calls) == 2

        loaded_session.edit_field('t5', 'description', 'Uber pool')
        loaded_session.view
        assert len(calls) == 3

    def test_view_copy_is_independent(self, loaded_session):
        view = loaded_session.view
        view.clear()
        assert len(loaded_session.view) == 6

    def test_toggle_sort(self, loaded_session):
        assert loaded_session.toggle_sort('amount') == SortDescriptor('amount', 'asc')
        assert loaded_session.view[0].id == 't4'
        assert loaded_session.toggle_sort('amount') == SortDescriptor('amount', 'desc')
        assert loaded_session.view[0].id == 't3'

    def test_reset(self, loaded_session):
        loaded_session.search_term = 'uber'
        loaded_session.reset()
        assert loaded_session.transactions == ()
        assert loaded_session.search_term == ''
        assert loaded_session.view == []


class TestExport:
    """Test suite for exporting the displayed view"""

    def test_export_uses_view(self, loaded_session):
        loaded_session.category_filter = 'Food & Drink'
        lines = loaded_session.export_csv().split('\n')
        assert lines[1:] == [
            '2024-02-03,"Corner Cafe","Food & Drink",-6.25',
            '2024-01-15,"Starbucks Coffee","Food & Drink",-4.5',
        ]

    def test_export_bytes(self, loaded_session):
        assert loaded_session.export_csv_bytes() == loaded_session.export_csv().encode('utf-8')

    def test_quoted_description_after_edit(self, loaded_session):
        loaded_session.edit_field('t1', 'description', 'He said "hi"')
        loaded_session.search_term = 'said'
        assert loaded_session.export_csv().split('\n')[1] == (
            '2024-01-15,"He said ""hi""","Food & Drink",-4.5'
        )

    def test_save_export(self, loaded_session, tmp_path):
        path = loaded_session.save_export(tmp_path)
        assert path.read_text(encoding='utf-8') == loaded_session.export_csv()
