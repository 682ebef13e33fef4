import logging
from datetime import date

import pytest

from visionspend.models import Transaction

# Comma delimited export with a header, Date/Description/Amount order
sample_csv_text = "\n".join([
    "Date,Description,Amount",
    "2024-01-15,Starbucks Coffee,-4.50",
    "2024-01-16,Whole Foods Market,-82.10",
    "2024-01-31,ACME Salary,3200.00",
])

# Tab delimited export, Date/Amount/Description order with explicit categories
sample_tsv_text = "\r\n".join([
    "2024-02-01\t2500.00\tPaycheck\tIncome",
    "2024-02-03\t-15.75\tUber ride\t",
    "",
])


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep user configuration out of the tests."""
    monkeypatch.delenv('VISIONSPEND_CATEGORY_RULES', raising=False)
    monkeypatch.delenv('LOG_FILE', raising=False)
    monkeypatch.delenv('LOG_LEVEL', raising=False)


@pytest.fixture
def restore_root_logger():
    """Undo handler changes made by setup_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def make_transaction():
    """Factory for transactions with readable ids."""
    def _make(id, day, description='Test Transaction', amount=-10.0, category='Miscellaneous'):
        if isinstance(day, str):
            day = date.fromisoformat(day)
        return Transaction(id=id, date=day, description=description, amount=amount, category=category)
    return _make


@pytest.fixture
def sample_transactions(make_transaction):
    """A small collection covering expenses, income and several categories."""
    return (
        make_transaction('t1', '2024-01-15', 'Starbucks Coffee', -4.50, 'Food & Drink'),
        make_transaction('t2', '2024-01-16', 'Whole Foods Market', -82.10, 'Groceries'),
        make_transaction('t3', '2024-01-31', 'ACME Salary', 3200.00, 'Income'),
        make_transaction('t4', '2024-02-01', 'Monthly Rent', -1200.00, 'Housing'),
        make_transaction('t5', '2024-02-03', 'Uber ride', -15.75, 'Transport'),
        make_transaction('t6', '2024-02-03', 'Corner Cafe', -6.25, 'Food & Drink'),
    )


@pytest.fixture
def csv_text():
    return sample_csv_text


@pytest.fixture
def tsv_text():
    return sample_tsv_text
