"""
Keyword based category inference.

Rules are matched in order against the lower-cased description; the first rule
whose keywords hit (and whose excludes do not) decides the category. Inference
is advisory: an explicit category from the source row always wins.

A JSON rule file may replace the defaults. It holds a list of objects:

    [{"category": "Income", "keywords": ["invoice"], "excludes": ["payment"]}]

Set VISIONSPEND_CATEGORY_RULES to point at such a file.
"""

import json
import logging
import os
import pathlib
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import UNCATEGORIZED

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Miscellaneous"


@dataclass(frozen=True)
class CategoryRule:
    category: str
    keywords: Tuple[str, ...]
    excludes: Tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        if not any(keyword in text for keyword in self.keywords):
            return False
        return not any(exclude in text for exclude in self.excludes)


# "salary" alone is income; "invoice" only when it is not a payment of one
DEFAULT_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule("Food & Drink", ("coffee", "starbucks", "cafe")),
    CategoryRule("Groceries", ("grocery", "market")),
    CategoryRule("Transport", ("transport", "uber", "lyft", "taxi")),
    CategoryRule("Housing", ("rent", "mortgage")),
    CategoryRule("Income", ("salary",)),
    CategoryRule("Income", ("invoice",), excludes=("payment",)),
)

# Labels offered to the user when reassigning a category
CATEGORIES = [
    "Food & Drink", "Groceries", "Transport", "Housing", "Income",
    "Entertainment", "Shopping", "Utilities", "Healthcare", "Miscellaneous",
    UNCATEGORIZED, "Transfer/Income", "Bills", "Subscriptions", "Travel",
    "Gifts", "Personal Care", "Education", "Business",
]


def load_category_rules(file_path=None) -> Tuple[CategoryRule, ...]:
    """Load keyword rules from a JSON file.

    Args:
        file_path (str or Path, optional): Rule file. Defaults to the
            VISIONSPEND_CATEGORY_RULES environment variable.

    Returns:
        tuple: Rules in file order, or DEFAULT_RULES when no file is configured

    Raises:
        ValueError: If the file is missing or malformed
    """
    if file_path is None:
        file_path = os.getenv('VISIONSPEND_CATEGORY_RULES')
    if not file_path:
        return DEFAULT_RULES

    path = pathlib.Path(file_path)
    if not path.exists():
        raise ValueError(f"Category rule file not found: {path}")

    logger.info(f"Loading category rules from {path}")
    try:
        raw_rules = json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid category rule file {path}: {str(e)}")

    if not isinstance(raw_rules, list):
        raise ValueError(f"Category rule file must hold a list, got {type(raw_rules).__name__}")

    rules = []
    for index, raw in enumerate(raw_rules):
        try:
            category = str(raw['category']).strip()
            keywords = tuple(str(k).lower() for k in raw['keywords'])
        except (KeyError, TypeError):
            raise ValueError(f"Rule {index} needs 'category' and 'keywords': {raw}")
        if not category or not keywords:
            raise ValueError(f"Rule {index} has an empty category or keyword list")
        excludes = tuple(str(k).lower() for k in raw.get('excludes', ()))
        rules.append(CategoryRule(category, keywords, excludes))

    logger.info(f"Loaded {len(rules)} category rules")
    return tuple(rules)


def infer_category(description: str, rules: Optional[Sequence[CategoryRule]] = None) -> str:
    """Map a description to a category label.

    Args:
        description (str): Free text transaction description
        rules (list, optional): Ordered rules. Defaults to DEFAULT_RULES.

    Returns:
        str: Category of the first matching rule, or 'Miscellaneous'
    """
    if rules is None:
        rules = DEFAULT_RULES
    text = (description or '').lower()
    for rule in rules:
        if rule.matches(text):
            return rule.category
    return DEFAULT_CATEGORY


def available_categories(transactions: Iterable) -> List[str]:
    """Categories to offer in pickers and filters, 'all' first."""
    in_use = {t.category for t in transactions if t.category}
    return ['all'] + sorted(set(CATEGORIES) | in_use)
