"""
Categorization system for bank transactions.

Assigns each transaction a category and an audit reason using a
chain of responsibility: overrides, keyword rules, then fallbacks.

Quick Start:
    >>> from spend_flow.categorization import CategorizationEngine
    >>>
    >>> engine = CategorizationEngine()
    >>> match = engine.categorize(transaction)
    >>> print(f"Categorized as: {match.category} ({match.reason})")
"""
from spend_flow.categorization.categorizer import CategorizationEngine
from spend_flow.categorization.base import CategorizationRule, CategoryMatch
from spend_flow.categorization.rules import (
    IdOverrideRule,
    NarrativeOverrideRule,
    KeywordRule,
    CreditFallbackRule,
    SourceCategoryRule,
    DefaultRule,
)
from spend_flow.categorization import categories

__all__ = [
    "CategorizationEngine",
    "CategorizationRule",
    "CategoryMatch",
    "IdOverrideRule",
    "NarrativeOverrideRule",
    "KeywordRule",
    "CreditFallbackRule",
    "SourceCategoryRule",
    "DefaultRule",
    "categories",
]
