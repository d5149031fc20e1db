from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from spend_flow.categorization.base import CategorizationRule, CategoryMatch
from spend_flow.categorization.categories import (
    INCOME,
    INTEREST,
    INTEREST_SOURCE_CODE,
    UNCATEGORIZED,
)
from spend_flow.domain.enums import Direction
from spend_flow.domain.models import Transaction
from spend_flow.normalization.normalizer import normalize_text


class IdOverrideRule(CategorizationRule):
    """
    Rule that pins a category to an exact transaction id.

    Example:
        ```
        rule = IdOverrideRule({"tx_1234abcd": "Entertainment"})
        ```
    """

    def __init__(self, overrides: Mapping[str, str]):
        """
        Args:
            overrides: Dict mapping transaction ids to categories
        """
        super().__init__()
        self._overrides: Dict[str, str] = {
            str(txn_id).strip(): str(category).strip()
            for txn_id, category in overrides.items()
        }

    def _match(self, transaction: Transaction) -> Optional[CategoryMatch]:
        category = self._overrides.get(transaction.id)
        if category is None:
            return None
        return CategoryMatch(category, "override:id")

    def __repr__(self) -> str:
        return f"IdOverrideRule({len(self._overrides)} ids)"


class KeywordRule(CategorizationRule):
    """
    Rule that matches substrings of the normalized narrative.

    Features:
    - Case-insensitive, whitespace-insensitive matching
    - Categories are tried in declaration order, then keywords in declaration order
    - The first keyword found wins

    Example:
        ```
        # Match "COLES" or "WOOLWORTHS" -> "Groceries"
        rule = KeywordRule({
            "Groceries": ["coles", "woolworths"]
        })
        ```
    """

    def __init__(self, keyword_map: Mapping[str, Sequence[str]], reason_prefix: str = "rule"):
        """
        Initialize keyword rule

        Args:
            keyword_map: Dict mapping categories to list of keywords.
                Example: `{"Groceries": ["coles", "aldi"]}`
            reason_prefix: Prefix of the audit reason, followed by the keyword
        """
        super().__init__()
        self.reason_prefix = reason_prefix

        # Pre-process keywords the same way narratives are normalized
        self._entries: List[Tuple[str, List[str]]] = []
        for category, keywords in keyword_map.items():
            # `Groceries: coles` in YAML is a single keyword, not a list of letters
            if isinstance(keywords, str):
                keywords = [keywords]
            needles = [normalize_text(str(kw)) for kw in keywords or []]
            self._entries.append((str(category).strip(), [n for n in needles if n]))

    def _match(self, transaction: Transaction) -> Optional[CategoryMatch]:
        narrative = transaction.narrative_normalized
        for category, keywords in self._entries:
            for keyword in keywords:
                if keyword in narrative:
                    return CategoryMatch(category, f"{self.reason_prefix}:{keyword}")
        return None

    def __repr__(self):
        return f"KeywordRule({len(self._entries)} categories)"


class NarrativeOverrideRule(CategorizationRule):
    """
    Rule that forces a category when the narrative contains a needle.

    Needles are tried in declaration order.

    Example:
        ```
        rule = NarrativeOverrideRule({"netflix": "Entertainment"})
        ```
    """

    def __init__(self, needle_map: Mapping[str, str]):
        super().__init__()
        self._entries: List[Tuple[str, str]] = []
        for needle, category in needle_map.items():
            normalized = normalize_text(str(needle))
            if normalized:
                self._entries.append((normalized, str(category).strip()))

    def _match(self, transaction: Transaction) -> Optional[CategoryMatch]:
        for needle, category in self._entries:
            if needle in transaction.narrative_normalized:
                return CategoryMatch(category, f"override:narrative:{needle}")
        return None

    def __repr__(self) -> str:
        return f"NarrativeOverrideRule({len(self._entries)} needles)"


class CreditFallbackRule(CategorizationRule):
    """Money coming in with no other signal is income"""

    def _match(self, transaction: Transaction) -> Optional[CategoryMatch]:
        if transaction.direction == Direction.CREDIT:
            return CategoryMatch(INCOME, "fallback:credit")
        return None


class SourceCategoryRule(CategorizationRule):
    """Fall back on the bank's own category code (INT -> Interest)"""

    def __init__(self, code: str = INTEREST_SOURCE_CODE, category: str = INTEREST):
        super().__init__()
        self.code = code.upper()
        self.category = category

    def _match(self, transaction: Transaction) -> Optional[CategoryMatch]:
        if transaction.source_category.upper() == self.code:
            return CategoryMatch(self.category, f"fallback:sourceCategory={self.code}")
        return None

    def __repr__(self) -> str:
        return f"SourceCategoryRule('{self.code}' -> '{self.category}')"


class DefaultRule(CategorizationRule):
    """
    Fallback rule that always matches.

    Should be the last rule in the chain.
    Returns the defined default category for every transaction.
    """

    def __init__(self, default_category: str = UNCATEGORIZED):
        """
        Initialize the default rule.

        Args:
            default_category: The default category to return
        """
        super().__init__()
        self.default_category = default_category

    def _match(self, _: Transaction) -> Optional[CategoryMatch]:
        """Always matches"""
        return CategoryMatch(self.default_category, f"fallback:{self.default_category.lower()}")

    def __repr__(self) -> str:
        return f"DefaultRule('{self.default_category}')"
