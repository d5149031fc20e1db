from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from spend_flow.categorization.base import CategorizationRule, CategoryMatch
from spend_flow.categorization.rules import (
    IdOverrideRule,
    NarrativeOverrideRule,
    KeywordRule,
    CreditFallbackRule,
    SourceCategoryRule,
    DefaultRule,
)
from spend_flow.categorization.categories import UNCATEGORIZED
from spend_flow.config.settings import ConfigLoader
from spend_flow.domain.models import Transaction
from spend_flow.logging_setup import get_logger

logger = get_logger(__name__)


class CategorizationEngine:
    """
    Main engine for categorizing transactions.

    Builds a chain of rules in priority order:
    1. Overrides by transaction id
    2. Overrides by narrative substring
    3. Keyword rules from the categories config
    4. Credit fallback (Income)
    5. Source category fallback (INT -> Interest)
    6. Default (Uncategorized)

    Usage:
        # Production - loads from ConfigLoader
        engine = CategorizationEngine()

        # Testing - inject custom config
        engine = CategorizationEngine(
            rules_config={"rules": {"Groceries": ["coles"]}},
            overrides_config={"overrides": {"tx_1234abcd": "Entertainment"}},
        )

        match = engine.categorize(transaction)
        categorized = engine.categorize_many(transactions)
    """

    def __init__(
        self,
        rules_config: Optional[Dict[str, Any]] = None,
        overrides_config: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize categorization engine.

        Args:
            rules_config: Optional `{"rules": {category: [keyword, ...]}}`.
                If None, loads from ConfigLoader.
            overrides_config: Optional `{"overrides": {id: category},
                "narrative_contains": {needle: category}}`.
                If None, loads from ConfigLoader.
        """
        self._rule_chain: Optional[CategorizationRule] = None

        if rules_config is None:
            rules_config = ConfigLoader.load_rules_config()
        if overrides_config is None:
            overrides_config = ConfigLoader.load_overrides_config()

        self._build_rule_chain(rules_config, overrides_config)

    def _build_rule_chain(
        self,
        rules_config: Dict[str, Any],
        overrides_config: Dict[str, Any],
    ) -> None:
        """
        Build the chain of responsibility for categorization rules.

        Empty override or rule sections are left out of the chain.
        """
        rules: List[CategorizationRule] = []

        id_overrides = overrides_config.get("overrides") or {}
        if id_overrides:
            rules.append(IdOverrideRule(id_overrides))

        narrative_overrides = overrides_config.get("narrative_contains") or {}
        if narrative_overrides:
            rules.append(NarrativeOverrideRule(narrative_overrides))

        keyword_map = rules_config.get("rules") or {}
        if keyword_map:
            rules.append(KeywordRule(keyword_map))

        rules.append(CreditFallbackRule())
        rules.append(SourceCategoryRule())
        rules.append(DefaultRule(UNCATEGORIZED))

        self._rule_chain = rules[0]
        for i in range(len(rules) - 1):
            rules[i].set_next(rules[i + 1])

        logger.debug("Categorization chain:\n%s", self.get_rule_chain_info())

    def categorize(self, transaction: Transaction) -> CategoryMatch:
        """
        Categorize a single transaction.

        Args:
            transaction: Transaction to categorize

        Returns:
            The category and the reason naming which rule fired

        Example:
            ```
            >>> engine = CategorizationEngine(rules_config={"rules": {"Groceries": ["coles"]}})
            >>> engine.categorize(txn)
            CategoryMatch(category='Groceries', reason='rule:coles')
            ```
        """
        if not self._rule_chain:
            raise RuntimeError("Rule chain not initialized")

        match = self._rule_chain.categorize(transaction)

        assert match is not None, "Rule chain should never return None"

        return match

    def categorize_many(self, transactions: Iterable[Transaction]) -> List[Transaction]:
        """
        Categorize multiple transactions.

        Inputs are left untouched; categorized copies are returned in order.
        """
        categorized = []
        for txn in transactions:
            match = self.categorize(txn)
            categorized.append(txn.with_category(match.category, match.reason))

        counts = Counter(txn.category for txn in categorized)
        logger.info("Categorized %d transactions: %s", len(categorized), dict(counts))
        return categorized

    def get_rule_chain_info(self) -> str:
        """
        Get information about the current rule chain.

        Returns:
            String description of the current rule chain.
        """
        if not self._rule_chain:
            return "No rules loaded"

        rules = []
        current = self._rule_chain
        priority = 1

        while current:
            rules.append(f"{priority}. {current}")
            current = current._next_rule
            priority += 1

        return "\n".join(rules)

    def __repr__(self) -> str:
        num_rules = 0
        current = self._rule_chain
        while current:
            num_rules += 1
            current = current._next_rule

        return f"CategorizationEngine({num_rules} rules in chain)"
