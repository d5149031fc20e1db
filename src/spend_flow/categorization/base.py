from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from spend_flow.domain.models import Transaction


@dataclass(frozen=True)
class CategoryMatch:
    """A category plus the audit reason naming the rule that produced it"""
    category: str
    reason: str


class CategorizationRule(ABC):
    """
    Abstract base class for all categorization rules.

    Implements Chain of Responsibility:
    - Each rule tries to categorize a transaction
    - If it can't it passes to the next rule
    - Rules are tried in priority order

    Usage:
        Create chain: overrides -> keyword rules -> fallbacks -> default
        ```
        id_rule = IdOverrideRule(...)
        keyword_rule = KeywordRule(...)
        default_rule = DefaultRule()

        id_rule.set_next(keyword_rule).set_next(default_rule)

        match = id_rule.categorize(transaction)
        ```
    """

    def __init__(self):
        self._next_rule: Optional['CategorizationRule'] = None


    def set_next(self, rule: 'CategorizationRule') -> 'CategorizationRule':
        """
        Set the next rule in the chain.

        Args:
            rule: The next rule to try if this one doesn't match

        Returns:
            The rule that was set (for chaining)

        Example:
            `rule1.set_next(rule2).set_next(rule3)`
        """
        self._next_rule = rule
        return rule

    @abstractmethod
    def _match(self, transaction: Transaction) -> Optional[CategoryMatch]:
        """
        Try to categorize the transaction with this rule alone.

        Subclasses implement their specific matching logic here.

        Args:
            transaction: Transaction to check

        Returns:
            The match, or None if this rule doesn't apply
        """
        pass


    def categorize(self, transaction: Transaction) -> Optional[CategoryMatch]:
        """
        Attempt to categorize a transaction.

        This is the main method called by clients. It:
        1. Checks if this rule matches
        2. If yes, returns its match
        3. If no, tries the next rule in the chain

        Args:
            transaction: Transaction to categorize.

        Returns:
            CategoryMatch, or None if no rules matched
        """
        match = self._match(transaction)
        if match is not None:
            return match

        if self._next_rule:
            return self._next_rule.categorize(transaction)

        return None

    def __repr__(self):
        return f"{self.__class__.__name__}()"
