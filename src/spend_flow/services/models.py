"""
Service layer models - DTOs for service operations.

These models represent the results of service operations, not domain entities.
"""
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Dict, List

from spend_flow.domain.models import Transaction
from spend_flow.flows.models import SpendFlowGraph


@dataclass
class PipelineResult:
    """
    Result of one ingestion run.

    Provides feedback about what happened:
    - How many rows were read and how many became transactions
    - What the spend graph covers
    - Which debits still need a category
    """
    input_rows: int
    transactions: List[Transaction]
    spend_graph: SpendFlowGraph
    uncategorized: List[Transaction]

    written: Dict[str, Path] = field(default_factory=dict)
    filepath: str = ""

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def spend_transaction_count(self) -> int:
        return self.spend_graph.transaction_count

    @property
    def total_spend(self) -> Decimal:
        return self.spend_graph.total_spend

    @property
    def currency(self) -> str:
        return self.spend_graph.currency

    @property
    def category_counts(self) -> Dict[str, int]:
        """Number of transactions per category, in first-seen order"""
        return dict(Counter(txn.category for txn in self.transactions))

    def __str__(self) -> str:
        "Human-readable summary"
        lines = [
            f"Input rows: {self.input_rows}",
            f"Normalized transactions: {self.transaction_count}",
            f"Spend transactions: {self.spend_transaction_count}",
            f"Total spend: {self.currency} {self.total_spend:.2f}",
            f"Uncategorized debit transactions: {len(self.uncategorized)}",
        ]
        return "\n".join(lines)

    def __post_init__(self):
        """Validate counts line up"""
        if self.transaction_count > self.input_rows:
            raise ValueError(
                f"Count mismatch: {self.transaction_count} transactions "
                f"from {self.input_rows} input rows"
            )
