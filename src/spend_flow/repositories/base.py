from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Sequence

from spend_flow.domain.models import Transaction
from spend_flow.flows.models import SpendFlowGraph


class ArtifactNotFoundError(Exception):
    """Raised when a run's output hasn't been produced yet."""
    pass


class ArtifactRepository(ABC):
    """
    Abstract repository for a run's output artifacts.

    Each run replaces the previous artifacts wholesale; nothing is
    merged or deduplicated across runs.
    """

    @abstractmethod
    def save_run(
        self,
        transactions: Sequence[Transaction],
        spend_graph: SpendFlowGraph,
        uncategorized: Sequence[Transaction],
    ) -> Dict[str, Path]:
        """
        Write all artifacts of a run.

        Args:
            transactions: Every categorized transaction, in input order
            spend_graph: The spend flow-graph
            uncategorized: Debits left Uncategorized

        Returns:
            Artifact name -> path written
        """
        pass

    @abstractmethod
    def load_transactions(self) -> List[Transaction]:
        """
        Read the transactions of the last run.

        Raises:
            ArtifactNotFoundError: If no run has written them yet
        """
        pass

    @abstractmethod
    def load_uncategorized(self) -> List[Transaction]:
        """Read the uncategorized debits of the last run, empty if absent"""
        pass

    @abstractmethod
    def load_currency(self, default: str) -> str:
        """Currency recorded with the last spend graph, or default"""
        pass
