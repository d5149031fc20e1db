from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from spend_flow.categorization import CategorizationEngine
from spend_flow.categorization.categories import UNCATEGORIZED
from spend_flow.domain.enums import Direction
from spend_flow.domain.models import Transaction
from spend_flow.flows.income_flow import build_income_flow
from spend_flow.flows.models import IncomeFlow
from spend_flow.flows.spend_graph import build_spend_graph
from spend_flow.logging_setup import get_logger
from spend_flow.normalization.normalizer import TransactionNormalizer
from spend_flow.normalization.validator import validate_rows
from spend_flow.parsers.base import StatementParser
from spend_flow.parsers.bank_csv import BankCsvParser
from spend_flow.repositories.base import ArtifactRepository
from spend_flow.services.models import PipelineResult

logger = get_logger(__name__)


def select_uncategorized(transactions: Sequence[Transaction]) -> List[Transaction]:
    """Debits no rule or override could place"""
    return [
        txn for txn in transactions
        if txn.direction == Direction.DEBIT and txn.category == UNCATEGORIZED
    ]


class PipelineService:
    """
    Runs the statement -> transactions -> flow-graph pipeline.

    Each run starts from scratch: nothing from earlier runs is read back
    except by build_flow(), which only reads the last run's output.
    """

    def __init__(
        self,
        repository: ArtifactRepository,
        categorization_engine: Optional[CategorizationEngine] = None,
        parser: Optional[StatementParser] = None,
        normalizer: Optional[TransactionNormalizer] = None,
    ):
        self.repository = repository
        self._categorization_engine: Optional[CategorizationEngine] = categorization_engine
        self.parser = parser or BankCsvParser()
        self.normalizer = normalizer or TransactionNormalizer()

    @property
    def categorization_engine(self) -> CategorizationEngine:
        """Lazy-load categorization engine"""
        if self._categorization_engine is None:
            self._categorization_engine = CategorizationEngine()
        return self._categorization_engine

    def run(
        self,
        filepath: Path,
        currency: str = "AUD",
        generated_at: Optional[datetime] = None,
        dry_run: bool = False,
    ) -> PipelineResult:
        """
        Ingest a statement export and write the run's artifacts.

        Args:
            filepath: The path to the export CSV
            currency: Currency code recorded on the spend graph
            generated_at: Timestamp for the spend graph; defaults to now
            dry_run: Build everything but don't write artifacts

        Returns:
            A PipelineResult.

        Raises:
            FileNotFoundError: If the input file is missing
            RowValidationError: If a row lacks a required column
            DateParseError: If a row's date isn't DD/MM/YYYY
        """
        raw_rows = self.parser.parse(filepath)
        rows = validate_rows(raw_rows)
        logger.info("Kept %d of %d rows", len(rows), len(raw_rows))

        transactions = self.normalizer.normalize_many(rows)
        transactions = self.categorization_engine.categorize_many(transactions)

        spend_graph = build_spend_graph(
            transactions, currency=currency, generated_at=generated_at
        )
        uncategorized = select_uncategorized(transactions)

        written = {}
        if not dry_run:
            written = self.repository.save_run(transactions, spend_graph, uncategorized)

        return PipelineResult(
            input_rows=len(rows),
            transactions=transactions,
            spend_graph=spend_graph,
            uncategorized=uncategorized,
            written=written,
            filepath=str(filepath),
        )

    def build_flow(self, currency: Optional[str] = None) -> IncomeFlow:
        """
        Build the income/outflow view from the last run's transactions.

        Args:
            currency: Label currency; defaults to the one recorded by the last run
        """
        transactions = self.repository.load_transactions()
        if currency is None:
            currency = self.repository.load_currency(default="AUD")
        return build_income_flow(transactions, currency=currency)

    def get_uncategorized(self) -> List[Transaction]:
        return self.repository.load_uncategorized()
