import pytest
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import List

from spend_flow.categorization import CategorizationEngine
from spend_flow.domain.exceptions import DateParseError, RowValidationError
from spend_flow.domain.models import Transaction
from spend_flow.repositories.base import ArtifactNotFoundError, ArtifactRepository
from spend_flow.services.models import PipelineResult
from spend_flow.services.pipeline_service import PipelineService, select_uncategorized

FIXED_TIME = datetime(2026, 3, 5, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def mock_repository(mocker) -> ArtifactRepository:
    """Create a mock repository"""
    repository = mocker.Mock()
    repository.save_run.return_value = {"transactions.json": Path("out/transactions.json")}
    return repository


@pytest.fixture
def mock_parser(mocker, coles_row):
    parser = mocker.Mock()
    parser.parse.return_value = [
        coles_row,
        {"Bank Account": "123", "Date": "", "Narrative": "", "Debit Amount": ""},
        {
            "Bank Account": "123",
            "Date": "06/03/2026",
            "Narrative": "DEPOSIT ACME PAYROLL",
            "Credit Amount": "3000.00",
        },
        {
            "Bank Account": "123",
            "Date": "07/03/2026",
            "Narrative": "MYSTERY SHOP",
            "Debit Amount": "12.00",
        },
    ]
    return parser


@pytest.fixture
def engine() -> CategorizationEngine:
    return CategorizationEngine(
        rules_config={"rules": {"Groceries": ["coles"]}},
        overrides_config={"overrides": {}, "narrative_contains": {}},
    )


@pytest.fixture
def service(mock_repository, mock_parser, engine) -> PipelineService:
    """Create service with mocked repository and parser"""
    return PipelineService(
        repository=mock_repository,
        categorization_engine=engine,
        parser=mock_parser,
    )


@pytest.mark.unit
class TestPipelineRun:
    """Test the ingestion pipeline"""

    def test_run_produces_result(self, service: PipelineService, mock_parser):
        # Act
        result = service.run(Path("export.csv"), generated_at=FIXED_TIME)

        # Assert
        mock_parser.parse.assert_called_once_with(Path("export.csv"))
        assert isinstance(result, PipelineResult)
        assert result.input_rows == 3
        assert result.transaction_count == 3
        assert [t.category for t in result.transactions] == ["Groceries", "Income", "Uncategorized"]
        assert result.total_spend == Decimal("57.20")
        assert result.spend_transaction_count == 2
        assert result.filepath == "export.csv"

    def test_run_saves_artifacts(self, service: PipelineService, mock_repository):
        # Act
        result = service.run(Path("export.csv"), currency="AUD", generated_at=FIXED_TIME)

        # Assert
        mock_repository.save_run.assert_called_once_with(
            result.transactions, result.spend_graph, result.uncategorized
        )
        assert result.written == {"transactions.json": Path("out/transactions.json")}

    def test_dry_run_writes_nothing(self, service: PipelineService, mock_repository):
        result = service.run(Path("export.csv"), dry_run=True)

        mock_repository.save_run.assert_not_called()
        assert result.written == {}

    def test_uncategorized_debits_reported(self, service: PipelineService):
        result = service.run(Path("export.csv"), generated_at=FIXED_TIME)

        assert [t.narrative for t in result.uncategorized] == ["MYSTERY SHOP"]

    def test_currency_is_recorded(self, service: PipelineService):
        result = service.run(Path("export.csv"), currency="NZD", generated_at=FIXED_TIME)

        assert result.currency == "NZD"
        assert result.spend_graph.generated_at == FIXED_TIME

    def test_invalid_row_aborts_without_writing(self, service: PipelineService, mock_parser, mock_repository):
        # Arrange
        mock_parser.parse.return_value = [{"Date": "05/03/2026", "Narrative": "COLES"}]

        # Act & Assert
        with pytest.raises(RowValidationError):
            service.run(Path("export.csv"))
        mock_repository.save_run.assert_not_called()

    def test_bad_date_aborts_without_writing(self, service: PipelineService, mock_parser, mock_repository, coles_row):
        mock_parser.parse.return_value = [dict(coles_row, Date="2026-03-05")]

        with pytest.raises(DateParseError):
            service.run(Path("export.csv"))
        mock_repository.save_run.assert_not_called()

    def test_engine_loaded_lazily(self, mocker, mock_repository):
        # Arrange
        engine_cls = mocker.patch("spend_flow.services.pipeline_service.CategorizationEngine")
        service = PipelineService(repository=mock_repository)

        # Act & Assert
        engine_cls.assert_not_called()
        assert service.categorization_engine is engine_cls.return_value
        assert service.categorization_engine is engine_cls.return_value
        engine_cls.assert_called_once_with()


@pytest.mark.unit
class TestPipelineQueries:

    def test_build_flow_uses_recorded_currency(self, service: PipelineService, mock_repository, make_transaction):
        # Arrange
        mock_repository.load_transactions.return_value = [
            make_transaction("PAY", credit="100", category="Income", merchant="Acme"),
            make_transaction("RENT", debit="40", category="Housing", merchant="Agent"),
        ]
        mock_repository.load_currency.return_value = "NZD"

        # Act
        flow = service.build_flow()

        # Assert
        mock_repository.load_currency.assert_called_once_with(default="AUD")
        assert flow.total_income == Decimal("100.00")
        assert flow.savings == Decimal("60.00")
        assert flow.nodes[0].label_sub.startswith("NZ$100.00")

    def test_build_flow_explicit_currency(self, service: PipelineService, mock_repository):
        mock_repository.load_transactions.return_value = []

        service.build_flow(currency="AUD")

        mock_repository.load_currency.assert_not_called()

    def test_build_flow_without_run_raises(self, service: PipelineService, mock_repository):
        mock_repository.load_transactions.side_effect = ArtifactNotFoundError("Missing")

        with pytest.raises(ArtifactNotFoundError):
            service.build_flow()

    def test_get_uncategorized_delegates(self, service: PipelineService, mock_repository):
        mock_repository.load_uncategorized.return_value = []

        assert service.get_uncategorized() == []
        mock_repository.load_uncategorized.assert_called_once_with()


@pytest.mark.unit
class TestPipelineResult:

    def test_select_uncategorized_ignores_credits(self, make_transaction):
        transactions: List[Transaction] = [
            make_transaction("A", debit="5", category="Uncategorized"),
            make_transaction("B", credit="5", category="Uncategorized"),
            make_transaction("C", debit="5", category="Groceries"),
        ]

        assert [t.narrative for t in select_uncategorized(transactions)] == ["A"]

    def test_count_mismatch_rejected(self, make_transaction, mocker):
        with pytest.raises(ValueError, match="Count mismatch"):
            PipelineResult(
                input_rows=0,
                transactions=[make_transaction("A", debit="1")],
                spend_graph=mocker.Mock(),
                uncategorized=[],
            )

    def test_str_summary(self, service: PipelineService):
        text = str(service.run(Path("export.csv"), generated_at=FIXED_TIME))

        assert "Input rows: 3" in text
        assert "Total spend: AUD 57.20" in text
        assert "Uncategorized debit transactions: 1" in text

    def test_category_counts(self, service: PipelineService):
        result = service.run(Path("export.csv"), generated_at=FIXED_TIME)

        assert result.category_counts == {"Groceries": 1, "Income": 1, "Uncategorized": 1}
