import json
import pytest
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from spend_flow.flows.spend_graph import build_spend_graph
from spend_flow.repositories.base import ArtifactNotFoundError
from spend_flow.repositories.json_artifact_repository import JsonArtifactRepository


@pytest.fixture
def transactions(make_transaction):
    return [
        make_transaction("COLES 0931 SYDNEY", debit="45.20", category="Groceries", merchant="COLES 0931 SYDNEY"),
        make_transaction("DEPOSIT ACME PAYROLL", credit="3000", category="Income", merchant="ACME PAYROLL"),
        make_transaction("MYSTERY SHOP", debit="12", category="Uncategorized"),
    ]


@pytest.fixture
def graph(transactions):
    return build_spend_graph(
        transactions, currency="NZD", generated_at=datetime(2026, 3, 5, tzinfo=timezone.utc)
    )


@pytest.mark.integration
class TestJsonArtifactRepository:
    """Uses a real temp directory"""

    def test_save_run_writes_three_files(self, tmp_path: Path, transactions, graph):
        # Arrange
        repo = JsonArtifactRepository(tmp_path / "processed")

        # Act
        written = repo.save_run(transactions, graph, transactions[2:])

        # Assert
        assert sorted(written) == ["sankey.json", "transactions.json", "uncategorized.json"]
        for path in written.values():
            assert path.exists()
            assert path.read_text(encoding="utf-8").endswith("\n")

    def test_transactions_file_shape(self, tmp_path: Path, transactions, graph):
        repo = JsonArtifactRepository(tmp_path)
        repo.save_run(transactions, graph, [])

        data = json.loads((tmp_path / "transactions.json").read_text(encoding="utf-8"))

        assert data[0]["date"] == "2026-03-05"
        assert data[0]["amount"] == 45.2
        assert data[0]["direction"] == "debit"
        assert data[1]["amount"] == -3000.0
        assert data[1]["categoryReason"] == "rule:income"

    def test_round_trip(self, tmp_path: Path, transactions, graph):
        # Arrange
        repo = JsonArtifactRepository(tmp_path)
        repo.save_run(transactions, graph, transactions[2:])

        # Act
        loaded = repo.load_transactions()

        # Assert
        assert loaded == transactions
        assert loaded[0].debit_amount == Decimal("45.2")
        assert repo.load_uncategorized() == transactions[2:]
        assert repo.load_currency(default="AUD") == "NZD"

    def test_publish_dir_mirrors_artifacts(self, tmp_path: Path, transactions, graph):
        publish = tmp_path / "public"
        publish.mkdir()
        repo = JsonArtifactRepository(tmp_path / "out", publish)

        repo.save_run(transactions, graph, [])

        assert (publish / "sankey.json").read_text(encoding="utf-8") == (
            tmp_path / "out" / "sankey.json"
        ).read_text(encoding="utf-8")

    def test_missing_publish_dir_is_skipped(self, tmp_path: Path, transactions, graph):
        repo = JsonArtifactRepository(tmp_path / "out", tmp_path / "public")

        repo.save_run(transactions, graph, [])

        assert not (tmp_path / "public").exists()

    def test_load_before_any_run(self, tmp_path: Path):
        repo = JsonArtifactRepository(tmp_path)

        with pytest.raises(ArtifactNotFoundError, match="Run ingestion first"):
            repo.load_transactions()
        assert repo.load_uncategorized() == []
        assert repo.load_currency(default="AUD") == "AUD"

    def test_second_run_replaces_first(self, tmp_path: Path, transactions, graph):
        repo = JsonArtifactRepository(tmp_path)
        repo.save_run(transactions, graph, [])

        repo.save_run(transactions[:1], graph, [])

        assert len(repo.load_transactions()) == 1
