import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from spend_flow.domain.models import Transaction
from spend_flow.flows.models import SpendFlowGraph
from spend_flow.logging_setup import get_logger
from spend_flow.repositories.base import ArtifactNotFoundError, ArtifactRepository

logger = get_logger(__name__)

TRANSACTIONS_FILE = "transactions.json"
SANKEY_FILE = "sankey.json"
UNCATEGORIZED_FILE = "uncategorized.json"


def write_json(path: Path, data: Any) -> None:
    """Write pretty JSON with a trailing newline, creating parent dirs"""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")


class JsonArtifactRepository(ArtifactRepository):
    """
    Stores run artifacts as JSON files in an output directory.

    When a publish directory is given and already exists, the artifacts
    are mirrored there too (e.g. a web app's public folder).
    """

    def __init__(
        self,
        output_dir: Union[Path, str],
        publish_dir: Optional[Union[Path, str]] = None,
    ):
        self.output_dir = Path(output_dir)
        self.publish_dir = Path(publish_dir) if publish_dir else None

    def save_run(
        self,
        transactions: Sequence[Transaction],
        spend_graph: SpendFlowGraph,
        uncategorized: Sequence[Transaction],
    ) -> Dict[str, Path]:
        payloads = {
            TRANSACTIONS_FILE: [txn.to_dict() for txn in transactions],
            SANKEY_FILE: spend_graph.to_dict(),
            UNCATEGORIZED_FILE: [txn.to_dict() for txn in uncategorized],
        }

        written: Dict[str, Path] = {}
        for name, payload in payloads.items():
            path = self.output_dir / name
            write_json(path, payload)
            written[name] = path

        if self.publish_dir is not None:
            if self.publish_dir.is_dir():
                for name, payload in payloads.items():
                    write_json(self.publish_dir / name, payload)
                logger.info("Published artifacts to %s", self.publish_dir)
            else:
                logger.debug("Publish dir %s doesn't exist, skipping", self.publish_dir)

        return written

    def _read(self, name: str) -> Any:
        path = self.output_dir / name
        if not path.exists():
            raise ArtifactNotFoundError(f"Missing {path}. Run ingestion first.")
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def load_transactions(self) -> List[Transaction]:
        return [Transaction.from_dict(item) for item in self._read(TRANSACTIONS_FILE)]

    def load_uncategorized(self) -> List[Transaction]:
        try:
            data = self._read(UNCATEGORIZED_FILE)
        except ArtifactNotFoundError:
            return []
        return [Transaction.from_dict(item) for item in data]

    def load_currency(self, default: str) -> str:
        try:
            data = self._read(SANKEY_FILE)
        except ArtifactNotFoundError:
            return default
        return data.get("currency") or default
