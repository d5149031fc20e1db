from typing import Dict, List
from pathlib import Path

import pandas as pd

from spend_flow.domain.models import RawRow
from spend_flow.logging_setup import get_logger
from spend_flow.normalization.validator import REQUIRED_COLUMNS
from spend_flow.parsers.base import StatementParser

logger = get_logger(__name__)


class BankCsvParser(StatementParser):
    """
    Parser for bank "data export" CSV files.

    Handles the export format with:
    - A header row naming the columns (Bank Account, Date, Narrative, ...)
    - Every cell kept as text, amounts included
    - Blank lines between rows

    Example:
        parser = BankCsvParser()
        rows = parser.parse('Data_export_23022026.csv')
    """

    def validate_file(self, filepath):
        """
        Check the file exists, is a CSV and carries the required columns.

        :param filepath: Path to the export file
        """
        path = Path(filepath)

        if not path.exists():
            raise FileNotFoundError(f"Input file does not exist: {path}")

        if path.suffix.lower() != ".csv":
            raise ValueError(f"File must be .csv, got {path.suffix}")

        header = self._read(path, nrows=0)
        missing = [col for col in REQUIRED_COLUMNS if col not in header.columns]
        if missing:
            raise ValueError(
                f"Missing required columns: {missing}. "
                f"Available columns: {list(header.columns)}"
            )

    def parse(self, filepath) -> List[RawRow]:
        """
        Read every row of the export as a dict of strings.

        Empty cells come back as empty strings. Cells a short row doesn't
        reach at all come back as None, so validation can report them
        (pandas 2 fills those with NaN; pandas 3 would hand back "").
        """
        self.validate_file(filepath)

        df = self._read(Path(filepath))
        df = df.astype(object).where(df.notna(), None)
        rows: List[Dict[str, str]] = df.to_dict(orient="records")

        logger.info("Read %d rows from %s", len(rows), filepath)
        return rows

    def _read(self, path: Path, **kwargs) -> pd.DataFrame:
        try:
            df = pd.read_csv(
                path,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                encoding="utf-8-sig",
                **kwargs,
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise ValueError(f"Failed to read CSV file {path}: {e}")

        df.columns = [str(col).strip() for col in df.columns]
        return df
