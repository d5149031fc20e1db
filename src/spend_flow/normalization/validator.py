from typing import Any, Iterable, List, Mapping

from spend_flow.domain.exceptions import RowValidationError
from spend_flow.domain.models import RawRow

# Column names from the bank export
ACCOUNT_COL = "Bank Account"
DATE_COL = "Date"
NARRATIVE_COL = "Narrative"
DEBIT_COL = "Debit Amount"
CREDIT_COL = "Credit Amount"
BALANCE_COL = "Balance"
CATEGORY_COL = "Categories"
SERIAL_COL = "Serial"

REQUIRED_COLUMNS = (ACCOUNT_COL, DATE_COL, NARRATIVE_COL)
OPTIONAL_COLUMNS = (DEBIT_COL, CREDIT_COL, BALANCE_COL, CATEGORY_COL, SERIAL_COL)


def check_row(row: Mapping[str, Any], row_number: int) -> RawRow:
    """
    Check a raw row has the expected field set.

    Required columns must be present as strings. Optional columns may be
    missing, but when present they must be strings too. Extra columns are
    ignored.

    Args:
        row: Raw row from the statement
        row_number: 1-based position of the row, used in error messages

    Returns:
        The same row

    Raises:
        RowValidationError: If a required column is missing or any known
            column isn't a string
    """
    problems: List[str] = []

    for col in REQUIRED_COLUMNS:
        if col not in row or row[col] is None:
            problems.append(f"missing required column '{col}'")
        elif not isinstance(row[col], str):
            problems.append(f"'{col}' must be a string, got {type(row[col]).__name__}")

    for col in OPTIONAL_COLUMNS:
        value = row.get(col)
        if value is not None and not isinstance(value, str):
            problems.append(f"'{col}' must be a string, got {type(value).__name__}")

    if problems:
        raise RowValidationError(row_number, problems)

    return row


def is_blank(row: RawRow) -> bool:
    """Rows with no date or no narrative are blank lines in the export"""
    return not row[DATE_COL].strip() or not row[NARRATIVE_COL].strip()


def validate_rows(rows: Iterable[Mapping[str, Any]]) -> List[RawRow]:
    """
    Validate every row and drop blank ones.

    A single malformed row fails the whole batch.

    Returns:
        The rows that carry a transaction, in input order
    """
    kept: List[RawRow] = []
    for row_number, row in enumerate(rows, start=1):
        checked = check_row(row, row_number)
        if is_blank(checked):
            continue
        kept.append(checked)
    return kept
