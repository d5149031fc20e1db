import re
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional, Sequence

from spend_flow.domain.exceptions import DateParseError, MoneyParseError
from spend_flow.domain.models import RawRow, Transaction
from spend_flow.logging_setup import get_logger
from spend_flow.normalization.validator import (
    ACCOUNT_COL,
    BALANCE_COL,
    CATEGORY_COL,
    CREDIT_COL,
    DATE_COL,
    DEBIT_COL,
    NARRATIVE_COL,
    SERIAL_COL,
)

logger = get_logger(__name__)

ZERO = Decimal("0")
CENTS = Decimal("0.01")

_MONEY_NOISE = re.compile(r"[\s,$€£¥]")
_WHITESPACE = re.compile(r"\s+")

# Bank payment/deposit/transfer prefixes, tried in order. Only the first match is stripped.
MERCHANT_PREFIXES = [
    re.compile(r"^DEPOSIT[-\s]OSKO PAYMENT\s+\d+\s+", re.IGNORECASE),
    re.compile(r"^WITHDRAWAL[-\s]OSKO PAYMENT\s+\d+\s+", re.IGNORECASE),
    re.compile(r"^WITHDRAWAL MOBILE\s+\d+\s+TFR\s+", re.IGNORECASE),
    re.compile(r"^PAYMENT BY AUTHORITY TO\s+", re.IGNORECASE),
    re.compile(r"^DEPOSIT\s+", re.IGNORECASE),
]


def collapse_whitespace(value: str) -> str:
    return _WHITESPACE.sub(" ", value).strip()


def normalize_text(value: str) -> str:
    """Lowercase and collapse whitespace, used for narratives and rule needles"""
    return collapse_whitespace(value).lower()


def parse_money(value: Optional[str], strict: bool = False) -> Decimal:
    """
    Parse an amount like '$1,234.50' into a Decimal.

    Empty input is zero. Anything else that isn't a finite number is zero
    too, unless strict is set.

    Raises:
        MoneyParseError: In strict mode, for non-empty input that isn't a number
    """
    if not value:
        return ZERO

    cleaned = _MONEY_NOISE.sub("", value)
    if not cleaned:
        return ZERO

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        amount = None

    if amount is None or not amount.is_finite():
        if strict:
            raise MoneyParseError(value)
        logger.warning("Treating unparseable amount %r as 0", value)
        return ZERO

    return amount


def parse_date(value: str) -> date:
    """
    Parse a DD/MM/YYYY statement date.

    Raises:
        DateParseError: For any other shape or an impossible calendar date
    """
    parts = value.strip().split("/")
    if len(parts) != 3:
        raise DateParseError(value)

    try:
        day, month, year = (int(part) for part in parts)
    except ValueError:
        raise DateParseError(value, "non-numeric date parts")

    try:
        return date(year, month, day)
    except ValueError as e:
        raise DateParseError(value, str(e))


def infer_merchant(narrative: str) -> str:
    """Strip the first known bank prefix from a narrative"""
    collapsed = collapse_whitespace(narrative)
    for pattern in MERCHANT_PREFIXES:
        if pattern.match(collapsed):
            cleaned = pattern.sub("", collapsed, count=1).strip()
            return cleaned or narrative.strip()
    return collapsed or narrative.strip()


def hash_signature(signature: str) -> str:
    """
    Stable 32-bit string hash rendered as 'tx_' plus 8 hex digits.

    Walks UTF-16 code units so the ids match across platforms and
    with earlier exports.
    """
    h = 0
    data = signature.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    return f"tx_{h:08x}"


def format_cents(value: Decimal) -> str:
    return str(value.quantize(CENTS, rounding=ROUND_HALF_UP))


def transaction_id(
    raw_date: str,
    account_id: str,
    narrative_normalized: str,
    debit_amount: Decimal,
    credit_amount: Decimal,
    serial: str,
) -> str:
    """Deterministic id over the row's signature fields, in this order"""
    signature = "|".join([
        raw_date,
        account_id,
        narrative_normalized,
        format_cents(debit_amount),
        format_cents(credit_amount),
        serial,
    ])
    return hash_signature(signature)


class TransactionNormalizer:
    """
    Converts validated raw rows into uncategorized Transactions.

    Usage:
        normalizer = TransactionNormalizer()
        transactions = normalizer.normalize_many(rows)
    """

    def __init__(self, strict_money: bool = False):
        """
        Args:
            strict_money: Fail on malformed amounts instead of reading them as 0
        """
        self.strict_money = strict_money

    def normalize(self, row: RawRow, index: int) -> Transaction:
        """
        Normalize a single row.

        Args:
            row: A row that passed validation and isn't blank
            index: Position of the row among kept rows; stands in for a missing serial

        Raises:
            DateParseError: If the date isn't DD/MM/YYYY
        """
        debit_amount = parse_money(row.get(DEBIT_COL), strict=self.strict_money)
        credit_amount = parse_money(row.get(CREDIT_COL), strict=self.strict_money)

        narrative = row[NARRATIVE_COL].strip()
        narrative_normalized = normalize_text(narrative)
        account_id = row[ACCOUNT_COL].strip()
        serial = (row.get(SERIAL_COL) or "").strip() or str(index)

        raw_balance = row.get(BALANCE_COL)
        balance = (
            parse_money(raw_balance, strict=self.strict_money) if raw_balance else None
        )

        return Transaction(
            id=transaction_id(
                row[DATE_COL].strip(),
                account_id,
                narrative_normalized,
                debit_amount,
                credit_amount,
                serial,
            ),
            date=parse_date(row[DATE_COL]),
            account_id=account_id,
            narrative=narrative,
            narrative_normalized=narrative_normalized,
            merchant=infer_merchant(narrative),
            debit_amount=debit_amount,
            credit_amount=credit_amount,
            source_category=(row.get(CATEGORY_COL) or "").strip(),
            balance=balance,
        )

    def normalize_many(self, rows: Sequence[RawRow]) -> List[Transaction]:
        """Normalize rows in order; any bad date fails the batch"""
        return [self.normalize(row, index) for index, row in enumerate(rows)]
