import pytest
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from spend_flow.domain.models import Transaction
from spend_flow.normalization.normalizer import TransactionNormalizer, normalize_text

_counter = {"n": 0}


def build_transaction(
    narrative: str = "COLES 0931 SYDNEY",
    debit: str = "0",
    credit: str = "0",
    category: Optional[str] = None,
    merchant: Optional[str] = None,
    source_category: str = "",
    txn_id: Optional[str] = None,
) -> Transaction:
    """Transaction with just the fields a test cares about"""
    _counter["n"] += 1
    txn = Transaction(
        id=txn_id or f"tx_test{_counter['n']:04d}",
        date=date(2026, 3, 5),
        account_id="123",
        narrative=narrative,
        narrative_normalized=normalize_text(narrative),
        merchant=merchant if merchant is not None else narrative,
        debit_amount=Decimal(debit),
        credit_amount=Decimal(credit),
        source_category=source_category,
    )
    if category is not None:
        txn = txn.with_category(category, f"rule:{category.lower()}")
    return txn


@pytest.fixture
def make_transaction() -> Callable[..., Transaction]:
    """Factory for transactions built field by field"""
    return build_transaction


@pytest.fixture
def normalizer() -> TransactionNormalizer:
    return TransactionNormalizer()


@pytest.fixture
def coles_row() -> dict:
    """The Coles purchase row used throughout the docs"""
    return {
        "Bank Account": "123",
        "Date": "05/03/2026",
        "Narrative": "COLES 0931 SYDNEY",
        "Debit Amount": "45.20",
    }
