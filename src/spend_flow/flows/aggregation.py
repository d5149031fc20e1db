"""
Grouping and ranking shared by both flow-graph builders.

Both the spend graph and the income/outflow view reduce transactions to
labelled buckets: pick the transactions that count, group them by a key,
total them, then order or compact the buckets. Keeping that in one place
stops the two graphs from disagreeing about what counts as spend.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from spend_flow.categorization.categories import EXCLUDED_SPEND_CATEGORIES
from spend_flow.domain.enums import Direction
from spend_flow.domain.models import Transaction

ZERO = Decimal("0")
CENTS = Decimal("0.01")

KeyFunc = Callable[[Transaction], str]
Predicate = Callable[[Transaction], bool]
ValueFunc = Callable[[Transaction], Decimal]


@dataclass
class Bucket:
    """Running total for one group of transactions"""
    label: str
    total: Decimal = ZERO
    count: int = 0

    def add(self, value: Decimal) -> None:
        self.total += value
        self.count += 1


def round_money(value: Decimal) -> Decimal:
    """Round to cents, halves away from zero"""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def ratio(part: Decimal, whole: Decimal) -> float:
    """part / whole clamped to [0, 1]; 0 when whole isn't positive"""
    if whole <= 0:
        return 0.0
    return min(1.0, max(0.0, float(part / whole)))


def is_spend(transaction: Transaction) -> bool:
    """Outflows that count as spending: debits that aren't income or transfers"""
    return (
        transaction.direction == Direction.DEBIT
        and transaction.amount > 0
        and transaction.category not in EXCLUDED_SPEND_CATEGORIES
    )


def absolute_amount(transaction: Transaction) -> Decimal:
    return abs(transaction.amount)


def aggregate(
    transactions: Iterable[Transaction],
    key: KeyFunc,
    predicate: Optional[Predicate] = None,
    value: ValueFunc = absolute_amount,
) -> Dict[str, Bucket]:
    """
    Group transactions into buckets.

    Args:
        transactions: Transactions to group
        key: Bucket label for a transaction
        predicate: Optional filter; transactions it rejects are skipped
        value: Amount each transaction contributes (absolute amount by default)

    Returns:
        Buckets by label, in first-seen order
    """
    buckets: Dict[str, Bucket] = {}
    for txn in transactions:
        if predicate is not None and not predicate(txn):
            continue
        label = key(txn)
        bucket = buckets.get(label)
        if bucket is None:
            bucket = buckets[label] = Bucket(label)
        bucket.add(value(txn))
    return buckets


def by_label(buckets: Iterable[Bucket]) -> List[Bucket]:
    """Buckets sorted by label"""
    return sorted(buckets, key=lambda b: b.label)


def by_total(buckets: Iterable[Bucket]) -> List[Bucket]:
    """Buckets sorted by total, largest first; ties keep their order"""
    return sorted(buckets, key=lambda b: b.total, reverse=True)


def compact(ranked: Sequence[Bucket], keep: int, other_label: str) -> List[Bucket]:
    """
    Keep the first `keep` buckets and fold the rest into one.

    The folded bucket is only added when its total is positive.
    """
    kept = list(ranked[:keep])
    rest = ranked[keep:]
    if rest:
        other = Bucket(other_label)
        for bucket in rest:
            other.total += bucket.total
            other.count += bucket.count
        if other.total > 0:
            kept.append(other)
    return kept


def total_of(buckets: Iterable[Bucket]) -> Decimal:
    return sum((b.total for b in buckets), ZERO)


def color_for_rank(rank: int, palette: Sequence[str]) -> str:
    """Colors cycle through the palette by rank"""
    return palette[rank % len(palette)]
