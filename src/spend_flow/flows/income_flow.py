from decimal import Decimal
from typing import List, Sequence

from spend_flow.categorization.categories import (
    INCOME,
    OTHER_INCOME,
    SAVINGS,
    TOTAL_INCOME,
    TRANSFERS,
)
from spend_flow.domain.enums import Direction, NodeKind
from spend_flow.domain.models import Transaction
from spend_flow.flows.aggregation import (
    ZERO,
    aggregate,
    by_total,
    color_for_rank,
    compact,
    is_spend,
    ratio,
    round_money,
    total_of,
)
from spend_flow.flows.formatting import format_currency, format_percent
from spend_flow.flows.models import (
    CategoryStat,
    FlowLink,
    FlowNode,
    IncomeFlow,
    SourceStat,
)

CATEGORY_COLORS = (
    "#36b8ac",
    "#6b67f2",
    "#8f45e8",
    "#35bf72",
    "#8a62de",
    "#f48b2b",
    "#3d73e6",
    "#eb59a7",
    "#2ca2f6",
    "#ef5e4a",
    "#fc845b",
    "#8f9eb4",
    "#79c81d",
    "#d18f2f",
)
INCOME_COLORS = ("#2f9ef6", "#4db7ff", "#18c5d5")
TOTAL_COLOR = "#7f8b98"
SAVINGS_COLOR = "#49d3a2"

# Income sources shown individually before the rest become "Other Income"
MAX_INCOME_SOURCES = 3


def select_income(transactions: Sequence[Transaction]) -> List[Transaction]:
    """
    Credits categorized as Income; if there are none, every credit
    that isn't a transfer.
    """
    credits = [
        txn for txn in transactions
        if txn.direction == Direction.CREDIT and txn.amount < 0
    ]
    categorized = [txn for txn in credits if txn.category == INCOME]
    if categorized:
        return categorized
    return [txn for txn in credits if txn.category != TRANSFERS]


def income_source(transaction: Transaction) -> str:
    return transaction.merchant or transaction.narrative or INCOME


def build_income_flow(
    transactions: Sequence[Transaction],
    currency: str = "AUD",
    income_palette: Sequence[str] = INCOME_COLORS,
    category_palette: Sequence[str] = CATEGORY_COLORS,
) -> IncomeFlow:
    """
    Aggregate transactions into income sources and outflow buckets.

    Every link goes through a single Total Income hub:
    income sources -> hub -> spending categories (+ Savings).

    Args:
        transactions: Categorized transactions
        currency: Currency code used in node labels
        income_palette: Colors for income sources, by rank
        category_palette: Colors for spending categories, by rank

    Returns:
        Nodes, links, totals and per-bucket stats
    """
    sources = compact(
        by_total(aggregate(select_income(transactions), key=income_source).values()),
        keep=MAX_INCOME_SOURCES,
        other_label=OTHER_INCOME,
    )
    total_income = total_of(sources)

    income_stats = [
        SourceStat(
            source=bucket.label,
            total=bucket.total,
            percent=ratio(bucket.total, total_income),
            color=color_for_rank(rank, income_palette),
        )
        for rank, bucket in enumerate(sources)
    ]

    spend_buckets = by_total(
        aggregate(transactions, key=lambda t: t.category, predicate=is_spend).values()
    )
    total_spend = total_of(spend_buckets)
    spend_count = sum(bucket.count for bucket in spend_buckets)
    savings = max(ZERO, total_income - total_spend)

    category_stats = [
        CategoryStat(
            category=bucket.label,
            total=bucket.total,
            percent=ratio(bucket.total, total_spend),
            count=bucket.count,
            color=color_for_rank(rank, category_palette),
        )
        for rank, bucket in enumerate(spend_buckets)
    ]

    outflows = [(stat.category, stat.total, stat.color, NodeKind.CATEGORY) for stat in category_stats]
    if savings > 0:
        outflows.append((SAVINGS, savings, SAVINGS_COLOR, NodeKind.SAVINGS))

    nodes: List[FlowNode] = []
    links: List[FlowLink] = []

    def label_sub(total: Decimal, percent: float) -> str:
        return f"{format_currency(total, currency)} | {format_percent(percent)}"

    for stat in income_stats:
        nodes.append(FlowNode(
            name=stat.source,
            index=len(nodes),
            kind=NodeKind.INCOME,
            color=stat.color,
            value=stat.total,
            percent=stat.percent,
            label_main=stat.source,
            label_sub=label_sub(stat.total, stat.percent),
        ))

    hub = len(nodes)
    nodes.append(FlowNode(
        name=TOTAL_INCOME,
        index=hub,
        kind=NodeKind.TOTAL,
        color=TOTAL_COLOR,
        value=total_income,
        percent=1.0,
        label_main=TOTAL_INCOME,
        label_sub=format_currency(total_income, currency),
    ))

    # Income nodes come first, so a source's rank is its node index
    for rank, stat in enumerate(income_stats):
        links.append(FlowLink(
            source=rank,
            target=hub,
            value=round_money(stat.total),
            color=stat.color,
            kind=NodeKind.INCOME,
        ))

    for name, total, color, kind in outflows:
        percent = ratio(total, total_income)
        index = len(nodes)
        nodes.append(FlowNode(
            name=name,
            index=index,
            kind=kind,
            color=color,
            value=total,
            percent=percent,
            label_main=name,
            label_sub=label_sub(total, percent),
        ))
        links.append(FlowLink(
            source=hub,
            target=index,
            value=round_money(total),
            color=color,
            kind=kind,
        ))

    return IncomeFlow(
        nodes=nodes,
        links=links,
        total_income=round_money(total_income),
        total_spend=round_money(total_spend),
        savings=round_money(savings),
        spend_count=spend_count,
        outflow_count=len(outflows),
        income_stats=income_stats,
        category_stats=category_stats,
    )

