from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from spend_flow.categorization.categories import TOTAL_SPEND
from spend_flow.domain.models import Transaction
from spend_flow.flows.aggregation import (
    aggregate,
    by_label,
    is_spend,
    round_money,
    total_of,
)
from spend_flow.flows.models import FlowLink, FlowNode, SpendFlowGraph


def build_spend_graph(
    transactions: Sequence[Transaction],
    currency: str = "AUD",
    generated_at: Optional[datetime] = None,
) -> SpendFlowGraph:
    """
    Build the Total Spend -> Category -> Merchant graph.

    Only spend counts (debits with a positive amount outside Income and
    Transfers). Node order is fixed: the root, categories by name, then
    merchants in first-seen order while walking categories by name with
    merchants by name inside each category. Link values are rounded to
    cents one by one, so siblings may not add up exactly to their parent.

    Args:
        transactions: Categorized transactions
        currency: Currency code recorded on the graph
        generated_at: Timestamp to record; defaults to now (UTC)

    Returns:
        The graph with its total spend and contributing transaction count
    """
    spend = [txn for txn in transactions if is_spend(txn)]
    categories = by_label(aggregate(spend, key=lambda t: t.category).values())

    nodes: List[FlowNode] = [FlowNode(TOTAL_SPEND, 0)]
    category_index: Dict[str, int] = {}
    merchant_index: Dict[str, int] = {}

    for bucket in categories:
        category_index[bucket.label] = len(nodes)
        nodes.append(FlowNode(bucket.label, len(nodes)))

    merchants_by_category = {}
    for bucket in categories:
        merchants = by_label(aggregate(
            spend,
            key=lambda t: t.merchant,
            predicate=lambda t, category=bucket.label: t.category == category,
        ).values())
        merchants_by_category[bucket.label] = merchants
        for merchant in merchants:
            if merchant.label not in merchant_index:
                merchant_index[merchant.label] = len(nodes)
                nodes.append(FlowNode(merchant.label, len(nodes)))

    links: List[FlowLink] = []
    for bucket in categories:
        target = category_index[bucket.label]
        links.append(FlowLink(0, target, round_money(bucket.total)))
        for merchant in merchants_by_category[bucket.label]:
            links.append(
                FlowLink(target, merchant_index[merchant.label], round_money(merchant.total))
            )

    return SpendFlowGraph(
        generated_at=generated_at or datetime.now(timezone.utc),
        currency=currency,
        nodes=nodes,
        links=links,
        total_spend=round_money(total_of(categories)),
        transaction_count=len(spend),
    )
