"""
Flow-graph models - nodes, links and the two graph results.

Values stay Decimal in memory and become floats only in to_dict().
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from spend_flow.domain.enums import NodeKind


def _iso_timestamp(moment: datetime) -> str:
    """UTC timestamp with millisecond precision and a Z suffix"""
    return (
        moment.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


@dataclass
class FlowNode:
    name: str
    index: int
    kind: Optional[NodeKind] = None
    color: Optional[str] = None
    value: Optional[Decimal] = None
    percent: Optional[float] = None
    label_main: Optional[str] = None
    label_sub: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        if self.kind is not None:
            data.update({
                "kind": self.kind.value,
                "color": self.color,
                "value": float(self.value) if self.value is not None else None,
                "percent": self.percent,
                "labelMain": self.label_main,
                "labelSub": self.label_sub,
            })
        return data


@dataclass
class FlowLink:
    source: int
    target: int
    value: Decimal
    color: Optional[str] = None
    kind: Optional[NodeKind] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "source": self.source,
            "target": self.target,
            "value": float(self.value),
        }
        if self.kind is not None:
            data["color"] = self.color
            data["kind"] = self.kind.value
        return data


@dataclass
class SpendFlowGraph:
    """Total Spend -> Category -> Merchant graph, persisted as sankey.json"""
    generated_at: datetime
    currency: str
    nodes: List[FlowNode] = field(default_factory=list)
    links: List[FlowLink] = field(default_factory=list)
    total_spend: Decimal = Decimal("0")
    transaction_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generatedAt": _iso_timestamp(self.generated_at),
            "currency": self.currency,
            "nodes": [node.to_dict() for node in self.nodes],
            "links": [link.to_dict() for link in self.links],
            "summary": {
                "totalSpend": float(self.total_spend),
                "transactionCount": self.transaction_count,
            },
        }


@dataclass
class SourceStat:
    """One income source node"""
    source: str
    total: Decimal
    percent: float
    color: str


@dataclass
class CategoryStat:
    """
    One outflow bucket.

    percent is the share of total spend; the matching graph node carries
    the share of total income.
    """
    category: str
    total: Decimal
    percent: float
    count: int
    color: str


@dataclass
class IncomeFlow:
    """Income sources -> Total Income -> spending categories + Savings"""
    nodes: List[FlowNode] = field(default_factory=list)
    links: List[FlowLink] = field(default_factory=list)
    total_income: Decimal = Decimal("0")
    total_spend: Decimal = Decimal("0")
    savings: Decimal = Decimal("0")
    spend_count: int = 0
    outflow_count: int = 0
    income_stats: List[SourceStat] = field(default_factory=list)
    category_stats: List[CategoryStat] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sankey": {
                "nodes": [node.to_dict() for node in self.nodes],
                "links": [link.to_dict() for link in self.links],
            },
            "totalIncome": float(self.total_income),
            "totalSpend": float(self.total_spend),
            "savings": float(self.savings),
            "spendCount": self.spend_count,
            "outflowCount": self.outflow_count,
        }
