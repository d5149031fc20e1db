from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional
from spend_flow.domain.enums import Direction

# One row of the bank export, column name -> cell text
RawRow = Mapping[str, str]

@dataclass(frozen=True)
class Transaction:
    """Core domain model representing a single normalized bank transaction"""
    id: str
    date: date
    account_id: str
    narrative: str
    narrative_normalized: str
    merchant: str
    debit_amount: Decimal
    credit_amount: Decimal
    source_category: str = ""
    balance: Optional[Decimal] = None
    category: Optional[str] = None
    category_reason: Optional[str] = None

    @property
    def direction(self) -> Direction:
        """Debit wins when both amounts are present"""
        if self.debit_amount > 0:
            return Direction.DEBIT
        if self.credit_amount > 0:
            return Direction.CREDIT
        return Direction.NEUTRAL

    @property
    def amount(self) -> Decimal:
        """Signed amount: positive for outflows, negative for inflows"""
        if self.debit_amount > 0:
            return self.debit_amount
        if self.credit_amount > 0:
            return -self.credit_amount
        return Decimal("0")

    def with_category(self, category: str, reason: str) -> "Transaction":
        """Return a copy carrying the given category and audit reason"""
        return replace(self, category=category, category_reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation using the export's camelCase field names"""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "accountId": self.account_id,
            "narrative": self.narrative,
            "narrativeNormalized": self.narrative_normalized,
            "merchant": self.merchant,
            "debitAmount": float(self.debit_amount),
            "creditAmount": float(self.credit_amount),
            "amount": float(self.amount),
            "direction": self.direction.value,
            "balance": float(self.balance) if self.balance is not None else None,
            "sourceCategory": self.source_category,
            "category": self.category,
            "categoryReason": self.category_reason,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Transaction":
        """
        Rebuild a transaction from its to_dict() form.

        amount and direction are derived, so they are ignored here.
        """
        balance = data.get("balance")
        return cls(
            id=data["id"],
            date=date.fromisoformat(data["date"]),
            account_id=data["accountId"],
            narrative=data["narrative"],
            narrative_normalized=data["narrativeNormalized"],
            merchant=data["merchant"],
            debit_amount=Decimal(str(data["debitAmount"])),
            credit_amount=Decimal(str(data["creditAmount"])),
            source_category=data.get("sourceCategory") or "",
            balance=Decimal(str(balance)) if balance is not None else None,
            category=data.get("category"),
            category_reason=data.get("categoryReason"),
        )

    def __repr__(self):
        sign = {Direction.CREDIT: "+", Direction.DEBIT: "-"}.get(self.direction, "")
        return f"Transaction({self.id}, {self.date}, {self.narrative[:30]}, {sign}${abs(self.amount)})"
