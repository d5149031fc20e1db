from enum import Enum

class Direction(Enum):
    """Represents whether money is going out, coming in, or neither"""
    DEBIT = "debit" # out
    CREDIT = "credit" # in
    NEUTRAL = "neutral"


class NodeKind(Enum):
    """Role of a node in the income/outflow visualization"""
    INCOME = "income"
    TOTAL = "total"
    CATEGORY = "category"
    SAVINGS = "savings"
