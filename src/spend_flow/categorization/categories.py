"""Category names the engine and the flow builders treat specially."""

INCOME = "Income"
INTEREST = "Interest"
TRANSFERS = "Transfers"
UNCATEGORIZED = "Uncategorized"

# Synthetic buckets that only exist in flow graphs
SAVINGS = "Savings"
OTHER_INCOME = "Other Income"
TOTAL_SPEND = "Total Spend"
TOTAL_INCOME = "Total Income"

# Money moving between own accounts or coming in is never spend
EXCLUDED_SPEND_CATEGORIES = frozenset({INCOME, TRANSFERS})

# Source category code the bank uses for interest
INTEREST_SOURCE_CODE = "INT"
