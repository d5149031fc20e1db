from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CURRENCY_SYMBOLS = {
    "AUD": "$",
    "USD": "US$",
    "NZD": "NZ$",
    "CAD": "CA$",
    "EUR": "€",
    "GBP": "£",
}


def format_currency(value: Union[Decimal, float], currency: str) -> str:
    """'$1,234.50' for AUD; other codes get their symbol or the code as prefix"""
    amount = Decimal(str(value))
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_percent(value: float) -> str:
    """Whole percent, except small non-zero shares which read '<1%'"""
    if 0 < value < 0.01:
        return "<1%"
    whole = (Decimal(str(value)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{whole}%"
