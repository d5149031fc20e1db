from typing import Iterable, Optional


class RowValidationError(ValueError):
    """Raised when a raw statement row doesn't have the expected shape."""

    def __init__(self, row_number: int, problems: Iterable[str]):
        self.row_number = row_number
        self.problems = list(problems)
        super().__init__(
            f"Invalid row {row_number}: {'; '.join(self.problems)}"
        )


class DateParseError(ValueError):
    """Raised when a statement date isn't in DD/MM/YYYY form."""

    def __init__(self, value: str, reason: Optional[str] = None):
        self.value = value
        message = f"Unsupported date format: {value!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class MoneyParseError(ValueError):
    """Raised in strict mode when an amount can't be read as a number."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid amount: {value!r}")
