from abc import ABC, abstractmethod
from typing import List
from spend_flow.domain.models import RawRow

class StatementParser(ABC):
    """
    Abstract base class for all statement readers.

    This implements the Strategy pattern - each export format gets its own
    concrete parser that implements this interface. Parsers only read rows;
    validation and normalization happen downstream.
    """

    @abstractmethod
    def parse(self, filepath: str) -> List[RawRow]:
        """
        Parse a statement file and return its rows as text.

        Args:
            filepath: Path to the statement file

        Returns:
            List of raw rows (column name -> cell text)

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format is invalid
        """
        pass

    @abstractmethod
    def validate_file(self, filepath: str):
        """
        Validate that the file matches the expected format.

        Args:
            filepath: Path to the statement file

        Returns:
            Nothing if file is valid for this parser

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format is invalid
        """
        pass
