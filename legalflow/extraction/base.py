from abc import ABC, abstractmethod


class BaseTextExtractor(ABC):
    """Contract for format-specific text extraction adapters."""

    @abstractmethod
    def extract(self, data: bytes) -> list[str]:
        """Extract raw text from file bytes.

        Args:
            data: Raw file content.

        Returns:
            One string per page. Formats without pages return a single item.

        Raises:
            ExtractionError: if extraction fails for any reason.
        """
