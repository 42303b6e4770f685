# src/utils/error_handling.py
"""Technical error hierarchy shared by route loading, mapping and masking."""

from enum import Enum
from typing import Optional


class TechnicalErrorMessage(Enum):
    """Catalogue of technical error codes and their messages"""

    JSON_MAPPER_ERROR = ("RR0001", "Error mapping JSON content")
    EXPECTED_ARRAY = ("RR0002", "Expected an array")
    ROUTE_MAPPING_ERROR = ("RR0003", "Error mapping node to configured route")
    MASKING_ERROR = ("RR0004", "Error masking or unmasking value")
    CACHE_ERROR = ("RR0005", "Error reading or writing route cache")

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message


class TechnicalError(Exception):
    """Base class for technical (non-business) failures"""

    def __init__(
        self,
        error_message: TechnicalErrorMessage,
        detail: Optional[str] = None,
    ) -> None:
        self.error_message = error_message
        self.code = error_message.code
        self.detail = detail
        text = detail or error_message.message
        super().__init__(text)


class MappingError(TechnicalError):
    """A JSON node could not be mapped into a configured route"""

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(TechnicalErrorMessage.ROUTE_MAPPING_ERROR, detail)


class RouteParsingError(TechnicalError):
    """Routes JSON content is syntactically broken"""

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(TechnicalErrorMessage.JSON_MAPPER_ERROR, detail)


class RouteFormatError(TechnicalError):
    """Routes JSON content does not start with an array"""

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(TechnicalErrorMessage.EXPECTED_ARRAY, detail)


class MaskingError(TechnicalError):
    """A masked value could not be produced or recovered"""

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(TechnicalErrorMessage.MASKING_ERROR, detail)
