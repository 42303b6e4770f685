# src/utils/__init__.py

"""
Utility modules for the route registry.

Centralized imports for the technical error hierarchy.
"""

from .error_handling import (
    MappingError,
    MaskingError,
    RouteFormatError,
    RouteParsingError,
    TechnicalError,
    TechnicalErrorMessage,
)

__all__ = [
    'MappingError',
    'MaskingError',
    'RouteFormatError',
    'RouteParsingError',
    'TechnicalError',
    'TechnicalErrorMessage',
]
