"""
Custom Error Types for the heatflow calculation system

Parse failures are raised inside the weather reducer, the tabular importers
and the state loader, then converted into a "no result" at their public entry
points. Numeric guards (zero R-value, zero degree-day sum, ...) are never
raised; they are recorded on the element contribution instead.
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class HeatFlowError(Exception):
    """Base exception for all heatflow errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ParseError(HeatFlowError):
    """
    Malformed or unrecognized file/row structure.

    Examples:
    - Weather file without a dry-bulb column
    - Tabular export with no usable rows
    - Persisted state with an unknown schema version
    """
    pass


class WeatherFileError(ParseError):
    """Weather record could not be reduced to climate data."""
    pass


class TabularImportError(ParseError):
    """Delimited building export could not be turned into buildings."""
    pass


class StateSchemaError(ParseError):
    """Persisted state document could not be migrated or validated."""
    pass


class SweepConfigurationError(HeatFlowError):
    """
    Invalid sensitivity sweep request.

    Examples:
    - Non-positive step or stop below start
    - Unknown building or element id
    - Element category without a sweepable thermal value
    """
    pass


def log_error_with_context(error: HeatFlowError, context: Dict[str, Any]):
    """
    Log error with additional context information.

    Args:
        error: Error to log
        context: Additional context (file name, importer, etc.)
    """
    log_data = {
        'error_type': type(error).__name__,
        'error_message': error.message,
        'details': error.details,
        'context': context
    }

    if isinstance(error, ParseError):
        logger.warning(f"Parse failed: {error.message}", extra=log_data)
    else:
        logger.error(f"Calculation error: {error.message}", extra=log_data)
