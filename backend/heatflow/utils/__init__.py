"""
Utility helpers shared across heatflow services.
"""

from .logging_utils import log_operation, log_with_context, timed_operation

__all__ = [
    'log_operation',
    'log_with_context',
    'timed_operation',
]
