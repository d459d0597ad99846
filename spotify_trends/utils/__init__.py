"""
Utilities package
Common helpers, logging, and the debounce primitive
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
    OperationLogger,
    create_operation_logger,
    log_performance,
    get_current_log_file
)
from .helpers import (
    format_number,
    format_popularity,
    format_timestamp,
    format_relative_time,
    truncate_string,
    normalize_query,
    matches_text
)
from .debounce import Debouncer

__all__ = [
    # Logger exports
    'get_logger',
    'configure_from_settings',
    'setup_logging',
    'OperationLogger',
    'create_operation_logger',
    'log_performance',
    'get_current_log_file',

    # Helper exports
    'format_number',
    'format_popularity',
    'format_timestamp',
    'format_relative_time',
    'truncate_string',
    'normalize_query',
    'matches_text',

    # Debounce
    'Debouncer',
]
