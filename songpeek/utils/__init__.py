# songpeek/utils/__init__.py
"""
Utilities package
Logging setup and small helper functions
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
    get_current_log_file
)
from .helpers import (
    sanitize_title,
    collapse_whitespace,
    truncate_string,
    clean_lyrics_text
)

__all__ = [
    # Logger exports
    'get_logger',
    'configure_from_settings',
    'setup_logging',
    'get_current_log_file',

    # Helper exports
    'sanitize_title',
    'collapse_whitespace',
    'truncate_string',
    'clean_lyrics_text',
]
