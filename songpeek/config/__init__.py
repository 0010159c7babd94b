"""
Configuration package for songpeek

Exposes the global settings accessors. Settings are read from YAML files
and environment variables; see settings.py for the available sections.
"""

from .settings import Settings, get_settings, reload_settings

__all__ = [
    'Settings',
    'get_settings',
    'reload_settings',
]
