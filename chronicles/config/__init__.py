"""
Configuration for epic-chronicles.

`settings` is a module-level singleton, instantiated on first attribute access.
"""

from __future__ import annotations

from chronicles.config.base import ChroniclesSettings, get_settings, lazy_settings

# Module-level singleton (lazy-loaded)
settings = lazy_settings(ChroniclesSettings)

__all__ = [
    'ChroniclesSettings',
    'get_settings',
    'lazy_settings',
    'settings',
]
