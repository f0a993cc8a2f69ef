"""
Base configuration for epic-chronicles.

Text formatting settings shared by the conversion registry and the serializer
engine. Values come from CHRONICLES_* environment variables or a .env file.
"""

from __future__ import annotations

import os
import pathlib
from typing import TypeVar

import lazy_object_proxy
import pydantic
import pydantic_settings

T = TypeVar('T', bound='ChroniclesSettings')


class ChroniclesSettings(pydantic_settings.BaseSettings):
    """Formatting configuration for Chronicles text output."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix='CHRONICLES_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,  # Fail fast on misconfiguration
        extra='forbid',  # Reject unknown CHRONICLES_* keys in .env
        frozen=True,
    )

    # Joins lines within a record and blocks across records
    LINE_SEPARATOR: str = '\r\n'

    # strftime patterns for temporal values
    DATE_FORMAT: str = '%m/%d/%Y'
    DATETIME_FORMAT: str = '%m/%d/%Y %H:%M:%S'
    TIME_FORMAT: str = '%H:%M:%S'

    # Rendering of bool values
    BOOL_TRUE: str = 'Y'
    BOOL_FALSE: str = 'N'

    @pydantic.field_validator('LINE_SEPARATOR')
    @classmethod
    def validate_line_separator(cls, v: str) -> str:
        """Reject an empty separator, which would merge lines."""
        if not v:
            raise ValueError('LINE_SEPARATOR must not be empty')
        return v

    @pydantic.field_validator('BOOL_TRUE', 'BOOL_FALSE')
    @classmethod
    def validate_single_line(cls, v: str) -> str:
        """Bool renderings are placed inside a single line."""
        if '\r' in v or '\n' in v:
            raise ValueError('bool renderings must not contain line breaks')
        return v


def get_settings(settings_class: type[T], env_file: str | None = None) -> T:
    """
    Factory for creating settings with dynamic .env file loading.

    LOAD_ENV_FILE environment variable specifies custom .env file path.
    When unset, loads from environment variables (and ./.env) only.

    Args:
        settings_class: Settings class to instantiate
        env_file: Optional path to .env file (overrides LOAD_ENV_FILE)

    Returns:
        Settings instance

    Raises:
        FileNotFoundError: If specified .env file doesn't exist
    """
    env_file_path = env_file or os.getenv('LOAD_ENV_FILE')

    if not env_file_path:
        return settings_class()

    resolved_path = pathlib.Path(env_file_path).resolve()
    if not resolved_path.exists():
        raise FileNotFoundError(f'Environment file not found: {resolved_path}')

    return settings_class(_env_file=resolved_path)


def lazy_settings(settings_class: type[T]) -> T:
    """
    Lazy settings - defers instantiation until first access.

    Args:
        settings_class: Settings class to instantiate

    Returns:
        Proxy that instantiates settings on first access
    """
    return lazy_object_proxy.Proxy(lambda: get_settings(settings_class))
