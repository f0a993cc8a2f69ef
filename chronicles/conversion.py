"""
Type conversion registry.

Closed-world mapping from the primitive types a Record or Repeat member may
declare to the functions that render them as Chronicles text. Anything not
listed here cannot be serialized; there is no fallback to str().
"""

from __future__ import annotations

import datetime
import decimal
import uuid
from collections.abc import Callable, Iterable
from types import MappingProxyType
from typing import Any

from chronicles.config import settings
from chronicles.exceptions import UnsupportedTypeError

__all__ = [
    'ScalarConverter',
    'SequenceConverter',
    'SCALAR_CONVERTERS',
    'SEQUENCE_CONVERTERS',
    'is_scalar_type',
    'is_sequence_type',
    'scalar_converter',
    'sequence_converter',
]

type ScalarConverter = Callable[[Any], str]
type SequenceConverter = Callable[[Iterable[Any] | None], list[str]]


def _single_line(text: str) -> str:
    # A value must never introduce a line break into the output
    return text.replace('\r\n', ' ').replace('\r', ' ').replace('\n', ' ')


def _str(value: str | None) -> str:
    return '' if value is None else _single_line(value)


def _number(value: int | float | decimal.Decimal | None) -> str:
    return '' if value is None else str(value)


def _bool(value: bool | None) -> str:
    if value is None:
        return ''
    return settings.BOOL_TRUE if value else settings.BOOL_FALSE


def _date(value: datetime.date | None) -> str:
    return '' if value is None else value.strftime(settings.DATE_FORMAT)


def _datetime(value: datetime.datetime | None) -> str:
    return '' if value is None else value.strftime(settings.DATETIME_FORMAT)


def _time(value: datetime.time | None) -> str:
    return '' if value is None else value.strftime(settings.TIME_FORMAT)


def _uuid(value: uuid.UUID | None) -> str:
    return '' if value is None else str(value)


# datetime is a subclass of date; lookups are by exact type so both need entries
SCALAR_CONVERTERS: MappingProxyType[type, ScalarConverter] = MappingProxyType(
    {
        str: _str,
        int: _number,
        float: _number,
        decimal.Decimal: _number,
        bool: _bool,
        datetime.date: _date,
        datetime.datetime: _datetime,
        datetime.time: _time,
        uuid.UUID: _uuid,
    }
)


def _each(convert: ScalarConverter) -> SequenceConverter:
    def convert_all(values: Iterable[Any] | None) -> list[str]:
        if values is None:
            return []
        return [convert(value) for value in values]

    return convert_all


SEQUENCE_CONVERTERS: MappingProxyType[type, SequenceConverter] = MappingProxyType(
    {tp: _each(convert) for tp, convert in SCALAR_CONVERTERS.items()}
)


def is_scalar_type(tp: Any) -> bool:
    """Return True if `tp` may be declared on a Record member."""
    return isinstance(tp, type) and tp in SCALAR_CONVERTERS


def is_sequence_type(tp: Any) -> bool:
    """Return True if `tp` may be the element type of a simple Repeat member."""
    return isinstance(tp, type) and tp in SEQUENCE_CONVERTERS


def scalar_converter(tp: Any) -> ScalarConverter:
    """
    Look up the value -> text converter for a Record member type.

    Args:
        tp: Declared member type (already unwrapped from Annotated/Optional)

    Returns:
        Function rendering one value (or None) as text

    Raises:
        UnsupportedTypeError: If `tp` is outside the scalar whitelist
    """
    if not is_scalar_type(tp):
        raise UnsupportedTypeError(tp, 'record')
    return SCALAR_CONVERTERS[tp]


def sequence_converter(tp: Any) -> SequenceConverter:
    """
    Look up the iterable -> list of text converter for a Repeat element type.

    Args:
        tp: Element type of the declared sequence

    Returns:
        Function rendering every element, in order; None renders as []

    Raises:
        UnsupportedTypeError: If `tp` is outside the sequence whitelist
    """
    if not is_sequence_type(tp):
        raise UnsupportedTypeError(tp, 'repeat')
    return SEQUENCE_CONVERTERS[tp]
