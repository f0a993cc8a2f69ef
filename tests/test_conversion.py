"""Tests for the type conversion registry."""

from __future__ import annotations

import datetime
import decimal
import uuid

import pytest

from chronicles.conversion import (
    is_scalar_type,
    is_sequence_type,
    scalar_converter,
    sequence_converter,
)
from chronicles.exceptions import UnsupportedTypeError


@pytest.mark.parametrize(
    ('tp', 'value', 'expected'),
    [
        (str, 'Jo', 'Jo'),
        (str, None, ''),
        (int, 42, '42'),
        (int, -7, '-7'),
        (float, 1.5, '1.5'),
        (decimal.Decimal, decimal.Decimal('10.50'), '10.50'),
        (bool, True, 'Y'),
        (bool, False, 'N'),
        (datetime.date, datetime.date(2024, 3, 7), '03/07/2024'),
        (datetime.datetime, datetime.datetime(2024, 3, 7, 14, 5, 9), '03/07/2024 14:05:09'),
        (datetime.time, datetime.time(8, 30), '08:30:00'),
        (uuid.UUID, uuid.UUID(int=1), '00000000-0000-0000-0000-000000000001'),
    ],
)
def test_scalar_rendering(tp: type, value: object, expected: str) -> None:
    """Each whitelisted type renders with its registered converter."""
    assert scalar_converter(tp)(value) == expected


@pytest.mark.parametrize('tp', [int, float, decimal.Decimal, bool, datetime.date, datetime.time, uuid.UUID])
def test_none_renders_empty(tp: type) -> None:
    assert scalar_converter(tp)(None) == ''


def test_line_breaks_are_flattened() -> None:
    """A single value never spans more than one line."""
    assert scalar_converter(str)('a\r\nb\nc\rd') == 'a b c d'


@pytest.mark.parametrize('tp', [dict, list, bytes, object, list[str], 'str'])
def test_unsupported_scalar_type(tp: object) -> None:
    assert not is_scalar_type(tp)
    with pytest.raises(UnsupportedTypeError) as exc_info:
        scalar_converter(tp)
    assert exc_info.value.kind == 'record'


def test_unsupported_sequence_type() -> None:
    assert not is_sequence_type(dict)
    with pytest.raises(UnsupportedTypeError) as exc_info:
        sequence_converter(dict)
    assert exc_info.value.kind == 'repeat'
    assert 'dict' in str(exc_info.value)


def test_sequence_converter_preserves_order() -> None:
    assert sequence_converter(int)([3, 1, 2]) == ['3', '1', '2']
    assert sequence_converter(bool)((True, False)) == ['Y', 'N']


def test_sequence_converter_none_is_empty() -> None:
    assert sequence_converter(str)(None) == []
    assert sequence_converter(str)([]) == []


def test_bool_is_not_rendered_as_int() -> None:
    """bool is looked up by exact type, not through its int base class."""
    assert scalar_converter(bool)(True) == 'Y'
    assert scalar_converter(int)(True) == 'True'
