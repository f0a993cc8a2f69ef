"""
Shared exceptions for epic-chronicles.

Exception Hierarchy:
    ChroniclesError (base)
    ├── DefinitionError (type or member declared inconsistently)
    └── UnsupportedTypeError (value type has no registered converter)

Both are raised while a serialization plan is being built, never while an
instance is converted. Both are deterministic: retrying with the same type
reproduces the same error.
"""

from __future__ import annotations

from typing import Any, Literal

__all__ = [
    'ChroniclesError',
    'DefinitionError',
    'UnsupportedTypeError',
]


def _type_name(tp: Any) -> str:
    return getattr(tp, '__qualname__', None) or getattr(tp, '__name__', None) or repr(tp)


class ChroniclesError(Exception):
    """Base exception for all epic-chronicles errors."""


class DefinitionError(ChroniclesError):
    """Raised when a type or one of its members is declared inconsistently."""

    def __init__(self, owner: Any, member_name: str | None, reason: str) -> None:
        self.type_name = _type_name(owner)
        self.member_name = member_name
        self.reason = reason
        target = f'{self.type_name}.{member_name}' if member_name else self.type_name
        super().__init__(f'{target}: {reason}')


class UnsupportedTypeError(ChroniclesError):
    """Raised when a declared value type is missing from the conversion registry."""

    def __init__(self, value_type: Any, kind: Literal['record', 'repeat']) -> None:
        self.value_type = value_type
        self.kind = kind
        super().__init__(f'{_type_name(value_type)} has no registered {kind} converter')
