"""
Field markers for Chronicles serialization.

Members opt in by carrying a Record or Repeat marker in their Annotated
metadata (Pydantic v2 recommended approach, also understood on dataclasses,
plain annotated classes and property return annotations):

    @serializable(master_file='EPT')
    class Person(BaseModel):
        name: Annotated[str, Record(1)]
        tags: Annotated[list[str], Repeat(2, omit_if_empty=True)]
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

__all__ = [
    'FieldMarker',
    'Record',
    'Repeat',
    'Serializable',
    'SERIALIZABLE_ATTR',
    'get_serializable',
    'serializable',
]

C = TypeVar('C', bound=type)

SERIALIZABLE_ATTR = '__chronicles_serializable__'


@dataclass(frozen=True)
class FieldMarker:
    """Common base of Record and Repeat."""

    field: int
    omit_if_empty: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.field, bool) or not isinstance(self.field, int):
            raise TypeError(f'{type(self).__name__}.field must be an int, got {self.field!r}')


@dataclass(frozen=True)
class Record(FieldMarker):
    """Mark a single-value member, emitted as one `field,value` line."""


@dataclass(frozen=True)
class Repeat(FieldMarker):
    """Mark a sequence member, emitted as one line per element (or nested blocks)."""


@dataclass(frozen=True)
class Serializable:
    """Mark a class as a serialization root. `master_file` is carried through untouched."""

    master_file: str | None = None


def serializable(master_file: str | None = None) -> Callable[[C], C]:
    """
    Class decorator attaching a Serializable marker.

    Args:
        master_file: Optional destination master file identifier

    Returns:
        Decorator returning the class unchanged apart from the marker
    """

    def decorate(cls: C) -> C:
        setattr(cls, SERIALIZABLE_ATTR, Serializable(master_file))
        return cls

    return decorate


def get_serializable(cls: Any) -> Serializable | None:
    """Return the Serializable marker of a class (inherited markers included)."""
    marker = getattr(cls, SERIALIZABLE_ATTR, None)
    return marker if isinstance(marker, Serializable) else None
