"""
Chronicles serializer engine.

Runs a class's cached serialization plan against instances:

    serializer = ChroniclesSerializer(Person)
    serializer.convert(Person(name='Jo', tags=[]))   # '1,Jo'

Output is one line per rendered value, joined by CRLF, with no header,
footer or trailing separator.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, Generic, TypeVar

from chronicles.config import settings
from chronicles.exceptions import DefinitionError
from chronicles.introspection import read_member
from chronicles.markers import get_serializable
from chronicles.plan import SerializationPlan, get_plan

__all__ = [
    'ChroniclesSerializer',
    'convert',
]

T = TypeVar('T')


class ChroniclesSerializer(Generic[T]):
    """Serializer for one @serializable class."""

    def __init__(self, serial_type: type[T]) -> None:
        """
        Resolve the plan for a serializable class.

        Args:
            serial_type: Class to serialize

        Raises:
            DefinitionError: If the class is not marked serializable or is malformed
        """
        if not isinstance(serial_type, type):
            raise DefinitionError(serial_type, None, 'is not a class')

        marker = get_serializable(serial_type)
        if marker is None:
            raise DefinitionError(serial_type, None, 'is not marked serializable')

        self.serial_type = serial_type
        self.master_file = marker.master_file
        self.plan: SerializationPlan = get_plan(serial_type)

    @classmethod
    def for_type(cls, serial_type: type[T]) -> ChroniclesSerializer[T]:
        return cls(serial_type)

    def convert(self, record: T) -> str:
        """
        Convert a single instance into Chronicles text.

        Members whose raw value is None are skipped when omit_if_empty is set,
        and blank renderings are dropped.

        Args:
            record: Instance to serialize

        Returns:
            Lines joined by the line separator ('' when nothing is rendered)
        """
        lines: list[str] = []
        for member in self.plan:
            value = read_member(record, member.name, member.access)

            if member.omit_if_empty and value is None:
                continue

            line = member.render(value)
            if line and line.strip():
                lines.append(line)

        return settings.LINE_SEPARATOR.join(lines)

    def serialize(self, records: Iterable[T]) -> Iterator[str]:
        """Lazily convert each instance, in input order."""
        for record in records:
            yield self.convert(record)

    def dumps(self, records: Iterable[T]) -> str:
        """Convert every instance into one document, skipping empty blocks."""
        return settings.LINE_SEPARATOR.join(block for block in self.serialize(records) if block)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.serial_type.__qualname__}, fields={self.plan.fields})'


def convert(record: Any) -> str:
    """Convert an instance of any @serializable class."""
    return ChroniclesSerializer(type(record)).convert(record)
