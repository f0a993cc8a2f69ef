"""
Member accessors - validated, per-member rendering instructions.

A MemberAccess binds one marked member of a serializable class to the way its
value becomes Chronicles lines. The three shapes a member can take are an
explicit tagged variant (AccessorKind) dispatched by MemberAccess.render:

    SCALAR          Record on a whitelisted type     -> "field,value"
    SIMPLE_REPEAT   Repeat of a whitelisted type     -> "field,value" per element
    COMPLEX_REPEAT  Repeat of a @serializable class  -> nested block per element

All validation happens in build_member_access, so rendering never raises for
values matching their declared types.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from chronicles.config import settings
from chronicles.conversion import (
    ScalarConverter,
    SequenceConverter,
    is_sequence_type,
    scalar_converter,
    sequence_converter,
)
from chronicles.exceptions import DefinitionError, UnsupportedTypeError
from chronicles.introspection import (
    AccessKind,
    DiscoveredMember,
    sequence_element_type,
    unwrap_annotation,
)
from chronicles.markers import FieldMarker, Record, Repeat, get_serializable

__all__ = [
    'AccessKind',
    'AccessorKind',
    'MemberAccess',
    'build_member_access',
]

logger = logging.getLogger(__name__)


class AccessorKind(enum.Enum):
    """Shape of a serialized member."""

    SCALAR = 'scalar'
    SIMPLE_REPEAT = 'simple_repeat'
    COMPLEX_REPEAT = 'complex_repeat'


@dataclass(frozen=True)
class MemberAccess:
    """Instructions for rendering a single member of a serializable class."""

    owner: type
    name: str
    access: AccessKind
    marker: FieldMarker
    kind: AccessorKind
    value_type: Any  # Scalar type, or element type for repeats
    converter: ScalarConverter | SequenceConverter | None = None  # None for COMPLEX_REPEAT

    @property
    def field(self) -> int:
        return self.marker.field

    @property
    def omit_if_empty(self) -> bool:
        return self.marker.omit_if_empty

    @property
    def extractor(self) -> Callable[[Any], str | None]:
        """The member's value -> text function."""
        return self.render

    def render(self, value: Any) -> str | None:
        """
        Render one runtime value of this member.

        Args:
            value: Member value read off an instance

        Returns:
            One or more lines joined by the line separator, or None when omitted
        """
        match self.kind:
            case AccessorKind.SCALAR:
                return self._render_scalar(value)
            case AccessorKind.SIMPLE_REPEAT:
                return self._render_simple_repeat(value)
            case AccessorKind.COMPLEX_REPEAT:
                return self._render_complex_repeat(value)

    def _render_scalar(self, value: Any) -> str | None:
        text = self.converter(value)
        if self.omit_if_empty and not text.strip():
            return None
        return f'{self.field},{text}'

    def _render_simple_repeat(self, value: Iterable[Any] | None) -> str | None:
        texts = self.converter(value)
        if not texts:
            if self.omit_if_empty:
                return None
            return f'{self.field},'
        return settings.LINE_SEPARATOR.join(f'{self.field},{text}' for text in texts)

    def _render_complex_repeat(self, value: Iterable[Any] | None) -> str | None:
        # Nested plans were built and validated together with the owning plan
        from chronicles.serializer import ChroniclesSerializer

        if value is None:
            return ''
        nested = ChroniclesSerializer(self.value_type)
        return settings.LINE_SEPARATOR.join(block for block in nested.serialize(value) if block)


def _single_marker(owner: type, member: DiscoveredMember) -> FieldMarker:
    records = [m for m in member.markers if isinstance(m, Record)]
    repeats = [m for m in member.markers if isinstance(m, Repeat)]

    if records and repeats:
        raise DefinitionError(owner, member.name, 'Record and Repeat are mutually exclusive, both are applied')
    if len(records) + len(repeats) > 1:
        raise DefinitionError(owner, member.name, 'more than one field marker is applied')
    if not records and not repeats:
        raise DefinitionError(owner, member.name, 'member carries neither Record nor Repeat')

    return records[0] if records else repeats[0]


def _build_record(owner: type, member: DiscoveredMember, marker: Record) -> MemberAccess:
    try:
        converter = scalar_converter(member.annotation)
    except UnsupportedTypeError as e:
        raise DefinitionError(owner, member.name, f'is marked Record but {e}') from e

    return MemberAccess(
        owner=owner,
        name=member.name,
        access=member.access,
        marker=marker,
        kind=AccessorKind.SCALAR,
        value_type=member.annotation,
        converter=converter,
    )


def _build_repeat(owner: type, member: DiscoveredMember, marker: Repeat) -> MemberAccess:
    element = sequence_element_type(member.annotation)
    if element is None:
        raise DefinitionError(owner, member.name, 'is marked Repeat but is not an iterable of T')

    element, _ = unwrap_annotation(element)

    if is_sequence_type(element):
        try:
            converter = sequence_converter(element)
        except UnsupportedTypeError as e:
            raise DefinitionError(owner, member.name, f'is marked Repeat but {e}') from e
        kind = AccessorKind.SIMPLE_REPEAT
    else:
        if not isinstance(element, type):
            raise DefinitionError(
                owner, member.name, f'is marked Repeat but element type {element!r} is neither whitelisted nor a class'
            )
        if get_serializable(element) is None:
            raise DefinitionError(
                owner, member.name, f'is marked Repeat but {element.__qualname__} is not marked serializable'
            )
        converter = None
        kind = AccessorKind.COMPLEX_REPEAT

    return MemberAccess(
        owner=owner,
        name=member.name,
        access=member.access,
        marker=marker,
        kind=kind,
        value_type=element,
        converter=converter,
    )


def build_member_access(owner: type, member: DiscoveredMember) -> MemberAccess:
    """
    Validate one marked member and build its rendering instructions.

    Args:
        owner: Class declaring the member
        member: Member as discovered on the class

    Returns:
        MemberAccess ready to render values of the member

    Raises:
        DefinitionError: If the markers or the declared type are inconsistent
    """
    try:
        marker = _single_marker(owner, member)
        if isinstance(marker, Record):
            return _build_record(owner, member, marker)
        return _build_repeat(owner, member, marker)
    except DefinitionError as e:
        logger.debug('Rejected member definition: %s', e)
        raise
