"""
Introspection utilities for Chronicles serialization.

The metadata source of the engine: finds members carrying Record/Repeat
markers on pydantic models, dataclasses and plain annotated classes, and
unwraps their annotations down to the type the conversion registry knows.

Handles Annotated metadata, Python 3.12+ type aliases and Optional unions
(e.g. Annotated[str, Record(1)] | None).
"""

from __future__ import annotations

import collections
import enum
import functools
import logging
import types
import typing
from collections import abc
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin

from pydantic import BaseModel

from chronicles.exceptions import DefinitionError
from chronicles.markers import FieldMarker

__all__ = [
    'AccessKind',
    'DiscoveredMember',
    'discover_members',
    'read_member',
    'sequence_element_type',
    'unwrap_annotation',
]

logger = logging.getLogger(__name__)

# Generic origins whose single type argument is the element type
_SEQUENCE_ORIGINS = frozenset(
    {
        list,
        set,
        frozenset,
        collections.deque,
        abc.Sequence,
        abc.MutableSequence,
        abc.Set,
        abc.MutableSet,
        abc.Collection,
        abc.Iterable,
    }
)


class AccessKind(enum.Enum):
    """How a member's runtime value is read off an instance."""

    FIELD = 'field'
    PROPERTY = 'property'


@dataclass(frozen=True)
class DiscoveredMember:
    """A member carrying at least one field marker, as found on the class."""

    name: str
    access: AccessKind
    annotation: Any  # unwrapped declared type
    markers: tuple[FieldMarker, ...]


def unwrap_annotation(annotation: Any) -> tuple[Any, tuple[FieldMarker, ...]]:
    """
    Strip Annotated layers, type aliases and Optional from an annotation.

    Args:
        annotation: Raw (resolved) annotation

    Returns:
        Tuple of (underlying type, field markers collected along the way)

    Example:
        >>> unwrap_annotation(Annotated[str, Record(1)] | None)
        (<class 'str'>, (Record(field=1, omit_if_empty=False),))
    """
    markers: list[FieldMarker] = []

    while True:
        # Python 3.12+ `type X = ...` aliases
        if isinstance(annotation, typing.TypeAliasType):
            annotation = annotation.__value__
            continue

        origin = get_origin(annotation)

        if origin is Annotated:
            markers.extend(m for m in annotation.__metadata__ if isinstance(m, FieldMarker))
            annotation = annotation.__origin__
            continue

        # X | None unwraps to X; other unions are left for validation to reject
        if origin is Union or origin is types.UnionType:
            args = get_args(annotation)
            non_none = [arg for arg in args if arg is not type(None)]
            if len(non_none) == 1 and len(args) == 2:
                annotation = non_none[0]
                continue

        return annotation, tuple(markers)


def sequence_element_type(tp: Any) -> Any | None:
    """
    Return T for an iterable-of-T annotation, None if `tp` is not one.

    str and bytes are never treated as sequences of characters.

    Example:
        >>> sequence_element_type(list[int])
        <class 'int'>
        >>> sequence_element_type(str) is None
        True
    """
    if isinstance(tp, type) and issubclass(tp, (str, bytes, bytearray)):
        return None

    origin = get_origin(tp)

    if origin is None:
        # Concrete subclasses such as `class Tags(list[str])`
        for base in getattr(tp, '__orig_bases__', ()):
            element = sequence_element_type(base)
            if element is not None:
                return element
        return None

    args = get_args(tp)

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
        return None

    if origin in _SEQUENCE_ORIGINS and len(args) == 1:
        return args[0]

    return None


def _field_annotations(cls: type) -> list[tuple[str, Any, tuple[FieldMarker, ...]]]:
    """Yield (name, annotation, extra markers) for every declared field, in order."""
    if issubclass(cls, BaseModel):
        # Pydantic moves top-level Annotated metadata into FieldInfo.metadata
        return [
            (name, info.annotation, tuple(m for m in info.metadata if isinstance(m, FieldMarker)))
            for name, info in cls.model_fields.items()
        ]

    try:
        hints = typing.get_type_hints(cls, include_extras=True)
    except NameError as e:
        raise DefinitionError(cls, None, f'cannot resolve annotations ({e})') from e

    return [(name, hint, ()) for name, hint in hints.items() if get_origin(hint) is not ClassVar]


def _property_getters(cls: type) -> dict[str, Any]:
    """Map property name -> getter function, most-derived definition wins."""
    getters: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object or klass.__module__.split('.')[0] == 'pydantic':
            continue
        for name, attr in vars(klass).items():
            if isinstance(attr, property) and attr.fget is not None:
                getters[name] = attr.fget
            elif isinstance(attr, functools.cached_property):
                getters[name] = attr.func
    return getters


def _return_annotation(cls: type, name: str, getter: Any) -> Any | None:
    if 'return' not in getattr(getter, '__annotations__', {}):
        return None
    try:
        return typing.get_type_hints(getter, include_extras=True).get('return')
    except NameError as e:
        raise DefinitionError(cls, name, f'cannot resolve property annotation ({e})') from e


def discover_members(cls: type) -> list[DiscoveredMember]:
    """
    Find all fields and properties of `cls` carrying a Record or Repeat marker.

    Fields come first in declaration order (base classes before subclasses),
    followed by properties. Unmarked members are ignored.

    Args:
        cls: Class to inspect

    Returns:
        Discovered members, in discovery order

    Raises:
        DefinitionError: If an annotation cannot be resolved
    """
    members: list[DiscoveredMember] = []

    for name, annotation, extra in _field_annotations(cls):
        base, markers = unwrap_annotation(annotation)
        markers = extra + markers
        if markers:
            members.append(DiscoveredMember(name, AccessKind.FIELD, base, markers))

    for name, getter in _property_getters(cls).items():
        annotation = _return_annotation(cls, name, getter)
        if annotation is None:
            continue
        base, markers = unwrap_annotation(annotation)
        if markers:
            members.append(DiscoveredMember(name, AccessKind.PROPERTY, base, markers))

    logger.debug('Discovered %d marked member(s) on %s', len(members), cls.__qualname__)
    return members


def read_member(instance: Any, name: str, access: AccessKind) -> Any:
    """Read the runtime value of one member off an instance."""
    match access:
        case AccessKind.FIELD:
            return getattr(instance, name)
        case AccessKind.PROPERTY:
            # Resolve through the type so instance attributes cannot shadow the property
            return getattr(type(instance), name).__get__(instance, type(instance))
