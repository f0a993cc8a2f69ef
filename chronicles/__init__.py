"""
epic-chronicles: marker-driven conversion of Python objects into Epic
Chronicles line-oriented text.

Declare members with Record/Repeat markers in Annotated metadata, mark the
class with @serializable, then convert instances with ChroniclesSerializer.
"""

from __future__ import annotations

from chronicles.accessor import AccessKind, AccessorKind, MemberAccess
from chronicles.exceptions import ChroniclesError, DefinitionError, UnsupportedTypeError
from chronicles.markers import FieldMarker, Record, Repeat, Serializable, serializable
from chronicles.plan import SerializationPlan, describe_plan, get_plan
from chronicles.serializer import ChroniclesSerializer, convert

__all__ = [
    'AccessKind',
    'AccessorKind',
    'ChroniclesError',
    'ChroniclesSerializer',
    'DefinitionError',
    'FieldMarker',
    'MemberAccess',
    'Record',
    'Repeat',
    'Serializable',
    'SerializationPlan',
    'UnsupportedTypeError',
    'convert',
    'describe_plan',
    'get_plan',
    'serializable',
]
