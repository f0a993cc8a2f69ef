"""
Serialization plans and the process-wide plan cache.

A plan is the field-ordered list of MemberAccess instructions for one class.
Plans are derived purely from static class metadata, so they are built once
per class and reused for the life of the process. Failed builds are not
cached; a retry re-runs discovery and raises the same DefinitionError.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from chronicles.accessor import AccessorKind, MemberAccess, build_member_access
from chronicles.exceptions import DefinitionError
from chronicles.introspection import discover_members

__all__ = [
    'PlanCache',
    'SerializationPlan',
    'build_plan',
    'describe_plan',
    'get_plan',
    'plan_cache',
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SerializationPlan:
    """Immutable, field-ordered member instructions for one class."""

    owner: type
    members: tuple[MemberAccess, ...]

    def __iter__(self) -> Iterator[MemberAccess]:
        return iter(self.members)

    def __len__(self) -> int:
        return len(self.members)

    @property
    def fields(self) -> list[int]:
        return [member.field for member in self.members]


def build_plan(cls: type) -> SerializationPlan:
    """
    Discover, validate and order the marked members of a class.

    Members sharing a field id keep their discovery order (stable sort).

    Raises:
        DefinitionError: If any marked member is declared inconsistently
    """
    accessors = [build_member_access(cls, member) for member in discover_members(cls)]
    accessors.sort(key=lambda access: access.field)
    return SerializationPlan(owner=cls, members=tuple(accessors))


class PlanCache:
    """
    Thread-safe get-or-insert store of plans keyed by class.

    Reads are lock-free. Concurrent first use may build a plan more than
    once, but only the first inserted plan is ever returned.

    Nested element types of complex repeats are planned before the outer plan
    is inserted, so a malformed nested type fails the outer build. Types
    already being planned on this thread are skipped, which ends recursion
    for self-referencing types.
    """

    def __init__(self) -> None:
        self._plans: dict[type, SerializationPlan] = {}
        self._lock = threading.Lock()
        self._local = threading.local()

    def get(self, cls: type) -> SerializationPlan:
        plan = self._plans.get(cls)
        if plan is not None:
            return plan

        building: list[type] = self._local.__dict__.setdefault('building', [])
        pending: list[type] = self._local.__dict__.setdefault('pending', [])
        outermost = not building

        building.append(cls)
        try:
            built = build_plan(cls)

            # A plan whose nested types are still being planned is only valid once they are
            provisional = False
            for member in built:
                if member.kind is not AccessorKind.COMPLEX_REPEAT:
                    continue
                nested = member.value_type
                if nested not in building:
                    self.get(nested)
                if nested in building or nested in pending:
                    provisional = True

            with self._lock:
                plan = self._plans.setdefault(cls, built)
            if plan is built:
                if provisional:
                    pending.append(cls)
                logger.debug('Built serialization plan for %s: fields %s', cls.__qualname__, plan.fields)
        except DefinitionError:
            if outermost:
                self._evict(pending)
            raise
        finally:
            building.pop()
            if outermost:
                pending.clear()

        return plan

    def _evict(self, classes: list[type]) -> None:
        with self._lock:
            for cls in classes:
                self._plans.pop(cls, None)

    def clear(self) -> None:
        with self._lock:
            self._plans.clear()

    def __contains__(self, cls: object) -> bool:
        return cls in self._plans

    def __len__(self) -> int:
        return len(self._plans)


# Module-level singleton shared by every serializer
plan_cache = PlanCache()


def get_plan(cls: type) -> SerializationPlan:
    """Return the cached plan for `cls`, building it on first use."""
    return plan_cache.get(cls)


def describe_plan(cls: type) -> dict[str, Any]:
    """
    Generate a summary of a class's serialization plan.

    Args:
        cls: Serializable class to inspect

    Returns:
        Dict with the class name and one entry per planned member

    Example:
        >>> describe_plan(Person)['members'][0]
        {'field': 1, 'name': 'name', 'access': 'field', 'kind': 'scalar', 'value_type': 'str', 'omit_if_empty': False}
    """
    plan = get_plan(cls)
    return {
        'type_name': cls.__qualname__,
        'total_members': len(plan),
        'members': [
            {
                'field': member.field,
                'name': member.name,
                'access': member.access.value,
                'kind': member.kind.value,
                'value_type': getattr(member.value_type, '__qualname__', repr(member.value_type)),
                'omit_if_empty': member.omit_if_empty,
            }
            for member in plan
        ],
    }
