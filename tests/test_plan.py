"""Tests for serialization plans and the plan cache."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Annotated

import pytest
from pydantic import BaseModel

from chronicles import plan as plan_module
from chronicles.exceptions import DefinitionError
from chronicles.markers import Record, serializable
from chronicles.plan import PlanCache, SerializationPlan, build_plan, describe_plan, get_plan

from chronicles_models import (
    BadInner,
    BothMarkers,
    CycleHead,
    CyclePartner,
    Duplicates,
    Empty,
    Inner,
    Node,
    Outer,
    OuterWithBadInner,
    Person,
    Shuffled,
)


def test_plan_orders_members_by_field() -> None:
    """Declared 3, 1, 2 (the 2 on a property) -> planned 1, 2, 3."""
    plan = build_plan(Shuffled)
    assert plan.fields == [1, 2, 3]
    assert [m.name for m in plan] == ['a', 'b', 'c']


def test_duplicate_fields_keep_declaration_order() -> None:
    plan = build_plan(Duplicates)
    assert [(m.field, m.name) for m in plan] == [(1, 'early'), (5, 'first'), (5, 'second')]


def test_plan_for_type_without_members_is_empty() -> None:
    plan = build_plan(Empty)
    assert len(plan) == 0
    assert list(plan) == []


def test_cache_returns_identical_plan(plan_cache: PlanCache) -> None:
    first = plan_cache.get(Person)
    second = plan_cache.get(Person)
    assert first is second
    assert Person in plan_cache
    assert len(plan_cache) == 1


def test_process_wide_cache() -> None:
    assert get_plan(Person) is get_plan(Person)
    assert Person in plan_module.plan_cache


def test_concurrent_first_access_observes_one_plan(plan_cache: PlanCache) -> None:
    """Every racing caller gets the same plan object, even if several build one."""

    @serializable()
    class Racy(BaseModel):
        a: Annotated[str, Record(2)]
        b: Annotated[int, Record(1)]

    workers = 16
    barrier = threading.Barrier(workers)

    def fetch() -> SerializationPlan:
        barrier.wait()
        return plan_cache.get(Racy)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        plans = list(pool.map(lambda _: fetch(), range(workers)))

    assert all(p is plans[0] for p in plans)
    assert plans[0].fields == [1, 2]
    assert len(plan_cache) == 1


def test_failed_build_is_not_cached(plan_cache: PlanCache) -> None:
    """A malformed type raises the same error on every attempt and never enters the cache."""
    messages = []
    for _ in range(3):
        with pytest.raises(DefinitionError) as exc_info:
            plan_cache.get(BothMarkers)
        messages.append(str(exc_info.value))

    assert len(set(messages)) == 1
    assert 'BothMarkers.value' in messages[0]
    assert BothMarkers not in plan_cache


def test_clear(plan_cache: PlanCache) -> None:
    plan_cache.get(Person)
    plan_cache.clear()
    assert len(plan_cache) == 0


def test_describe_plan() -> None:
    summary = describe_plan(Person)
    assert summary['type_name'] == 'Person'
    assert summary['total_members'] == 2
    assert summary['members'] == [
        {
            'field': 1,
            'name': 'name',
            'access': 'field',
            'kind': 'scalar',
            'value_type': 'str',
            'omit_if_empty': False,
        },
        {
            'field': 2,
            'name': 'tags',
            'access': 'field',
            'kind': 'simple_repeat',
            'value_type': 'str',
            'omit_if_empty': True,
        },
    ]


def test_nested_plans_are_built_with_the_owner(plan_cache: PlanCache) -> None:
    plan_cache.get(Outer)
    assert Inner in plan_cache


def test_self_referencing_type_builds(plan_cache: PlanCache) -> None:
    plan = plan_cache.get(Node)
    assert plan.fields == [1, 2]
    assert plan_cache.get(Node) is plan
    assert len(plan_cache) == 1


def test_malformed_nested_type_fails_owner_build(plan_cache: PlanCache) -> None:
    """The owner never enters the cache while a nested element type is malformed."""
    for _ in range(2):
        with pytest.raises(DefinitionError, match='BadInner.value'):
            plan_cache.get(OuterWithBadInner)
    assert OuterWithBadInner not in plan_cache
    assert BadInner not in plan_cache


def test_failed_cycle_leaves_no_partial_plans(plan_cache: PlanCache) -> None:
    """Plans that depended on a type still being planned are evicted when it fails."""
    for cls in (CycleHead, CyclePartner):
        with pytest.raises(DefinitionError, match='BadInner.value'):
            plan_cache.get(cls)
    assert len(plan_cache) == 0
