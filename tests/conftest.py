"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from chronicles.plan import PlanCache


@pytest.fixture
def plan_cache() -> Iterator[PlanCache]:
    """A private plan cache, isolated from the process-wide one."""
    cache = PlanCache()
    yield cache
    cache.clear()
