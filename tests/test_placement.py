# tests/test_placement.py
"""
Geometric properties of the message allocator: clamp range, centre
exclusion, spacing from existing messages, band selection and termination.
Coordinates are random, so assertions are about distances and ranges.
"""

from __future__ import annotations

import math
import random

import pytest

from shikishi.services.placement import (
    CENTER,
    DEFAULT_RULES,
    PlacementRules,
    Position,
    SizeTier,
    ViewportClass,
    allocate,
    as_position,
    center_exclusion_for,
    clamp_position,
    classify_viewport,
    find_position,
    max_radius_for,
    min_distance_for,
    overlaps_center,
    overlaps_existing,
    radius_band_for,
    size_tier_for_count,
    widest_radius,
)


class ScriptedRandom:
    """Replays a fixed list of values for uniform(); cycles when exhausted."""

    def __init__(self, fractions: list[float]) -> None:
        self._fractions = fractions
        self._i = 0

    def uniform(self, a: float, b: float) -> float:
        f = self._fractions[self._i % len(self._fractions)]
        self._i += 1
        return a + (b - a) * f


def in_range(p: Position) -> bool:
    return DEFAULT_RULES.clamp_min <= p.x <= DEFAULT_RULES.clamp_max and (
        DEFAULT_RULES.clamp_min <= p.y <= DEFAULT_RULES.clamp_max
    )


def outer_ring(n: int, radius: float = 40.0) -> list[Position]:
    return [
        Position(50 + radius * math.cos(2 * math.pi * i / n), 50 + radius * math.sin(2 * math.pi * i / n))
        for i in range(n)
    ]


def test_classify_viewport_breakpoints() -> None:
    assert classify_viewport(320) is ViewportClass.NARROW
    assert classify_viewport(480) is ViewportClass.NARROW
    assert classify_viewport(481) is ViewportClass.MEDIUM
    assert classify_viewport(768) is ViewportClass.MEDIUM
    assert classify_viewport(769) is ViewportClass.WIDE
    assert classify_viewport(1920) is ViewportClass.WIDE


def test_narrow_viewport_thresholds_not_larger_than_wide() -> None:
    assert min_distance_for(400) <= min_distance_for(1200)
    assert center_exclusion_for(400) <= center_exclusion_for(1200)
    assert min_distance_for(600) <= min_distance_for(1200)
    assert center_exclusion_for(400) <= center_exclusion_for(600)


def test_max_radius_grows_with_tier() -> None:
    assert max_radius_for(SizeTier.NORMAL) < max_radius_for(SizeTier.LARGE) < max_radius_for(SizeTier.XLARGE)


def test_radius_band_min_is_non_decreasing_with_count() -> None:
    for tier in SizeTier:
        mins = [radius_band_for(n, tier).min_radius for n in range(0, 60)]
        assert mins == sorted(mins)


def test_radius_band_tiers() -> None:
    assert radius_band_for(0, SizeTier.XLARGE).min_radius == 25.0
    assert radius_band_for(5, SizeTier.XLARGE).min_radius == 35.0
    assert radius_band_for(10, SizeTier.XLARGE).min_radius == 45.0
    # normal boards cap the outer band at their edge but keep it a ring
    band = radius_band_for(12, SizeTier.NORMAL)
    assert band.min_radius == 35.0
    assert band.max_radius == 45.0


@pytest.mark.parametrize("count", [0, 5, 10, 15, 19, 25, 60])
@pytest.mark.parametrize("tier", list(SizeTier))
def test_radius_band_never_collapses(count: int, tier: SizeTier) -> None:
    band = radius_band_for(count, tier)
    assert band.max_radius - band.min_radius >= DEFAULT_RULES.min_band_width
    assert band.max_radius <= max_radius_for(tier)


def test_size_tier_for_count() -> None:
    assert size_tier_for_count(0) is SizeTier.NORMAL
    assert size_tier_for_count(19) is SizeTier.NORMAL
    assert size_tier_for_count(20) is SizeTier.LARGE
    assert size_tier_for_count(40) is SizeTier.XLARGE


def test_overlap_predicates() -> None:
    assert overlaps_center(Position(55, 50), 25)
    assert not overlaps_center(Position(80, 50), 25)
    # boundary distance is not an overlap
    assert not overlaps_center(Position(75, 50), 25)

    existing = [Position(20, 20), {"x": 80, "y": 80}, (20, 80)]
    assert overlaps_existing(Position(25, 25), existing, 20)
    assert not overlaps_existing(Position(50, 15), existing, 20)
    assert not overlaps_existing(Position(50, 15), [], 20)


def test_as_position_accepts_mappings_and_pairs() -> None:
    assert as_position({"x": 1, "y": 2}) == Position(1.0, 2.0)
    assert as_position((3, 4)) == Position(3.0, 4.0)
    p = Position(5, 6)
    assert as_position(p) is p


def test_clamp_position() -> None:
    assert clamp_position(Position(-5, 120)) == Position(10.0, 90.0)
    assert clamp_position(Position(42, 58)) == Position(42, 58)


@pytest.mark.parametrize("seed", range(25))
def test_empty_board_normal_tier_lands_in_inner_band(seed: int) -> None:
    outcome = find_position([], 1024, SizeTier.NORMAL, rng=random.Random(seed))
    p = outcome.position
    assert not outcome.degraded
    assert in_range(p)
    assert 25.0 <= p.distance_to(CENTER) <= 45.0


def test_repeated_calls_are_each_valid() -> None:
    a = allocate([], 1024, SizeTier.NORMAL)
    b = allocate([], 1024, SizeTier.NORMAL)
    for p in (a, b):
        assert in_range(p)
        assert p.distance_to(CENTER) >= center_exclusion_for(1024)


@pytest.mark.parametrize("seed", range(25))
def test_non_degraded_result_respects_spacing(seed: int) -> None:
    existing = outer_ring(6, radius=30.0)
    outcome = find_position(existing, 1024, SizeTier.LARGE, rng=random.Random(seed))
    assert in_range(outcome.position)
    if not outcome.degraded:
        assert outcome.position.distance_to(CENTER) >= center_exclusion_for(1024)
        assert all(outcome.position.distance_to(e) >= min_distance_for(1024) for e in existing)


def test_outer_ring_gap_between_twelve_messages_is_found() -> None:
    # twelve messages every 30 degrees at r=55, all at least 20 apart
    existing = outer_ring(12, radius=55.0)
    assert all(a.distance_to(b) >= 20.0 for i, a in enumerate(existing) for b in existing[i + 1:])

    # 15 degrees sits between two messages; radius fraction 0 -> inner edge of the band
    outcome = find_position(existing, 1024, SizeTier.NORMAL, rng=ScriptedRandom([15.0 / 360.0, 0.0]))
    assert outcome.band.min_radius == 35.0
    assert not outcome.degraded
    assert outcome.attempts == 1
    assert in_range(outcome.position)
    assert outcome.position.distance_to(CENTER) >= 25.0
    assert all(outcome.position.distance_to(e) >= 20.0 for e in existing)


@pytest.mark.parametrize("seed", range(20))
def test_outer_band_finds_free_side_of_board(seed: int) -> None:
    # right side and top/bottom middle taken, left side free
    existing = [Position(x, y) for x in (70, 90) for y in (10, 30, 50, 70, 90)]
    existing += [Position(50, 10), Position(50, 90)]
    assert len(existing) == 12

    outcome = find_position(existing, 1024, None, rng=random.Random(seed))
    assert outcome.size_tier is SizeTier.NORMAL
    assert outcome.band.min_radius < outcome.band.max_radius
    assert not outcome.degraded
    assert in_range(outcome.position)
    assert outcome.position.distance_to(CENTER) >= 25.0
    assert all(outcome.position.distance_to(e) >= 20.0 for e in existing)


def test_widened_attempts_reach_clamp_corners() -> None:
    assert widest_radius() == pytest.approx(40.0 * math.sqrt(2))
    rules = PlacementRules(widen_after_fraction=0.0)
    # 45 degrees at the widest radius lands on the (90, 90) corner
    outcome = find_position([], 1024, SizeTier.NORMAL, rng=ScriptedRandom([45.0 / 360.0, 1.0]), rules=rules)
    assert outcome.position.x == pytest.approx(90.0)
    assert outcome.position.y == pytest.approx(90.0)


def test_dense_board_degrades_but_terminates() -> None:
    # grid every 5 units covers the whole clamp square
    existing = [Position(x, y) for x in range(10, 91, 5) for y in range(10, 91, 5)]
    outcome = find_position(existing, 1024, SizeTier.XLARGE, rng=random.Random(7))
    assert outcome.degraded
    assert outcome.attempts == DEFAULT_RULES.max_attempts
    assert in_range(outcome.position)


def test_first_acceptable_candidate_wins() -> None:
    # angle fraction 0 -> 0 degrees, radius fraction 0.5 -> middle of the inner band
    rng = ScriptedRandom([0.0, 0.5])
    outcome = find_position([], 1024, SizeTier.NORMAL, rng=rng)
    assert outcome.attempts == 1
    assert outcome.position.x == pytest.approx(80.0)
    assert outcome.position.y == pytest.approx(50.0)


def test_rejects_candidate_next_to_existing_message() -> None:
    # first candidate (80, 50) is blocked; second at 180 degrees -> (20, 50)
    rng = ScriptedRandom([0.0, 0.5, 0.5, 0.5])
    outcome = find_position([Position(80, 50)], 1024, SizeTier.NORMAL, rng=rng)
    assert outcome.attempts == 2
    assert outcome.position.x == pytest.approx(20.0)
    assert outcome.position.y == pytest.approx(50.0)


def test_auto_tier_used_when_none_given() -> None:
    existing = outer_ring(25, radius=38.0)
    outcome = find_position(existing, 1024, None, rng=random.Random(3))
    assert outcome.size_tier is SizeTier.LARGE


def test_custom_rules_change_budget_and_clamp() -> None:
    rules = PlacementRules(max_attempts=3, clamp_min=5.0, clamp_max=95.0)
    existing = [Position(x, y) for x in range(5, 96, 5) for y in range(5, 96, 5)]
    outcome = find_position(existing, 1024, SizeTier.NORMAL, rng=random.Random(1), rules=rules)
    assert outcome.degraded
    assert outcome.attempts == 3
    assert 5.0 <= outcome.position.x <= 95.0 and 5.0 <= outcome.position.y <= 95.0
