# shikishi/services/placement.py
"""
Automatic placement of messages around the recipient label.

Coordinates are percentages of the board (0..100 on both axes) and the
recipient label sits at the centre (50, 50). A new message is dropped on a
random point of a ring whose radius grows with the number of messages already
on the board, so the board fills from the centre outward. Candidates that land
on the recipient label or too close to an existing message are rejected; after
the attempt budget runs out the last candidate is used anyway so adding a
message is never blocked.
"""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

logger = logging.getLogger("shikishi.placement")
logger.setLevel(logging.INFO)

CENTER_X = 50.0
CENTER_Y = 50.0

NARROW_MAX_WIDTH_PX = 480
MEDIUM_MAX_WIDTH_PX = 768

MAX_ATTEMPTS = 50
WIDEN_AFTER_FRACTION = 0.7

CLAMP_MIN = 10.0
CLAMP_MAX = 90.0

# Narrowest ring a band may collapse to when the tier radius caps it
MIN_BAND_WIDTH = 10.0


class ViewportClass(str, Enum):
    NARROW = "narrow"
    MEDIUM = "medium"
    WIDE = "wide"


class SizeTier(str, Enum):
    NORMAL = "normal"
    LARGE = "large"
    XLARGE = "xlarge"


MIN_DISTANCE = {
    ViewportClass.NARROW: 12.0,
    ViewportClass.MEDIUM: 15.0,
    ViewportClass.WIDE: 20.0,
}

CENTER_EXCLUSION_RADIUS = {
    ViewportClass.NARROW: 15.0,
    ViewportClass.MEDIUM: 20.0,
    ViewportClass.WIDE: 25.0,
}

TIER_MAX_RADIUS = {
    SizeTier.NORMAL: 45.0,
    SizeTier.LARGE: 60.0,
    SizeTier.XLARGE: 70.0,
}

# (count upper bound, min radius, max radius); None closes the table
RADIUS_BANDS: Tuple[Tuple[Optional[int], float, float], ...] = (
    (5, 25.0, 35.0),
    (10, 35.0, 45.0),
    (None, 45.0, 60.0),
)

# (count upper bound, tier) used when the board has no explicit tier
AUTO_SIZE_TIERS: Tuple[Tuple[Optional[int], SizeTier], ...] = (
    (20, SizeTier.NORMAL),
    (40, SizeTier.LARGE),
    (None, SizeTier.XLARGE),
)


@dataclass(frozen=True)
class Position:
    x: float
    y: float

    def distance_to(self, other: "Position") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


CENTER = Position(CENTER_X, CENTER_Y)

PositionLike = Union[Position, Tuple[float, float], Mapping[str, Any]]


@dataclass(frozen=True)
class RadiusBand:
    min_radius: float
    max_radius: float


@dataclass(frozen=True)
class PlacementRules:
    """Every tunable the allocator reads. Defaults are the module constants."""
    narrow_max_width_px: int = NARROW_MAX_WIDTH_PX
    medium_max_width_px: int = MEDIUM_MAX_WIDTH_PX
    min_distance: Mapping[ViewportClass, float] = field(default_factory=lambda: dict(MIN_DISTANCE))
    center_exclusion_radius: Mapping[ViewportClass, float] = field(
        default_factory=lambda: dict(CENTER_EXCLUSION_RADIUS)
    )
    tier_max_radius: Mapping[SizeTier, float] = field(default_factory=lambda: dict(TIER_MAX_RADIUS))
    radius_bands: Tuple[Tuple[Optional[int], float, float], ...] = RADIUS_BANDS
    auto_size_tiers: Tuple[Tuple[Optional[int], SizeTier], ...] = AUTO_SIZE_TIERS
    max_attempts: int = MAX_ATTEMPTS
    widen_after_fraction: float = WIDEN_AFTER_FRACTION
    min_band_width: float = MIN_BAND_WIDTH
    clamp_min: float = CLAMP_MIN
    clamp_max: float = CLAMP_MAX


DEFAULT_RULES = PlacementRules()


@dataclass(frozen=True)
class PlacementOutcome:
    position: Position
    attempts: int
    degraded: bool
    size_tier: SizeTier
    band: RadiusBand


def as_position(value: PositionLike) -> Position:
    """Accept Position objects, (x, y) pairs or {"x", "y"} mappings."""
    if isinstance(value, Position):
        return value
    if isinstance(value, Mapping):
        return Position(float(value["x"]), float(value["y"]))
    x, y = value
    return Position(float(x), float(y))


def classify_viewport(viewport_width_px: int, rules: PlacementRules = DEFAULT_RULES) -> ViewportClass:
    if viewport_width_px <= rules.narrow_max_width_px:
        return ViewportClass.NARROW
    if viewport_width_px <= rules.medium_max_width_px:
        return ViewportClass.MEDIUM
    return ViewportClass.WIDE


def min_distance_for(viewport_width_px: int, rules: PlacementRules = DEFAULT_RULES) -> float:
    return rules.min_distance[classify_viewport(viewport_width_px, rules)]


def center_exclusion_for(viewport_width_px: int, rules: PlacementRules = DEFAULT_RULES) -> float:
    return rules.center_exclusion_radius[classify_viewport(viewport_width_px, rules)]


def max_radius_for(size_tier: SizeTier, rules: PlacementRules = DEFAULT_RULES) -> float:
    return rules.tier_max_radius[SizeTier(size_tier)]


def _lookup(table, count: int):
    for upper_bound, *value in table:
        if upper_bound is None or count < upper_bound:
            return value
    # Tables are closed by a None row; fall back to the outermost entry anyway
    return table[-1][1:]


def size_tier_for_count(count: int, rules: PlacementRules = DEFAULT_RULES) -> SizeTier:
    (tier,) = _lookup(rules.auto_size_tiers, count)
    return tier


def radius_band_for(
    count: int,
    size_tier: SizeTier,
    rules: PlacementRules = DEFAULT_RULES,
) -> RadiusBand:
    """
    Ring the next message is sampled from, given how many messages exist.

    The outer bound is capped by the tier's max radius. The inner bound is
    pulled in so the capped band stays at least ``min_band_width`` wide.
    """
    band_min, band_max = _lookup(rules.radius_bands, count)
    cap = max_radius_for(size_tier, rules)
    return RadiusBand(
        min_radius=min(band_min, cap - rules.min_band_width),
        max_radius=min(band_max, cap),
    )


def clamp_position(position: Position, rules: PlacementRules = DEFAULT_RULES) -> Position:
    return Position(
        x=max(rules.clamp_min, min(rules.clamp_max, position.x)),
        y=max(rules.clamp_min, min(rules.clamp_max, position.y)),
    )


def overlaps_center(position: PositionLike, center_exclusion_radius: float) -> bool:
    """True when the position would sit on the recipient label."""
    return as_position(position).distance_to(CENTER) < center_exclusion_radius


def overlaps_existing(
    position: PositionLike,
    existing_positions: Iterable[PositionLike],
    min_distance: float,
) -> bool:
    """True when any existing position is closer than min_distance."""
    candidate = as_position(position)
    for other in existing_positions:
        if candidate.distance_to(as_position(other)) < min_distance:
            return True
    return False


def polar_to_position(angle_deg: float, radius: float) -> Position:
    angle = math.radians(angle_deg)
    return Position(CENTER_X + radius * math.cos(angle), CENTER_Y + radius * math.sin(angle))


def widest_radius(rules: PlacementRules = DEFAULT_RULES) -> float:
    """Distance from the centre to the farthest corner of the clamp box."""
    return max(
        math.hypot(corner_x - CENTER_X, corner_y - CENTER_Y)
        for corner_x in (rules.clamp_min, rules.clamp_max)
        for corner_y in (rules.clamp_min, rules.clamp_max)
    )


def find_position(
    existing_positions: Iterable[PositionLike],
    viewport_width_px: int,
    size_tier: Optional[SizeTier] = None,
    rng: Optional[random.Random] = None,
    rules: PlacementRules = DEFAULT_RULES,
) -> PlacementOutcome:
    """
    Pick a position for a new message.

    Returns the first sampled candidate that clears both the recipient label
    and every existing message. When none does within ``rules.max_attempts``
    the last candidate is returned with ``degraded=True``.
    """
    if rng is None:
        rng = random.Random()
    existing: List[Position] = [as_position(p) for p in existing_positions]
    count = len(existing)

    min_distance = min_distance_for(viewport_width_px, rules)
    exclusion = center_exclusion_for(viewport_width_px, rules)
    tier = SizeTier(size_tier) if size_tier is not None else size_tier_for_count(count, rules)
    band = radius_band_for(count, tier, rules)
    widen_max = max(band.max_radius, max_radius_for(tier, rules), widest_radius(rules))
    widen_after = int(rules.max_attempts * rules.widen_after_fraction)

    candidate = clamp_position(polar_to_position(0.0, band.min_radius), rules)
    for attempt in range(1, rules.max_attempts + 1):
        angle = rng.uniform(0.0, 360.0)
        if attempt > widen_after:
            radius = rng.uniform(band.min_radius, widen_max)
        else:
            radius = rng.uniform(band.min_radius, band.max_radius)
        candidate = clamp_position(polar_to_position(angle, radius), rules)

        if overlaps_center(candidate, exclusion):
            continue
        if overlaps_existing(candidate, existing, min_distance):
            continue
        return PlacementOutcome(candidate, attempt, False, tier, band)

    logger.info(
        f"Placement budget exhausted after {rules.max_attempts} attempts "
        f"(existing={count}, tier={tier.value}); using overlapping position"
    )
    return PlacementOutcome(candidate, rules.max_attempts, True, tier, band)


def allocate(
    existing_positions: Iterable[PositionLike],
    viewport_width_px: int,
    size_tier: Optional[SizeTier] = None,
    rng: Optional[random.Random] = None,
    rules: PlacementRules = DEFAULT_RULES,
) -> Position:
    return find_position(existing_positions, viewport_width_px, size_tier, rng, rules).position
