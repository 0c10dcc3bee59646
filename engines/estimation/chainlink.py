"""
Yardbook Estimation Engine — Chainlink Fence Materials
=======================================================
Material take-off for a chainlink fence from its runs, terminal posts
and gates.

Conventions:
- Line posts every 10 ft
- Top and bottom rail in 21 ft sticks
- 1.5 tie wires per linear foot
- Residential fences use SS20 pipe, everything else SS40
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from core.money import round2, to_decimal

POST_SPACING_FT = 10
RAIL_STICK_FT = 21
TIE_WIRES_PER_FT = Decimal("1.5")
FABRIC_TYPE = "9ga wire"

FENCE_TYPES = frozenset({"residential", "commercial"})


@dataclass(frozen=True)
class ChainlinkInput:
    runs: Sequence[float]
    fence_height: str
    fence_type: str
    ends: int
    corners: int
    fence_color: str = "galvanized"
    single_gates: int = 0
    double_gates: int = 0
    pedestrian_gates: int = 0
    include_privacy_slats: bool = False
    include_barbed_wire: bool = False
    include_bottom_rail: bool = False
    include_rail_ends: bool = False

    def __post_init__(self):
        object.__setattr__(self, "runs", tuple(to_decimal(r) for r in self.runs))
        if any(run < 0 for run in self.runs):
            raise ValueError("run lengths must be non-negative.")
        if self.fence_type not in FENCE_TYPES:
            raise ValueError(
                f"fence_type '{self.fence_type}' not valid. "
                f"Must be one of: {sorted(FENCE_TYPES)}"
            )
        for name in ("ends", "corners", "single_gates", "double_gates", "pedestrian_gates"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer.")
        height_feet(self.fence_height)

    @property
    def total_length(self) -> Decimal:
        return sum(self.runs, Decimal(0))


def height_feet(fence_height: str) -> int:
    """Leading whole feet of a height label: "6", "6ft", "6' tall"."""
    match = re.match(r"\s*(\d+)", str(fence_height))
    if match is None:
        raise ValueError(f"fence_height '{fence_height}' has no leading number.")
    return int(match.group(1))


@dataclass(frozen=True)
class ChainlinkMaterials:
    fabric_type: str
    fabric_footage: Decimal
    pipe_weight: str
    fence_color: str
    interior_line_posts: int = 0
    top_rail_sticks: int = 0
    tie_wires: int = 0
    loop_caps: int = 0
    post_caps: int = 0
    brace_bands: int = 0
    tension_bars: int = 0
    tension_bands: int = 0
    nuts_and_bolts: int = 0
    gate_posts: int = 0
    gate_hardware_sets: int = 0
    gate_latches: int = 0
    gate_hinges: int = 0
    privacy_slats: Optional[int] = None
    barbed_wire: Optional[int] = None
    bottom_rail_sticks: Optional[int] = None
    rail_ends: Optional[int] = None


@dataclass(frozen=True)
class ChainlinkPricing:
    interior_line_post: Decimal = Decimal(0)
    fabric_per_foot: Decimal = Decimal(0)
    top_rail_per_stick: Decimal = Decimal(0)
    tie_wire: Decimal = Decimal(0)
    loop_cap: Decimal = Decimal(0)
    post_cap: Decimal = Decimal(0)
    brace_band: Decimal = Decimal(0)
    tension_bar: Decimal = Decimal(0)
    tension_band: Decimal = Decimal(0)
    nut_and_bolt: Decimal = Decimal(0)

    def __post_init__(self):
        for name in self.__dataclass_fields__:
            object.__setattr__(self, name, to_decimal(getattr(self, name)))


def _ceil(value: Decimal) -> int:
    return int(math.ceil(value))


def interior_line_posts(post_spots: int, ends: int, corners: int) -> int:
    if ends == 1 and corners == 0:
        return max(0, post_spots - 1 - corners)
    if ends == 0:
        return max(0, post_spots - corners)
    # two (or more) ends
    return max(0, post_spots - 2 - corners)


def calculate_chainlink_materials(fence: ChainlinkInput) -> ChainlinkMaterials:
    length = fence.total_length
    sections = _ceil(length / POST_SPACING_FT)
    post_spots = sections + 1
    line_posts = interior_line_posts(post_spots, fence.ends, fence.corners)

    terminal_posts = fence.ends + fence.corners
    brace_bands = fence.ends + 2 * fence.corners
    tension_bands = height_feet(fence.fence_height) * terminal_posts

    gates = fence.single_gates + fence.double_gates + fence.pedestrian_gates
    rail_sticks = _ceil(length / RAIL_STICK_FT)

    return ChainlinkMaterials(
        fabric_type=FABRIC_TYPE,
        fabric_footage=length,
        pipe_weight="SS20 WT" if fence.fence_type == "residential" else "SS40 WT",
        fence_color=fence.fence_color,
        interior_line_posts=line_posts,
        top_rail_sticks=rail_sticks,
        tie_wires=_ceil(length * TIE_WIRES_PER_FT),
        loop_caps=line_posts,
        post_caps=terminal_posts,
        brace_bands=brace_bands,
        tension_bars=brace_bands,
        tension_bands=tension_bands,
        nuts_and_bolts=tension_bands + brace_bands,
        gate_posts=gates * 2,
        gate_hardware_sets=gates,
        gate_latches=gates,
        gate_hinges=fence.single_gates * 2 + fence.double_gates * 4 + fence.pedestrian_gates * 2,
        privacy_slats=_ceil(length) if fence.include_privacy_slats else None,
        barbed_wire=_ceil(length) if fence.include_barbed_wire else None,
        bottom_rail_sticks=rail_sticks if fence.include_bottom_rail else None,
        rail_ends=(
            terminal_posts * 2 * (2 if fence.include_bottom_rail else 1)
            if fence.include_rail_ends
            else None
        ),
    )


def calculate_chainlink_cost(materials: ChainlinkMaterials, pricing: ChainlinkPricing) -> Decimal:
    """Priced take-off. Gates and optional extras are quoted separately."""
    total = (
        materials.interior_line_posts * pricing.interior_line_post
        + materials.fabric_footage * pricing.fabric_per_foot
        + materials.top_rail_sticks * pricing.top_rail_per_stick
        + materials.tie_wires * pricing.tie_wire
        + materials.loop_caps * pricing.loop_cap
        + materials.post_caps * pricing.post_cap
        + materials.brace_bands * pricing.brace_band
        + materials.tension_bars * pricing.tension_bar
        + materials.tension_bands * pricing.tension_band
        + materials.nuts_and_bolts * pricing.nut_and_bolt
    )
    return round2(total)
