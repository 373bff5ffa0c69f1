"""
Intensity zone schemas.

Seven ordered zones over the Intensity Factor (IF, decimal, 1.0 =
threshold).  Lower bounds are inclusive, upper bounds exclusive:

- ``recovery``       — IF < 0.55
- ``endurance``      — 0.55 <= IF < 0.75
- ``tempo``          — 0.75 <= IF < 0.85
- ``threshold``      — 0.85 <= IF < 0.95
- ``vo2max``         — 0.95 <= IF < 1.05
- ``anaerobic``      — 1.05 <= IF < 1.15
- ``neuromuscular``  — IF >= 1.15

Zones are only ever derived after the fact from measured or estimated
IF; they are never assigned when scheduling.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class IntensityZone(str, Enum):
    RECOVERY = "recovery"
    ENDURANCE = "endurance"
    TEMPO = "tempo"
    THRESHOLD = "threshold"
    VO2MAX = "vo2max"
    ANAEROBIC = "anaerobic"
    NEUROMUSCULAR = "neuromuscular"

    @property
    def rank(self) -> int:
        """Position in the ordered zone list (0 = recovery)."""
        return ZONE_ORDER.index(self)

    @property
    def bounds(self) -> tuple[float, float]:
        """``(low_inclusive, high_exclusive)`` IF bounds of the zone."""
        return ZONE_BOUNDARIES[self]


ZONE_ORDER: list[IntensityZone] = list(IntensityZone)

ZONE_BOUNDARIES: dict[IntensityZone, tuple[float, float]] = {
    IntensityZone.RECOVERY: (0.0, 0.55),
    IntensityZone.ENDURANCE: (0.55, 0.75),
    IntensityZone.TEMPO: (0.75, 0.85),
    IntensityZone.THRESHOLD: (0.85, 0.95),
    IntensityZone.VO2MAX: (0.95, 1.05),
    IntensityZone.ANAEROBIC: (1.05, 1.15),
    IntensityZone.NEUROMUSCULAR: (1.15, float("inf")),
}


class IntensityDistribution(BaseModel):
    """TSS-weighted share of completed training per zone."""

    percentages: dict[IntensityZone, float] = Field(..., description="Percent of total TSS per zone (0-100)")
    total_tss: float = Field(..., ge=0.0)
    total_activities: int = Field(..., ge=0)
    activities_with_intensity: int = Field(..., ge=0)
    recommendations: list[str] = Field(default_factory=list)
