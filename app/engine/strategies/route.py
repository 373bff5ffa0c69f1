"""
Route-based estimation.

Used when the activity has no structure but carries a route and is an
endurance activity.  Speed comes from a per-category base speed, shifted
by current fitness and slowed by terrain and surface::

    speed    = base_speed * fitness * terrain_factor * surface_factor
    duration = distance / speed
    IF       = flat_IF + min(grade * 5, 0.25) + surface_bonus
    TSS      = duration / 3600 * IF^2 * 100

Terrain is classified from the climb rate (metres gained per km):

    < 10   flat
    < 20   rolling
    < 40   hilly
    else   mountainous

For bikes with a known FTP the heuristic IF is replaced by a power model:
flat riding at ``flat_IF * FTP`` plus the average power needed to lift
rider and bike over the elevation gain.
"""

from typing import Optional

from app.engine.defaults import DEFAULT_WEIGHT_KG
from app.engine.physics import climbing_power, flat_speed_from_power
from app.engine.strategies.base import EstimationStrategy, build_result, canonical_tss
from app.schemas.estimation import EstimationResult, StrategyKind
from app.schemas.profile import ActivityCategory, EstimationContext, Route, Surface, Terrain

# m/s at moderate effort
BASE_SPEEDS: dict[ActivityCategory, float] = {
    ActivityCategory.RUN: 3.5,
    ActivityCategory.BIKE: 8.5,
    ActivityCategory.SWIM: 1.2,
}

FLAT_INTENSITY: dict[ActivityCategory, float] = {
    ActivityCategory.BIKE: 0.70,
    ActivityCategory.RUN: 0.72,
    ActivityCategory.SWIM: 0.68,
}

# Climb-rate upper bounds in m/km, checked in order.
_TERRAIN_THRESHOLDS: list[tuple[float, Terrain]] = [
    (10.0, Terrain.FLAT),
    (20.0, Terrain.ROLLING),
    (40.0, Terrain.HILLY),
]
_TERRAIN_ORDER = [Terrain.FLAT, Terrain.ROLLING, Terrain.HILLY, Terrain.MOUNTAINOUS]

_TERRAIN_SPEED_FACTORS: dict[Terrain, float] = {
    Terrain.FLAT: 1.0,
    Terrain.ROLLING: 0.95,
    Terrain.HILLY: 0.85,
    Terrain.MOUNTAINOUS: 0.75,
}

_SURFACE_SPEED_FACTORS: dict[Surface, float] = {
    Surface.ROAD: 1.0,
    Surface.TRACK: 1.0,
    Surface.WATER: 1.0,
    Surface.GRAVEL: 0.9,
    Surface.TRAIL: 0.85,
}

_SURFACE_IF_BONUS: dict[Surface, float] = {
    Surface.GRAVEL: 0.03,
    Surface.TRAIL: 0.05,
}

GRADE_IF_MULTIPLIER = 5.0
MAX_GRADE_IF_BONUS = 0.25

FITNESS_BASELINE_CTL = 50.0
FITNESS_SPEED_MIN = 0.8
FITNESS_SPEED_MAX = 1.2

BASE_SCORE = 70.0
# CTL for the heuristic, body weight for the power model.
FITNESS_SCORE_BONUS = 5.0
THRESHOLD_SCORE_BONUS = 5.0


def classify_terrain(route: Route) -> Terrain:
    """Terrain class from climb rate; an explicit hint can only make it harder."""
    climb_rate = route.elevation_gain_meters / (route.distance_meters / 1000.0)
    measured = Terrain.MOUNTAINOUS
    for limit, terrain in _TERRAIN_THRESHOLDS:
        if climb_rate < limit:
            measured = terrain
            break
    if route.terrain is not None and _TERRAIN_ORDER.index(route.terrain) > _TERRAIN_ORDER.index(measured):
        return route.terrain
    return measured


def fitness_speed_multiplier(current_ctl: Optional[float]) -> float:
    """CTL 50 is the baseline; CTL 100 is 10% faster."""
    if current_ctl is None:
        return 1.0
    multiplier = 1.0 + (current_ctl - FITNESS_BASELINE_CTL) / 500.0
    return min(max(multiplier, FITNESS_SPEED_MIN), FITNESS_SPEED_MAX)


class RouteStrategy(EstimationStrategy):
    """Estimate from distance, elevation gain, terrain and surface."""

    @property
    def kind(self) -> StrategyKind:
        return StrategyKind.ROUTE

    @property
    def priority(self) -> int:
        return 10

    def applies_to(self, context: EstimationContext) -> bool:
        return not context.activity.has_structure and context.activity.has_usable_route

    def estimate(self, context: EstimationContext) -> EstimationResult:
        profile = context.profile
        category = context.activity.category
        route = context.activity.route

        warnings: list[str] = []
        factors = ["route-based", "terrain-adjusted"]
        score = BASE_SCORE

        # Swimming has no meaningful gradient.
        if category is ActivityCategory.SWIM:
            terrain = Terrain.FLAT
            grade = 0.0
        else:
            terrain = classify_terrain(route)
            grade = route.elevation_gain_meters / route.distance_meters
        surface = route.surface or Surface.ROAD
        terrain_factor = _TERRAIN_SPEED_FACTORS[terrain] * _SURFACE_SPEED_FACTORS[surface]
        flat_if = FLAT_INTENSITY[category]

        use_power_model = category is ActivityCategory.BIKE and profile.ftp_watts is not None
        if use_power_model:
            weight = profile.weight_kg or DEFAULT_WEIGHT_KG
            if profile.weight_kg is None:
                warnings.append(f"Weight not set, using default {DEFAULT_WEIGHT_KG:.0f} kg for climbing power")
            else:
                factors.append("user-weight")
                score += FITNESS_SCORE_BONUS
            flat_power = profile.ftp_watts * flat_if
            speed = flat_speed_from_power(flat_power, weight) * terrain_factor
            duration = route.distance_meters / speed
            avg_power = flat_power + climbing_power(weight, route.elevation_gain_meters, duration)
            intensity_factor = avg_power / profile.ftp_watts + _SURFACE_IF_BONUS.get(surface, 0.0)
            factors.extend(["user-ftp", "power-model"])
            score += THRESHOLD_SCORE_BONUS
        else:
            if category is not ActivityCategory.BIKE and profile.threshold_pace_s_per_km:
                base_speed = flat_if * 1000.0 / profile.threshold_pace_s_per_km
                factors.append("user-threshold-pace")
                score += THRESHOLD_SCORE_BONUS
            else:
                base_speed = BASE_SPEEDS[category]
                if category is ActivityCategory.BIKE:
                    warnings.append("FTP not set, effort estimated from the route profile")
                else:
                    warnings.append("Threshold pace not set, using a typical speed for the route")
            speed = base_speed * fitness_speed_multiplier(profile.current_ctl) * terrain_factor
            duration = route.distance_meters / speed
            grade_bonus = min(grade * GRADE_IF_MULTIPLIER, MAX_GRADE_IF_BONUS)
            intensity_factor = flat_if + grade_bonus + _SURFACE_IF_BONUS.get(surface, 0.0)
            if profile.current_ctl is not None:
                factors.append("fitness-adjusted")
                score += FITNESS_SCORE_BONUS
        factors.append(f"terrain-{terrain.value}")

        return build_result(StrategyKind.ROUTE, tss=canonical_tss(duration, intensity_factor),
                            duration_seconds=duration, intensity_factor=intensity_factor, confidence_score=score,
                            warnings=warnings, factors=factors, estimated_distance_meters=route.distance_meters, )
