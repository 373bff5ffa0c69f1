"""Tests for the three estimation strategies and their registry."""

import datetime
import math

import pytest

from app.engine.strategies import StrategyRegistry
from app.engine.strategies.base import canonical_tss
from app.engine.strategies.route import RouteStrategy, classify_terrain, fitness_speed_multiplier
from app.engine.strategies.structure import SECONDS_PER_REP, UNTIL_FINISHED_SECONDS, StructureStrategy
from app.engine.strategies.template import TemplateStrategy, fitness_multipliers
from app.schemas.estimation import Confidence, StrategyKind
from app.schemas.profile import (
    Activity,
    ActivityCategory,
    ActivityLocation,
    ActivityStructure,
    DistanceDuration,
    EstimationContext,
    IntensityTarget,
    Interval,
    PlanStep,
    RepetitionsDuration,
    Route,
    Surface,
    TargetKind,
    Terrain,
    TimeDuration,
    UntilFinishedDuration,
    UserProfile,
)

REF_DAY = datetime.date(2024, 6, 1)


# ======================================================================
# Helpers
# ======================================================================


def _ftp(pct: float) -> list[IntensityTarget]:
    return [IntensityTarget(kind=TargetKind.PERCENT_FTP, value=pct)]


def _make_intervals_structure() -> ActivityStructure:
    """10' warm-up, 4 x (5' @ 105% / 3' @ 55%), 10' cool-down."""
    return ActivityStructure(intervals=[
        Interval(name="Warm-up", steps=[PlanStep(name="Warm-up", duration=TimeDuration(seconds=600),
                                                 targets=_ftp(60))]),
        Interval(name="Main set", repetitions=4,
                 steps=[PlanStep(name="On", duration=TimeDuration(seconds=300), targets=_ftp(105)),
                        PlanStep(name="Off", duration=TimeDuration(seconds=180), targets=_ftp(55)), ]),
        Interval(name="Cool-down", steps=[PlanStep(name="Cool-down", duration=TimeDuration(seconds=600),
                                                   targets=_ftp(50))]),
    ])


def _make_context(category: ActivityCategory = ActivityCategory.BIKE,
                  location: ActivityLocation = ActivityLocation.OUTDOOR, structure: ActivityStructure = None,
                  route: Route = None, **profile) -> EstimationContext:
    return EstimationContext(profile=UserProfile(**profile),
                             activity=Activity(category=category, location=location, structure=structure,
                                               route=route),
                             reference_date=REF_DAY, )


# ======================================================================
# Registry / selection
# ======================================================================


class TestStrategySelection:
    def test_all_builtins_registered(self):
        kinds = [s.kind for s in StrategyRegistry.ordered()]
        assert kinds == [StrategyKind.STRUCTURE, StrategyKind.ROUTE, StrategyKind.TEMPLATE]

    def test_structure_beats_route(self):
        ctx = _make_context(structure=_make_intervals_structure(), route=Route(distance_meters=30000))
        assert StrategyRegistry.select(ctx).kind is StrategyKind.STRUCTURE

    def test_route_beats_template(self):
        ctx = _make_context(route=Route(distance_meters=30000))
        assert StrategyRegistry.select(ctx).kind is StrategyKind.ROUTE

    def test_template_fallback(self):
        assert StrategyRegistry.select(_make_context()).kind is StrategyKind.TEMPLATE

    def test_empty_structure_is_ignored(self):
        ctx = _make_context(structure=ActivityStructure(intervals=[]))
        assert StrategyRegistry.select(ctx).kind is StrategyKind.TEMPLATE

    def test_strength_route_uses_template(self):
        ctx = _make_context(ActivityCategory.STRENGTH, route=Route(distance_meters=5000))
        assert StrategyRegistry.select(ctx).kind is StrategyKind.TEMPLATE

    def test_exactly_one_strategy_applies_first(self):
        ctx = _make_context(route=Route(distance_meters=30000))
        applicable = [s.kind for s in StrategyRegistry.ordered() if s.applies_to(ctx)]
        assert applicable[0] is StrategyKind.ROUTE

    def test_duplicate_registration_rejected(self):
        with pytest.raises(ValueError):
            StrategyRegistry.register(TemplateStrategy())


# ======================================================================
# Structure
# ======================================================================


class TestStructureStrategy:
    def test_canonical_formula_holds(self):
        result = StructureStrategy().estimate(_make_context(structure=_make_intervals_structure(), ftp_watts=250))
        expected = canonical_tss(result.duration_seconds, result.intensity_factor)
        assert result.tss == pytest.approx(expected, abs=0.5)

    def test_duration_and_breakdown(self):
        result = StructureStrategy().estimate(_make_context(structure=_make_intervals_structure(), ftp_watts=250))
        assert result.duration_seconds == 600 + 4 * 480 + 600
        assert len(result.step_breakdown) == 1 + 8 + 1
        assert [s.name for s in result.step_breakdown[1:3]] == ["On", "Off"]

    def test_fourth_power_weighting_exceeds_plain_mean(self):
        result = StructureStrategy().estimate(_make_context(structure=_make_intervals_structure(), ftp_watts=250))
        plain_mean = sum(s.duration_seconds * s.intensity_factor for s in result.step_breakdown) / sum(
            s.duration_seconds for s in result.step_breakdown)
        assert result.intensity_factor > plain_mean

    def test_high_confidence_with_ftp(self):
        result = StructureStrategy().estimate(_make_context(structure=_make_intervals_structure(), ftp_watts=250))
        assert result.confidence is Confidence.HIGH
        assert result.confidence_score == 95
        assert "user-ftp" in result.factors

    def test_high_confidence_with_threshold_hr_only(self):
        ctx = _make_context(structure=_make_intervals_structure(), threshold_hr_bpm=165)
        result = StructureStrategy().estimate(ctx)
        assert result.confidence is Confidence.HIGH
        assert result.confidence_score == 90

    def test_medium_confidence_without_thresholds(self):
        result = StructureStrategy().estimate(_make_context(structure=_make_intervals_structure()))
        assert result.confidence is Confidence.MEDIUM
        assert any("FTP and threshold heart rate not set" in w for w in result.warnings)

    def test_repetition_and_until_finished_steps(self):
        structure = ActivityStructure(intervals=[Interval(steps=[
            PlanStep(name="Squats", duration=RepetitionsDuration(count=12)),
            PlanStep(name="Plank", duration=UntilFinishedDuration()),
        ])])
        result = StructureStrategy().estimate(_make_context(ActivityCategory.STRENGTH, structure=structure))
        assert result.duration_seconds == 12 * SECONDS_PER_REP + UNTIL_FINISHED_SECONDS
        assert any("no fixed length" in w for w in result.warnings)
        # Untargeted steps fall back to IF 0.60
        assert result.intensity_factor == pytest.approx(0.60)

    def test_distance_step_with_pace_target(self):
        structure = ActivityStructure(intervals=[Interval(steps=[PlanStep(
            duration=DistanceDuration(meters=5000), targets=[IntensityTarget(kind=TargetKind.PACE, value=250)])])])
        result = StructureStrategy().estimate(_make_context(ActivityCategory.RUN, structure=structure,
                                                            threshold_pace_s_per_km=250))
        assert result.duration_seconds == 1250
        assert result.intensity_factor == pytest.approx(1.0)

    def test_ftp_changes_tss_of_distance_plan(self):
        """A stronger rider covers the same %FTP distance plan faster."""
        structure = ActivityStructure(intervals=[Interval(steps=[
            PlanStep(duration=DistanceDuration(meters=40000), targets=_ftp(80))])])
        weaker = StructureStrategy().estimate(_make_context(structure=structure, ftp_watts=250, weight_kg=70))
        stronger = StructureStrategy().estimate(_make_context(structure=structure, ftp_watts=300, weight_kg=70))
        assert weaker.tss != stronger.tss
        assert stronger.duration_seconds < weaker.duration_seconds

    def test_assumed_target_warning_reported_once(self):
        structure = ActivityStructure(intervals=[Interval(repetitions=3, steps=[
            PlanStep(duration=TimeDuration(seconds=300), targets=[IntensityTarget(kind=TargetKind.WATTS,
                                                                                  value=220)])])])
        result = StructureStrategy().estimate(_make_context(structure=structure))
        assert sum("FTP not set" in w for w in result.warnings) == 1

    def test_percent_max_hr_without_max_hr_warns(self):
        structure = ActivityStructure(intervals=[Interval(steps=[
            PlanStep(duration=TimeDuration(seconds=1800),
                     targets=[IntensityTarget(kind=TargetKind.PERCENT_MAX_HR, value=80)])])])
        result = StructureStrategy().estimate(_make_context(structure=structure, threshold_hr_bpm=165))
        assert any("Max HR not set" in w for w in result.warnings)

    @pytest.mark.parametrize("category, step, profile", [
        (ActivityCategory.RUN,
         PlanStep(duration=DistanceDuration(meters=1_000_000), targets=[IntensityTarget(kind=TargetKind.PACE,
                                                                                         value=60)]),
         {"threshold_pace_s_per_km": 6000}),
        (ActivityCategory.BIKE,
         PlanStep(duration=TimeDuration(seconds=86_400), targets=[IntensityTarget(kind=TargetKind.WATTS,
                                                                                   value=3000)]),
         {"ftp_watts": 1}),
        (ActivityCategory.BIKE, PlanStep(duration=DistanceDuration(meters=1_000_000), targets=_ftp(1)),
         {"ftp_watts": 1}),
    ])
    def test_extreme_valid_inputs_give_finite_estimate(self, category, step, profile):
        structure = ActivityStructure(intervals=[Interval(repetitions=50, steps=[step])])
        result = StructureStrategy().estimate(_make_context(category, structure=structure, **profile))
        assert math.isfinite(result.tss)
        assert math.isfinite(result.intensity_factor)
        assert result.duration_seconds > 0


# ======================================================================
# Route
# ======================================================================


class TestRouteStrategy:
    @pytest.mark.parametrize("gain, terrain", [(0, Terrain.FLAT), (99, Terrain.FLAT), (100, Terrain.ROLLING),
                                               (200, Terrain.HILLY), (399, Terrain.HILLY),
                                               (400, Terrain.MOUNTAINOUS), ])
    def test_terrain_classification(self, gain, terrain):
        assert classify_terrain(Route(distance_meters=10000, elevation_gain_meters=gain)) is terrain

    def test_terrain_hint_only_makes_harder(self):
        route = Route(distance_meters=10000, elevation_gain_meters=250, terrain=Terrain.FLAT)
        assert classify_terrain(route) is Terrain.HILLY
        route = Route(distance_meters=10000, elevation_gain_meters=0, terrain=Terrain.HILLY)
        assert classify_terrain(route) is Terrain.HILLY

    @pytest.mark.parametrize("ctl, expected", [(None, 1.0), (50, 1.0), (100, 1.1), (0, 0.9), (500, 1.2)])
    def test_fitness_multiplier(self, ctl, expected):
        assert fitness_speed_multiplier(ctl) == pytest.approx(expected)

    def test_flat_run(self):
        result = RouteStrategy().estimate(_make_context(ActivityCategory.RUN, route=Route(distance_meters=10500)))
        assert result.duration_seconds == 3000
        assert result.intensity_factor == pytest.approx(0.72)
        assert result.estimated_distance_meters == 10500
        assert result.tss == pytest.approx(canonical_tss(3000, 0.72), abs=0.1)

    def test_climbing_raises_intensity(self):
        flat = RouteStrategy().estimate(_make_context(ActivityCategory.RUN, route=Route(distance_meters=10000)))
        hilly = RouteStrategy().estimate(_make_context(ActivityCategory.RUN, route=Route(
            distance_meters=10000, elevation_gain_meters=300)))
        assert hilly.intensity_factor > flat.intensity_factor
        assert hilly.duration_seconds > flat.duration_seconds

    def test_trail_surface_is_slower_and_harder(self):
        road = RouteStrategy().estimate(_make_context(ActivityCategory.RUN, route=Route(distance_meters=10000)))
        trail = RouteStrategy().estimate(_make_context(ActivityCategory.RUN, route=Route(
            distance_meters=10000, surface=Surface.TRAIL)))
        assert trail.duration_seconds > road.duration_seconds
        assert trail.intensity_factor == pytest.approx(road.intensity_factor + 0.05)

    def test_bike_power_model_with_ftp(self):
        ctx = _make_context(route=Route(distance_meters=60000, elevation_gain_meters=600), ftp_watts=260,
                            weight_kg=72)
        result = RouteStrategy().estimate(ctx)
        assert "power-model" in result.factors
        assert result.confidence_score == 80
        assert result.intensity_factor > 0.70

    def test_bike_without_ftp_warns(self):
        result = RouteStrategy().estimate(_make_context(route=Route(distance_meters=40000)))
        assert result.confidence is Confidence.MEDIUM
        assert 70 <= result.confidence_score <= 80
        assert any("FTP not set" in w for w in result.warnings)


# ======================================================================
# Template
# ======================================================================


class TestTemplateStrategy:
    def test_defaults_without_ctl(self):
        result = TemplateStrategy().estimate(_make_context(ActivityCategory.RUN))
        assert result.duration_seconds == 2700
        assert result.intensity_factor == pytest.approx(0.78)
        assert result.tss == 55

    def test_indoor_and_outdoor_differ(self):
        indoor = TemplateStrategy().estimate(_make_context(location=ActivityLocation.INDOOR))
        outdoor = TemplateStrategy().estimate(_make_context(location=ActivityLocation.OUTDOOR))
        assert indoor.intensity_factor != outdoor.intensity_factor

    @pytest.mark.parametrize("ctl, if_mult, tss_mult", [(50, 1.0, 1.0), (100, 1.1, 1.5), (0, 0.9, 0.5),
                                                        (70, 1.04, 1.2), ])
    def test_fitness_multipliers(self, ctl, if_mult, tss_mult):
        assert fitness_multipliers(ctl) == (pytest.approx(if_mult), pytest.approx(tss_mult))

    def test_low_confidence_and_profile_warning(self):
        result = TemplateStrategy().estimate(_make_context(ActivityCategory.SWIM))
        assert result.confidence is Confidence.LOW
        assert result.warnings
        assert any("profile" in w for w in result.warnings)
        assert any("structure or select a route" in w for w in result.warnings)

    def test_confidence_capped_at_low(self):
        result = TemplateStrategy().estimate(_make_context(current_ctl=60, ftp_watts=250))
        assert result.confidence_score == 65
        assert result.confidence is Confidence.LOW

    def test_strength_route_ignored_with_warning(self):
        ctx = _make_context(ActivityCategory.STRENGTH, route=Route(distance_meters=5000))
        result = TemplateStrategy().estimate(ctx)
        assert any("Routes are ignored" in w for w in result.warnings)


# ======================================================================
# Purity
# ======================================================================


class TestIdempotence:
    @pytest.mark.parametrize("strategy, ctx", [
        (StructureStrategy(), _make_context(structure=_make_intervals_structure(), ftp_watts=250)),
        (RouteStrategy(), _make_context(route=Route(distance_meters=42000, elevation_gain_meters=800))),
        (TemplateStrategy(), _make_context(current_ctl=55)),
    ])
    def test_same_context_same_result(self, strategy, ctx):
        first = strategy.estimate(ctx)
        second = strategy.estimate(ctx.model_copy(deep=True))
        assert first.model_dump_json() == second.model_dump_json()
