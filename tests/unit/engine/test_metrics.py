"""Tests for secondary metric estimation."""

import datetime

import pytest

from app.engine.metrics import average_heart_rate, estimate_metrics, keytel_calories, zone_seconds
from app.engine.strategies.base import build_result
from app.schemas.estimation import StepEstimate, StrategyKind
from app.schemas.profile import Activity, ActivityCategory, EstimationContext, Route, UserProfile
from app.schemas.zones import IntensityZone

REF_DAY = datetime.date(2024, 6, 1)


# ======================================================================
# Helpers
# ======================================================================


def _make_result(duration: float = 3600, intensity: float = 0.75, steps=None, distance=None):
    tss = duration / 3600 * intensity ** 2 * 100
    return build_result(StrategyKind.STRUCTURE, tss=tss, duration_seconds=duration, intensity_factor=intensity,
                        confidence_score=95, warnings=[], factors=[], step_breakdown=steps,
                        estimated_distance_meters=distance, )


def _make_context(category: ActivityCategory = ActivityCategory.BIKE, route: Route = None,
                  **profile) -> EstimationContext:
    return EstimationContext(profile=UserProfile(**profile), activity=Activity(category=category, route=route),
                             reference_date=REF_DAY, )


# ======================================================================
# Calories
# ======================================================================


class TestCalories:
    def test_power_tier(self):
        metrics = estimate_metrics(_make_result(), _make_context(ftp_watts=200))
        # 150 W for an hour = 540 kJ of work
        assert metrics.calorie_method == "power"
        assert metrics.calories == pytest.approx(540 / (0.24 * 4.184), abs=1)

    def test_heart_rate_tier_with_defaults_warns(self):
        metrics = estimate_metrics(_make_result(), _make_context(ActivityCategory.SWIM, threshold_hr_bpm=160))
        assert metrics.calorie_method == "heart_rate"
        assert any("Birth date not set" in w for w in metrics.warnings)
        assert any("Weight not set" in w for w in metrics.warnings)

    def test_heart_rate_tier_uses_profile(self):
        ctx = _make_context(ActivityCategory.SWIM, threshold_hr_bpm=160, weight_kg=65,
                            birth_date=datetime.date(1990, 1, 1))
        metrics = estimate_metrics(_make_result(), ctx)
        assert not metrics.warnings
        avg_hr = 60 + 0.75 * 100
        assert metrics.calories == pytest.approx(keytel_calories(avg_hr, 65, 34, 3600), abs=1)

    def test_tss_tier(self):
        metrics = estimate_metrics(_make_result(), _make_context(ActivityCategory.RUN))
        assert metrics.calorie_method == "tss"
        assert metrics.calories == pytest.approx(56.2 * 4, abs=1)
        assert any("FTP not set" in w for w in metrics.warnings)
        assert any("Threshold heart rate not set" in w for w in metrics.warnings)

    def test_keytel_never_negative(self):
        assert keytel_calories(40, 30, 10, 600) == 0.0


# ======================================================================
# Distance / averages
# ======================================================================


class TestDistanceAndAverages:
    def test_strength_has_no_distance(self):
        metrics = estimate_metrics(_make_result(), _make_context(ActivityCategory.STRENGTH))
        assert metrics.distance_meters is None
        assert metrics.avg_speed_mps is None

    def test_route_distance_wins(self):
        ctx = _make_context(ActivityCategory.RUN, route=Route(distance_meters=12000, elevation_gain_meters=150))
        metrics = estimate_metrics(_make_result(), ctx)
        assert metrics.distance_meters == 12000
        assert metrics.elevation_gain_meters == 150

    def test_distance_from_typical_speed(self):
        metrics = estimate_metrics(_make_result(intensity=0.75), _make_context(ActivityCategory.BIKE))
        assert metrics.distance_meters == 8.5 * 3600
        assert metrics.avg_speed_mps == pytest.approx(8.5)

    def test_power_is_none_without_ftp(self):
        assert estimate_metrics(_make_result(), _make_context()).avg_power_watts is None

    def test_swim_has_no_power(self):
        metrics = estimate_metrics(_make_result(), _make_context(ActivityCategory.SWIM, ftp_watts=250))
        assert metrics.avg_power_watts is None

    def test_moving_time(self):
        assert estimate_metrics(_make_result(), _make_context()).moving_time_seconds == 3456


class TestAverageHeartRate:
    def test_none_without_threshold(self):
        assert average_heart_rate(0.8, UserProfile(), None) is None

    def test_linear_below_threshold(self):
        profile = UserProfile(threshold_hr_bpm=170, resting_hr_bpm=50)
        assert average_heart_rate(0.5, profile, None) == pytest.approx(110)
        assert average_heart_rate(1.0, profile, None) == pytest.approx(170)

    def test_above_threshold_approaches_max(self):
        profile = UserProfile(threshold_hr_bpm=170, max_hr_bpm=190)
        assert average_heart_rate(1.1, profile, None) == pytest.approx(180)
        assert average_heart_rate(1.5, profile, None) == pytest.approx(190)


# ======================================================================
# Zones
# ======================================================================


class TestZoneSeconds:
    def test_whole_duration_in_one_zone(self):
        seconds = zone_seconds(_make_result(intensity=0.80))
        assert seconds[IntensityZone.TEMPO] == 3600
        assert sum(seconds.values()) == 3600

    def test_uses_step_breakdown(self):
        steps = [StepEstimate(name="Warm-up", duration_seconds=600, intensity_factor=0.5),
                 StepEstimate(name="On", duration_seconds=300, intensity_factor=1.1),
                 StepEstimate(name="Off", duration_seconds=300, intensity_factor=0.5), ]
        seconds = zone_seconds(_make_result(duration=1200, intensity=0.8, steps=steps))
        assert seconds[IntensityZone.RECOVERY] == 900
        assert seconds[IntensityZone.ANAEROBIC] == 300
        assert seconds[IntensityZone.TEMPO] == 0
