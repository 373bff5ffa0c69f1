"""
Training-load estimation and analytics engine.

Pure, synchronous functions over immutable inputs: no I/O, no shared
mutable state beyond the strategy registry populated at import time.
"""

from app.engine.estimator import (
    estimate_activity,
    estimate_activity_complete,
    estimate_batch,
    select_strategy,
    tss_range,
)
from app.engine.fatigue import FatigueConfig, estimate_weekly_load, predict_fatigue
from app.engine.metrics import estimate_metrics
from app.engine.training_load import (
    TrainingLoadConfig,
    build_actual_curve,
    build_ideal_curve,
    compute_series,
    form_label,
    summarize_weeks,
    weekly_compliance,
)
from app.engine.zones import classify, intensity_distribution

__all__ = [
    "FatigueConfig",
    "TrainingLoadConfig",
    "build_actual_curve",
    "build_ideal_curve",
    "classify",
    "compute_series",
    "estimate_activity",
    "estimate_activity_complete",
    "estimate_batch",
    "estimate_metrics",
    "estimate_weekly_load",
    "form_label",
    "intensity_distribution",
    "predict_fatigue",
    "select_strategy",
    "summarize_weeks",
    "tss_range",
    "weekly_compliance",
]
