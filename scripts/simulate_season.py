"""Replay a block of completed training against a planned CTL build.

Prints the actual CTL / ATL / TSB curve next to the ideal trajectory,
then a weekly summary and the intensity distribution of the block.

Usage:
    python scripts/simulate_season.py
"""

import datetime
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.engine.training_load import build_actual_curve, build_ideal_curve, summarize_weeks
from app.engine.zones import intensity_distribution
from app.schemas.training_load import CompletedActivity, PeriodizationTemplate

START = datetime.date(2025, 3, 3)
WEEKS = 6
STARTING_CTL = 45.0
TARGET_CTL = 55.0

# ─── Weekly pattern: (weekday, TSS, IF); week 4 is a recovery week ──
BUILD_WEEK = [
    (0, 45, 0.62),   # easy spin
    (1, 95, 0.88),   # threshold intervals
    (3, 70, 0.72),   # endurance run
    (4, 40, 0.58),   # recovery swim
    (5, 150, 0.74),  # long ride
    (6, 65, 0.70),   # long run
]
RECOVERY_WEEK = [(1, 50, 0.65), (3, 45, 0.62), (5, 80, 0.68)]


def _activities() -> list[CompletedActivity]:
    activities = []
    for week in range(WEEKS):
        pattern = RECOVERY_WEEK if week == 3 else BUILD_WEEK
        scale = 1.0 + 0.05 * week
        monday = START + datetime.timedelta(weeks=week)
        for weekday, tss, intensity in pattern:
            activities.append(CompletedActivity(date=monday + datetime.timedelta(days=weekday), tss=tss * scale,
                                                intensity_factor=intensity, ))
    return activities


def main():
    activities = _activities()
    end = START + datetime.timedelta(weeks=WEEKS, days=-1)

    actual = build_actual_curve(activities, START, end, STARTING_CTL, STARTING_CTL)
    ideal = build_ideal_curve(PeriodizationTemplate(starting_ctl=STARTING_CTL, target_ctl=TARGET_CTL,
                                                    start_date=START, target_date=end, ))
    ideal_by_date = {point.date: point for point in ideal.points}

    # ── Daily curve ─────────────────────────────────────────────────
    print()
    print("=" * 72)
    print(f"{'Date':<12} {'TSS':>6} {'CTL':>7} {'ATL':>7} {'TSB':>7}  {'Form':<13} {'Ideal CTL':>9}")
    print("=" * 72)
    for point in actual.points:
        ideal_point = ideal_by_date.get(point.date)
        ideal_ctl = f"{ideal_point.ctl:>9.1f}" if ideal_point else f"{'--':>9}"
        print(f"{point.date.isoformat():<12} {point.tss:>6.0f} {point.ctl:>7.1f} {point.atl:>7.1f} "
              f"{point.tsb:>7.1f}  {point.form.value:<13} {ideal_ctl}")

    # ── Weekly summary ──────────────────────────────────────────────
    print()
    print("=" * 72)
    print(f"{'Week':<10} {'TSS':>7} {'Start CTL':>10} {'End CTL':>8} {'TSB':>7} {'Ramp %':>8}")
    print("=" * 72)
    for week in summarize_weeks(actual):
        print(f"{week.iso_year}-W{week.iso_week:02d}  {week.total_tss:>7.0f} {week.start_ctl:>10.1f} "
              f"{week.end_ctl:>8.1f} {week.end_tsb:>7.1f} {week.ramp_rate:>8.1f}")

    # ── Intensity distribution ──────────────────────────────────────
    distribution = intensity_distribution(activities)
    print()
    print("=" * 72)
    for zone, pct in distribution.percentages.items():
        print(f"{zone.value:<14} {pct:>5.1f}%  {'#' * round(pct / 2)}")
    print()
    for recommendation in distribution.recommendations:
        print(f"- {recommendation}")


if __name__ == "__main__":
    main()
