"""
Cycling power / speed model.

Steady-state road cycling on flat ground::

    P = Crr * m * g * v  +  0.5 * rho * CdA * v^3

Coefficients are typical for a road bike on tarmac, rider on the hoods.
"""

from __future__ import annotations

GRAVITY = 9.81
AIR_DENSITY = 1.225
DRAG_AREA_M2 = 0.32
ROLLING_RESISTANCE = 0.005
BIKE_MASS_KG = 9.0


def power_at_speed(speed_mps: float, mass_kg: float) -> float:
    rolling = ROLLING_RESISTANCE * mass_kg * GRAVITY * speed_mps
    aero = 0.5 * AIR_DENSITY * DRAG_AREA_M2 * speed_mps ** 3
    return rolling + aero


def flat_speed_from_power(power_watts: float, rider_kg: float) -> float:
    """Invert :func:`power_at_speed` by bisection (monotonic in speed)."""
    mass = rider_kg + BIKE_MASS_KG
    low, high = 0.0, 30.0
    for _ in range(60):
        mid = (low + high) / 2.0
        if power_at_speed(mid, mass) < power_watts:
            low = mid
        else:
            high = mid
    return (low + high) / 2.0


def climbing_power(rider_kg: float, elevation_gain_m: float, duration_seconds: float) -> float:
    """Average extra power needed to lift rider and bike by the gain."""
    if duration_seconds <= 0:
        return 0.0
    return (rider_kg + BIKE_MASS_KG) * GRAVITY * elevation_gain_m / duration_seconds
