"""
Abstract base class for estimation strategies.

Every strategy turns an :class:`EstimationContext` into an
:class:`EstimationResult`.  A strategy declares:

- a unique kind (``structure`` / ``route`` / ``template``)
- a priority (lower runs first during selection)
- whether the context carries the data it needs
- the estimation itself, a pure function of the context
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Optional

from app.schemas.estimation import EstimationResult, StepEstimate, StrategyKind, confidence_from_score
from app.schemas.profile import EstimationContext


def canonical_tss(duration_seconds: float, intensity_factor: float) -> float:
    """TSS = hours x IF^2 x 100."""
    return duration_seconds / 3600.0 * intensity_factor ** 2 * 100.0


def build_result(kind: StrategyKind, tss: float, duration_seconds: float, intensity_factor: float,
                 confidence_score: float, warnings: list[str], factors: list[str],
                 step_breakdown: Optional[list[StepEstimate]] = None,
                 estimated_distance_meters: Optional[float] = None, ) -> EstimationResult:
    """Assemble a result, deriving the confidence tier from the score."""
    if not all(math.isfinite(v) for v in (tss, duration_seconds, intensity_factor)):
        raise ArithmeticError(f"{kind.value} strategy produced a non-finite estimate")
    score = min(max(confidence_score, 0.0), 100.0)
    return EstimationResult(strategy=kind, tss=round(max(tss, 0.0), 1), duration_seconds=max(round(duration_seconds), 1),
                            intensity_factor=max(round(intensity_factor, 3), 0.001), confidence=confidence_from_score(score),
                            confidence_score=score, warnings=list(dict.fromkeys(warnings)), factors=factors,
                            step_breakdown=step_breakdown or [],
                            estimated_distance_meters=estimated_distance_meters, )


class EstimationStrategy(ABC):
    """Abstract base class that every estimation strategy must implement."""

    @property
    @abstractmethod
    def kind(self) -> StrategyKind:
        """Unique strategy identifier."""
        ...

    @property
    @abstractmethod
    def priority(self) -> int:
        """Selection order; the lowest applicable priority wins."""
        ...

    @abstractmethod
    def applies_to(self, context: EstimationContext) -> bool:
        """Whether *context* carries the data this strategy needs."""
        ...

    @abstractmethod
    def estimate(self, context: EstimationContext) -> EstimationResult:
        """Estimate TSS, duration and IF for *context*.

        Must not mutate the context and must not perform I/O.
        """
        ...
